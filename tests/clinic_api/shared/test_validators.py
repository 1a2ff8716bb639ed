from datetime import datetime, timedelta, timezone

import pytest

from clinic_api.shared.validators import (
    optional_text,
    require_text,
    to_naive_utc,
    validate_email,
    validate_identifier,
    validate_time_order,
)


def test_require_text_strips_value() -> None:
    assert require_text('  Riverside  ', 'name') == 'Riverside'


def test_require_text_rejects_overlong_value() -> None:
    with pytest.raises(ValueError):
        require_text('x' * 201, 'name')


def test_optional_text_maps_blank_to_none() -> None:
    assert optional_text('   ', 'specialization') is None
    assert optional_text(None, 'specialization') is None


@pytest.mark.parametrize('email', ['', 'mina', 'mina@', 'mina@example', 'mi na@example.com'])
def test_validate_email_rejects_malformed_addresses(email: str) -> None:
    with pytest.raises(ValueError):
        validate_email(email)


@pytest.mark.parametrize('value', [0, -3, True])
def test_validate_identifier_rejects_non_positive_values(value: int) -> None:
    with pytest.raises(ValueError):
        validate_identifier(value, 'doctor ID')


def test_to_naive_utc_leaves_naive_values_alone() -> None:
    value = datetime(2024, 1, 1, 9, 0)

    assert to_naive_utc(value) is value


def test_to_naive_utc_converts_offsets() -> None:
    value = datetime(2024, 1, 1, 9, 0, tzinfo=timezone(timedelta(hours=-5)))

    assert to_naive_utc(value) == datetime(2024, 1, 1, 14, 0)


def test_validate_time_order_accepts_increasing_range() -> None:
    validate_time_order(datetime(2024, 1, 1, 9), datetime(2024, 1, 1, 17), 'open_time', 'close_time')
