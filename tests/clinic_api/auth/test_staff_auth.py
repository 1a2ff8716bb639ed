import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from clinic_api.auth import jwt_handler
from clinic_api.auth.dependencies import require_staff
from clinic_api.core import config
from clinic_api.issue_token import main as issue_token_main


def bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme='Bearer', credentials=token)


def test_create_access_token_round_trips_subject_and_role() -> None:
    token = jwt_handler.create_access_token('desk@example.com')

    payload = jwt_handler.decode_access_token(token)

    assert payload['sub'] == 'desk@example.com'
    assert payload['role'] == config.STAFF_ROLE


def test_require_staff_returns_subject_for_staff_token() -> None:
    token = jwt_handler.create_access_token('desk@example.com')

    assert require_staff(bearer(token)) == 'desk@example.com'


def test_require_staff_rejects_garbage_token() -> None:
    with pytest.raises(HTTPException) as exception_info:
        require_staff(bearer('not-a-jwt'))

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'Invalid token'


def test_require_staff_rejects_token_signed_with_other_key(monkeypatch: pytest.MonkeyPatch) -> None:
    token = jwt_handler.create_access_token('desk@example.com')
    monkeypatch.setattr(config, 'JWT_SECRET_KEY', 'another-secret')

    with pytest.raises(HTTPException) as exception_info:
        require_staff(bearer(token))

    assert exception_info.value.status_code == 401


def test_require_staff_rejects_non_staff_role() -> None:
    token = jwt_handler.create_access_token('mina@example.com', role='patient')

    with pytest.raises(HTTPException) as exception_info:
        require_staff(bearer(token))

    assert exception_info.value.status_code == 403


def test_validate_runtime_config_refuses_default_secret_in_production(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'APP_ENV', 'production')
    monkeypatch.setattr(config, 'JWT_SECRET_KEY', 'change-me')

    with pytest.raises(RuntimeError):
        config.validate_runtime_config()


def test_issue_token_prints_staff_token(capsys: pytest.CaptureFixture[str]) -> None:
    issue_token_main(['desk@example.com', '--minutes', '5'])

    token = capsys.readouterr().out.strip()
    assert jwt_handler.decode_access_token(token)['sub'] == 'desk@example.com'
