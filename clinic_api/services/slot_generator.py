"""Slot generation from a clinic's operating calendar.

A doctor's day is cut into fixed one-hour steps starting at the clinic's open
time. Steps that start inside the lunch window are dropped, every other step
becomes a bookable slot numbered from 1 in start order. The last slot is not
truncated, so it may end after closing time when the open window is not a
whole number of hours.
"""

from datetime import datetime, timedelta

from clinic_api.models.clinic import Clinic
from clinic_api.models.doctor import Slot
from clinic_api.shared.validators import to_naive_utc

SLOT_INTERVAL = timedelta(hours=1)


def _as_datetime(value: datetime | str | None, field_name: str) -> datetime:
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip())
        except ValueError as exc:
            raise ValueError(f'Clinic {field_name} is not a valid timestamp: {value!r}') from exc

    if not isinstance(value, datetime):
        raise ValueError(f'Clinic {field_name} is missing or not a timestamp.')

    return to_naive_utc(value)


def is_lunch_break_start(slot_start: datetime, lunch_start: datetime, lunch_end: datetime) -> bool:
    return lunch_start <= slot_start < lunch_end


def generate_slots(clinic: Clinic) -> list[Slot]:
    """Build the ordered, unsaved slots for a doctor working at ``clinic``."""
    open_time = _as_datetime(clinic.open_time, 'open_time')
    close_time = _as_datetime(clinic.close_time, 'close_time')
    lunch_start = _as_datetime(clinic.lunch_start_time, 'lunch_start_time')
    lunch_end = _as_datetime(clinic.lunch_end_time, 'lunch_end_time')

    slots: list[Slot] = []
    current = open_time
    slot_number = 1

    while current < close_time:
        if not is_lunch_break_start(current, lunch_start, lunch_end):
            slots.append(
                Slot(
                    slot_number=slot_number,
                    start_time=current,
                    end_time=current + SLOT_INTERVAL,
                    available=True,
                )
            )
            slot_number += 1

        current += SLOT_INTERVAL

    return slots
