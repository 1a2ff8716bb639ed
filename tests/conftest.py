import os
from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from clinic_api.database import Base  # noqa: E402
from clinic_api.models.booking import Booking  # noqa: E402
from clinic_api.models.clinic import Clinic  # noqa: E402
from clinic_api.models.doctor import Doctor, Slot  # noqa: E402

TABLES = [Clinic.__table__, Doctor.__table__, Slot.__table__, Booking.__table__]


@pytest.fixture
def scheduler_db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine, tables=TABLES)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine, tables=list(reversed(TABLES)))


def make_clinic(db, **overrides) -> Clinic:
    fields = {
        'name': 'Riverside Clinic',
        'address': '12 River Road',
        'open_time': datetime(2024, 1, 1, 9, 0),
        'close_time': datetime(2024, 1, 1, 17, 0),
        'lunch_start_time': datetime(2024, 1, 1, 12, 0),
        'lunch_end_time': datetime(2024, 1, 1, 13, 0),
    }
    fields.update(overrides)
    clinic = Clinic(**fields)
    db.add(clinic)
    db.commit()
    db.refresh(clinic)
    return clinic


def make_doctor(db, clinic: Clinic, availability: list[bool]) -> Doctor:
    """Create a doctor whose hourly slots have the given availability, in order."""
    slots = [
        Slot(
            slot_number=index + 1,
            start_time=clinic.open_time + timedelta(hours=index),
            end_time=clinic.open_time + timedelta(hours=index + 1),
            available=available,
        )
        for index, available in enumerate(availability)
    ]
    doctor = Doctor(
        fullname='Dr. Ada Osei',
        specialization='General Practice',
        appointment_fee=40.0,
        clinic_id=clinic.id,
        slots=slots,
    )
    db.add(doctor)
    db.commit()
    db.refresh(doctor)
    return doctor
