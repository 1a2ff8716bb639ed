import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_api.models.clinic import Clinic
from clinic_api.models.doctor import Doctor
from clinic_api.services.errors import ClinicNotFoundError, PersistenceError
from clinic_api.services.slot_generator import generate_slots

logger = logging.getLogger(__name__)


def create_doctor(
    db: Session,
    *,
    fullname: str,
    specialization: str | None,
    appointment_fee: float,
    clinic_id: int,
) -> Doctor:
    """Create a doctor with the day's slots of their clinic.

    Slots are generated once, here. Later clinic updates do not change them.
    """
    clinic = db.get(Clinic, clinic_id)
    if clinic is None:
        raise ClinicNotFoundError(clinic_id)

    doctor = Doctor(
        fullname=fullname,
        specialization=specialization,
        appointment_fee=appointment_fee,
        clinic_id=clinic.id,
        slots=generate_slots(clinic),
    )

    try:
        db.add(doctor)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Creating doctor %r for clinic %s failed', fullname, clinic_id)
        raise PersistenceError('Could not save doctor') from exc

    db.refresh(doctor)
    logger.info('Created doctor %s at clinic %s with %d slots', doctor.id, clinic_id, len(doctor.slots))
    return doctor
