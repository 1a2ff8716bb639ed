import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Path, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from clinic_api.auth.dependencies import require_staff
from clinic_api.models.booking import Booking
from clinic_api.models.doctor import Doctor
from clinic_api.routes.clinic_routes import ClinicResponse
from clinic_api.routes.common import database_unavailable, ensure_database_ready, get_db
from clinic_api.services.allocation import allocation_manager
from clinic_api.services.doctor_service import create_doctor
from clinic_api.services.errors import (
    ClinicNotFoundError,
    DoctorNotFoundError,
    NoAvailabilityError,
    PersistenceError,
    SlotNotFoundError,
)
from clinic_api.shared.validators import optional_text, require_text, validate_email, validate_identifier

router = APIRouter(tags=['doctor'])

logger = logging.getLogger(__name__)

DOCTOR_NOT_FOUND_DETAIL = 'Doctor not found'
SLOT_NOT_FOUND_DETAIL = 'Slot not found'
NO_AVAILABILITY_DETAIL = 'No available slots for this doctor'


class CreateDoctorRequest(BaseModel):
    fullname: str
    specialization: str | None = None
    appointment_fee: float
    clinic_id: int

    @field_validator('fullname')
    @classmethod
    def validate_fullname(cls, value: str) -> str:
        return require_text(value, 'fullname')

    @field_validator('specialization')
    @classmethod
    def validate_specialization(cls, value: str | None) -> str | None:
        return optional_text(value, 'specialization')

    @field_validator('appointment_fee')
    @classmethod
    def validate_appointment_fee(cls, value: float) -> float:
        if value < 0:
            raise ValueError('appointment_fee cannot be negative.')
        return value

    @field_validator('clinic_id')
    @classmethod
    def validate_clinic_id(cls, value: int) -> int:
        return validate_identifier(value, 'clinic ID')


class MakeAppointmentRequest(BaseModel):
    fullname: str
    email: str
    doctor_id: int

    @field_validator('fullname')
    @classmethod
    def validate_fullname(cls, value: str) -> str:
        return require_text(value, 'fullname')

    @field_validator('email')
    @classmethod
    def validate_patient_email(cls, value: str) -> str:
        return validate_email(value)

    @field_validator('doctor_id')
    @classmethod
    def validate_doctor_id(cls, value: int) -> int:
        return validate_identifier(value, 'doctor ID')


class RejectAppointmentRequest(BaseModel):
    slot_id: int

    @field_validator('slot_id')
    @classmethod
    def validate_slot_id(cls, value: int) -> int:
        return validate_identifier(value, 'slot ID')


class SlotResponse(BaseModel):
    id: int
    slot_number: int
    start_time: datetime
    end_time: datetime
    available: bool

    class Config:
        from_attributes = True


class DoctorResponse(BaseModel):
    id: int
    fullname: str
    specialization: str | None = None
    appointment_fee: float
    clinic_id: int
    clinic: ClinicResponse | None = None
    slots: list[SlotResponse]

    class Config:
        from_attributes = True


class DoctorCreatedResponse(BaseModel):
    success: bool
    doctor: DoctorResponse


class PatientEcho(BaseModel):
    fullname: str
    email: str


class AppointmentResponse(BaseModel):
    success: bool
    slot: SlotResponse
    user: PatientEcho


class RejectAppointmentResponse(BaseModel):
    success: bool
    message: str


class BookingResponse(BaseModel):
    id: int
    fullname: str
    email: str
    doctor_id: int
    slot_id: int
    slot_number: int
    slot_start_time: datetime
    slot_end_time: datetime
    created_at: datetime | None = None

    class Config:
        from_attributes = True


def load_doctor(db: Session, doctor_id: int) -> Doctor:
    doctor = db.query(Doctor).options(
        selectinload(Doctor.clinic),
        selectinload(Doctor.slots),
    ).filter(Doctor.id == doctor_id).first()

    if doctor is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=DOCTOR_NOT_FOUND_DETAIL)

    return doctor


@router.get('/list', response_model=list[DoctorResponse])
def list_doctors(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return db.query(Doctor).options(
            selectinload(Doctor.clinic),
            selectinload(Doctor.slots),
        ).order_by(Doctor.id.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/{doctor_id}', response_model=DoctorResponse)
def get_doctor(doctor_id: int = Path(..., gt=0), db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return load_doctor(db, doctor_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/{doctor_id}/slots', response_model=list[SlotResponse])
def list_doctor_slots(doctor_id: int = Path(..., gt=0), db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return load_doctor(db, doctor_id).slots
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/{doctor_id}/bookings', response_model=list[BookingResponse])
def list_doctor_bookings(doctor_id: int = Path(..., gt=0), db: Session = Depends(get_db)):
    """List every booking ever made with a doctor, including released ones."""
    ensure_database_ready()

    try:
        if db.get(Doctor, doctor_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=DOCTOR_NOT_FOUND_DETAIL)

        return db.query(Booking).filter(
            Booking.doctor_id == doctor_id,
        ).order_by(Booking.id.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('/add', response_model=DoctorCreatedResponse, status_code=status.HTTP_201_CREATED)
def add_doctor(
    data: CreateDoctorRequest,
    db: Session = Depends(get_db),
    staff: str = Depends(require_staff),
):
    ensure_database_ready()

    try:
        doctor = create_doctor(
            db,
            fullname=data.fullname,
            specialization=data.specialization,
            appointment_fee=data.appointment_fee,
            clinic_id=data.clinic_id,
        )
    except ClinicNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid clinic ID') from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except (PersistenceError, SQLAlchemyError) as exc:
        raise database_unavailable() from exc

    logger.info('Doctor %s added by %s', doctor.id, staff)
    return DoctorCreatedResponse(success=True, doctor=DoctorResponse.model_validate(doctor))


@router.post('/make-appointment', response_model=AppointmentResponse)
def make_appointment(data: MakeAppointmentRequest, db: Session = Depends(get_db)):
    """Book the earliest free slot of a doctor.

    Not safe to retry blindly: a second call books a second slot.
    """
    ensure_database_ready()

    try:
        slot, _booking = allocation_manager.allocate(db, data.doctor_id, data.fullname, data.email)
    except DoctorNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=DOCTOR_NOT_FOUND_DETAIL) from exc
    except NoAvailabilityError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=NO_AVAILABILITY_DETAIL) from exc
    except PersistenceError as exc:
        raise database_unavailable() from exc

    return AppointmentResponse(
        success=True,
        slot=SlotResponse.model_validate(slot),
        user=PatientEcho(fullname=data.fullname, email=data.email),
    )


@router.put('/{doctor_id}/reject-appointment', response_model=RejectAppointmentResponse)
def reject_appointment(
    data: RejectAppointmentRequest,
    doctor_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    staff: str = Depends(require_staff),
):
    ensure_database_ready()

    try:
        allocation_manager.release(db, doctor_id, data.slot_id)
    except DoctorNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=DOCTOR_NOT_FOUND_DETAIL) from exc
    except SlotNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=SLOT_NOT_FOUND_DETAIL) from exc
    except PersistenceError as exc:
        raise database_unavailable() from exc

    logger.info('Slot %s of doctor %s rejected by %s', data.slot_id, doctor_id, staff)
    return RejectAppointmentResponse(success=True, message='Appointment rejected')
