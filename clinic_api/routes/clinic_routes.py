import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Path, status
from pydantic import BaseModel, field_validator, model_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_api.auth.dependencies import require_staff
from clinic_api.models.clinic import Clinic
from clinic_api.routes.common import database_unavailable, ensure_database_ready, get_db
from clinic_api.shared.validators import require_text, to_naive_utc, validate_time_order

router = APIRouter(tags=['clinic'])

logger = logging.getLogger(__name__)

CLINIC_NOT_FOUND_DETAIL = 'Clinic not found'


class ClinicRequest(BaseModel):
    name: str
    address: str
    open_time: datetime
    close_time: datetime
    lunch_start_time: datetime
    lunch_end_time: datetime

    @field_validator('name', 'address')
    @classmethod
    def validate_required_text(cls, value: str, info) -> str:
        return require_text(value, info.field_name)

    @field_validator('open_time', 'close_time', 'lunch_start_time', 'lunch_end_time')
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @model_validator(mode='after')
    def validate_time_ranges(self) -> 'ClinicRequest':
        validate_time_order(self.open_time, self.close_time, 'open_time', 'close_time')
        validate_time_order(self.lunch_start_time, self.lunch_end_time, 'lunch_start_time', 'lunch_end_time')
        return self


class ClinicResponse(BaseModel):
    id: int
    name: str
    address: str
    open_time: datetime
    close_time: datetime
    lunch_start_time: datetime
    lunch_end_time: datetime

    class Config:
        from_attributes = True


class ClinicCreatedResponse(BaseModel):
    success: bool
    clinic: ClinicResponse


@router.get('/list', response_model=list[ClinicResponse])
def list_clinics(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return db.query(Clinic).order_by(Clinic.id.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/{clinic_id}', response_model=ClinicResponse)
def get_clinic(clinic_id: int = Path(..., gt=0), db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        clinic = db.get(Clinic, clinic_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    if clinic is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=CLINIC_NOT_FOUND_DETAIL)

    return clinic


@router.post('/add', response_model=ClinicCreatedResponse, status_code=status.HTTP_201_CREATED)
def add_clinic(
    data: ClinicRequest,
    db: Session = Depends(get_db),
    staff: str = Depends(require_staff),
):
    ensure_database_ready()

    try:
        clinic = Clinic(**data.model_dump())
        db.add(clinic)
        db.commit()
        db.refresh(clinic)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Adding clinic %r failed', data.name)
        raise database_unavailable() from exc

    logger.info('Clinic %s created by %s', clinic.id, staff)
    return ClinicCreatedResponse(success=True, clinic=ClinicResponse.model_validate(clinic))


@router.put('/{clinic_id}', response_model=ClinicResponse)
def update_clinic(
    data: ClinicRequest,
    clinic_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    staff: str = Depends(require_staff),
):
    """Update a clinic's details.

    Doctors already attached keep the slots generated when they were added.
    """
    ensure_database_ready()

    try:
        clinic = db.get(Clinic, clinic_id)
        if clinic is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=CLINIC_NOT_FOUND_DETAIL)

        for field_name, value in data.model_dump().items():
            setattr(clinic, field_name, value)

        db.commit()
        db.refresh(clinic)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Updating clinic %s failed', clinic_id)
        raise database_unavailable() from exc

    logger.info('Clinic %s updated by %s', clinic_id, staff)
    return clinic
