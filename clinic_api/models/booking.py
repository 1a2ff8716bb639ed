"""Booking model definitions."""

from sqlalchemy import Column, Integer, DateTime, ForeignKey, String
from sqlalchemy.sql import func

from clinic_api.database import Base


class Booking(Base):
    """Represents a patient's claim on a doctor's slot.

    The slot fields are a snapshot taken at allocation time. Releasing the
    slot later does not touch the booking, so rows double as an audit trail.
    """
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True)
    fullname = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)
    slot_id = Column(Integer, ForeignKey("slots.id"), nullable=False)
    slot_number = Column(Integer, nullable=False)
    slot_start_time = Column(DateTime, nullable=False)
    slot_end_time = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
