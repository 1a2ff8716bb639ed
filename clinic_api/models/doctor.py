"""Doctor and slot model definitions."""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from clinic_api.database import Base
from clinic_api.models.clinic import Clinic


class Doctor(Base):
    """Represents a doctor attached to a clinic."""
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    fullname = Column(String, nullable=False)
    specialization = Column(String, nullable=True)
    appointment_fee = Column(Float, nullable=False)
    clinic_id = Column(Integer, ForeignKey("clinics.id"), nullable=False, index=True)

    clinic = relationship(Clinic)
    slots = relationship(
        "Slot",
        back_populates="doctor",
        order_by="Slot.slot_number",
        cascade="all, delete-orphan",
    )


class Slot(Base):
    """Represents one bookable hour of a doctor's day."""
    __tablename__ = "slots"

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)
    slot_number = Column(Integer, nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    available = Column(Boolean, nullable=False, default=True)

    doctor = relationship("Doctor", back_populates="slots")

    __table_args__ = (
        UniqueConstraint("doctor_id", "slot_number", name="uq_slots_doctor_number"),
    )
