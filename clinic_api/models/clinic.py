"""Clinic model definitions."""

from sqlalchemy import Column, Integer, DateTime, String
from clinic_api.database import Base


class Clinic(Base):
    """Represents a clinic and its daily operating calendar."""
    __tablename__ = "clinics"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=False)
    open_time = Column(DateTime, nullable=False)
    close_time = Column(DateTime, nullable=False)
    lunch_start_time = Column(DateTime, nullable=False)
    lunch_end_time = Column(DateTime, nullable=False)
