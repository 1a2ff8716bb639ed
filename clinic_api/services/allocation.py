"""Slot allocation and release for doctors.

A doctor's slots are shared state: two patients booking the same doctor at the
same time must never end up with the same slot. Every allocate/release for a
doctor runs under that doctor's lock, and the availability flip itself is a
conditional UPDATE that only succeeds while the slot is still free, so a
writer in another process cannot be overwritten either.
"""

import logging
from threading import Lock
from weakref import WeakValueDictionary

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_api.models.booking import Booking
from clinic_api.models.doctor import Doctor, Slot
from clinic_api.services.errors import (
    DoctorNotFoundError,
    NoAvailabilityError,
    PersistenceError,
    SlotNotFoundError,
)

logger = logging.getLogger(__name__)

MAX_CLAIM_ATTEMPTS = 5


class DoctorLockRegistry:
    """Hands out one lock per doctor id.

    A lock lives only while some caller holds a reference to it.
    """

    def __init__(self) -> None:
        self._registry_lock = Lock()
        self._locks: WeakValueDictionary[int, Lock] = WeakValueDictionary()

    def __len__(self) -> int:
        return len(self._locks)

    def lock_for(self, doctor_id: int) -> Lock:
        with self._registry_lock:
            lock = self._locks.get(doctor_id)
            if lock is None:
                lock = Lock()
                self._locks[doctor_id] = lock
            return lock


def find_first_available_slot_id(db: Session, doctor_id: int) -> int | None:
    row = db.query(Slot.id).filter(
        Slot.doctor_id == doctor_id,
        Slot.available.is_(True),
    ).order_by(Slot.slot_number.asc()).first()

    return row[0] if row else None


def claim_slot(db: Session, slot_id: int) -> bool:
    """Flip a slot to unavailable only if it is still available."""
    updated = db.query(Slot).filter(
        Slot.id == slot_id,
        Slot.available.is_(True),
    ).update({Slot.available: False}, synchronize_session=False)

    return updated == 1


def find_doctor_slot(db: Session, doctor_id: int, slot_id: int) -> Slot | None:
    return db.query(Slot).filter(
        Slot.id == slot_id,
        Slot.doctor_id == doctor_id,
    ).first()


def require_doctor(db: Session, doctor_id: int) -> Doctor:
    try:
        doctor = db.get(Doctor, doctor_id)
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(f'Could not load doctor {doctor_id}') from exc

    if doctor is None:
        raise DoctorNotFoundError(doctor_id)

    return doctor


class AllocationManager:
    def __init__(self, locks: DoctorLockRegistry | None = None) -> None:
        self.locks = locks or DoctorLockRegistry()

    def _claim_first_available(self, db: Session, doctor_id: int) -> int | None:
        """Claim the earliest free slot, selecting again when a claim is lost.

        Each retry starts a new transaction so the next read sees slots
        committed by other writers.
        """
        slot_id = find_first_available_slot_id(db, doctor_id)
        attempts = 1

        while slot_id is not None and not claim_slot(db, slot_id):
            if attempts >= MAX_CLAIM_ATTEMPTS:
                db.rollback()
                raise PersistenceError(
                    f'Gave up claiming a slot for doctor {doctor_id} after {attempts} attempts'
                )

            logger.info('Slot %s of doctor %s was claimed concurrently, selecting again', slot_id, doctor_id)
            db.rollback()
            slot_id = find_first_available_slot_id(db, doctor_id)
            attempts += 1

        return slot_id

    def allocate(self, db: Session, doctor_id: int, fullname: str, email: str) -> tuple[Slot, Booking]:
        """Give the earliest free slot of a doctor to a patient.

        The slot flip and the booking insert are committed together; if the
        commit fails both are rolled back and ``PersistenceError`` is raised.
        """
        require_doctor(db, doctor_id)

        with self.locks.lock_for(doctor_id):
            try:
                slot_id = self._claim_first_available(db, doctor_id)

                if slot_id is None:
                    db.rollback()
                    raise NoAvailabilityError(doctor_id)

                slot = db.get(Slot, slot_id, populate_existing=True)
                booking = Booking(
                    fullname=fullname,
                    email=email,
                    doctor_id=doctor_id,
                    slot_id=slot.id,
                    slot_number=slot.slot_number,
                    slot_start_time=slot.start_time,
                    slot_end_time=slot.end_time,
                )
                db.add(booking)
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                logger.exception('Allocation for doctor %s failed to persist', doctor_id)
                raise PersistenceError(f'Could not allocate a slot for doctor {doctor_id}') from exc

            try:
                db.refresh(slot)
                db.refresh(booking)
            except SQLAlchemyError as exc:
                logger.exception('Booking for slot %s of doctor %s committed but could not be reloaded', slot_id, doctor_id)
                raise PersistenceError(f'Could not reload booking for doctor {doctor_id}') from exc

        logger.info('Allocated slot %s (#%s) of doctor %s to booking %s', slot.id, slot.slot_number, doctor_id, booking.id)
        return slot, booking

    def release(self, db: Session, doctor_id: int, slot_id: int) -> Slot:
        """Mark a doctor's slot available again.

        Releasing a slot that is already available is a successful no-op. The
        booking created when the slot was allocated is kept.
        """
        require_doctor(db, doctor_id)

        with self.locks.lock_for(doctor_id):
            try:
                slot = find_doctor_slot(db, doctor_id, slot_id)
                if slot is None:
                    raise SlotNotFoundError(doctor_id, slot_id)

                if slot.available:
                    return slot

                slot.available = True
                db.commit()
                db.refresh(slot)
            except SQLAlchemyError as exc:
                db.rollback()
                logger.exception('Release of slot %s for doctor %s failed to persist', slot_id, doctor_id)
                raise PersistenceError(f'Could not release slot {slot_id} for doctor {doctor_id}') from exc

        logger.info('Released slot %s of doctor %s', slot_id, doctor_id)
        return slot


allocation_manager = AllocationManager()
