"""Errors raised by the scheduling services."""


class SchedulingError(Exception):
    """Base class for scheduling failures."""


class NotFoundError(SchedulingError):
    pass


class ClinicNotFoundError(NotFoundError):
    def __init__(self, clinic_id: int):
        super().__init__(f"Clinic {clinic_id} not found")
        self.clinic_id = clinic_id


class DoctorNotFoundError(NotFoundError):
    def __init__(self, doctor_id: int):
        super().__init__(f"Doctor {doctor_id} not found")
        self.doctor_id = doctor_id


class SlotNotFoundError(NotFoundError):
    def __init__(self, doctor_id: int, slot_id: int):
        super().__init__(f"Slot {slot_id} not found for doctor {doctor_id}")
        self.doctor_id = doctor_id
        self.slot_id = slot_id


class NoAvailabilityError(SchedulingError):
    def __init__(self, doctor_id: int):
        super().__init__(f"No available slots for doctor {doctor_id}")
        self.doctor_id = doctor_id


class PersistenceError(SchedulingError):
    """The store rejected a write; the transaction was rolled back."""
