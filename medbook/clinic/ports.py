import datetime as dt
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Protocol, TypeVar

from medbook.domain.models import (
    Appointment,
    AppointmentStatus,
    Caller,
    Doctor,
    Patient,
    ScheduleWindow,
    UserAccount,
)

RecordT = TypeVar("RecordT")


class EntityStoreProtocol(Protocol[RecordT]):
    """Storage for one entity type, keyed by string id."""

    async def list(self) -> list[RecordT]:
        """Return every record in insertion order."""
        ...

    async def get(self, record_id: str) -> RecordT | None:
        """Return the record, or None if absent."""
        ...

    async def insert(self, record: RecordT) -> RecordT:
        """Add a new record."""
        ...

    async def update(self, record: RecordT) -> RecordT:
        """Replace the stored record that has the same id."""
        ...

    async def delete(self, record_id: str) -> bool:
        """Remove a record. Returns False when nothing was removed."""
        ...

    async def next_id(self) -> str:
        """Allocate an id that has never been handed out by this store."""
        ...


class ClinicStoreProtocol(Protocol):
    """All clinic tables plus the store-wide write lock."""

    doctors: EntityStoreProtocol[Doctor]
    patients: EntityStoreProtocol[Patient]
    schedules: EntityStoreProtocol[ScheduleWindow]
    appointments: EntityStoreProtocol[Appointment]
    accounts: EntityStoreProtocol[UserAccount]

    def locked(self) -> AbstractAsyncContextManager[None]:
        """Serialize a read-check-write unit against every other writer."""
        ...


class ClockProtocol(Protocol):
    """Source of the clinic's current date and time."""

    def today(self) -> dt.date: ...

    def now(self) -> dt.datetime: ...


class AbstractBookingService(ABC):
    """Abstract base class for appointment booking operations."""

    @abstractmethod
    async def available_slots(self, doctor_id: str, date: dt.date) -> list[dt.time]:
        """Compute the bookable slots for a doctor on a date.

        Args:
            doctor_id: The doctor's unique ID.
            date: The calendar date to check.

        Returns:
            Slot start times in ascending order. Empty if the doctor does not
            work that weekday or every slot is taken.

        Raises:
            NotFoundError: If the doctor does not exist.
        """

    @abstractmethod
    async def book_appointment(
        self,
        caller: Caller,
        patient_id: str,
        doctor_id: str,
        date: dt.date,
        time: dt.time,
        notes: str = "",
    ) -> Appointment:
        """Book a slot for a patient.

        Availability is re-checked against the current store state while the
        store lock is held, so two bookings for one slot cannot both succeed.

        Returns:
            The created appointment in ``pending`` status.

        Raises:
            AuthorizationError: If the caller is not that patient.
            NotFoundError: If the patient or doctor does not exist.
            ValidationError: If the date is in the past or beyond the horizon.
            ConflictError: If the slot is taken or outside the doctor's schedule.
        """

    @abstractmethod
    async def transition(
        self, caller: Caller, appointment_id: str, target: AppointmentStatus
    ) -> Appointment:
        """Move an appointment to a new status.

        Returns:
            The updated appointment. Only ``status`` changes.

        Raises:
            NotFoundError: If the appointment does not exist.
            AuthorizationError: If the caller is neither admin nor the assigned doctor.
            InvalidTransitionError: If the transition table forbids the change.
        """
