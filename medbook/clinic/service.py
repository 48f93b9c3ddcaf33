import datetime as dt
from collections.abc import Sequence

from loguru import logger

from medbook.clinic.access import require_admin_or_doctor, require_patient_self
from medbook.clinic.adapters.datetime_helpers import add_months
from medbook.clinic.availability import resolve_available_slots, window_slots
from medbook.clinic.ports import AbstractBookingService, ClinicStoreProtocol, ClockProtocol
from medbook.clinic.transitions import check_transition
from medbook.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    ConflictReason,
    NotFoundError,
    ValidationError,
    ValidationReason,
)
from medbook.domain.models import (
    Appointment,
    AppointmentStatus,
    Caller,
    Doctor,
    Patient,
    Role,
)


class BookingService(AbstractBookingService):
    """Booking service over a ClinicStoreProtocol that enforces slot and lifecycle rules."""

    def __init__(
        self,
        store: ClinicStoreProtocol,
        clock: ClockProtocol,
        candidate_slots: Sequence[dt.time],
        *,
        horizon_months: int = 3,
    ) -> None:
        self._store = store
        self._clock = clock
        self._slots = sorted(candidate_slots)
        self._horizon_months = horizon_months

    @property
    def candidate_slots(self) -> list[dt.time]:
        return list(self._slots)

    def booking_range(self) -> tuple[dt.date, dt.date]:
        """First and last bookable dates, inclusive."""
        today = self._clock.today()
        return today, add_months(today, self._horizon_months)

    async def _require_doctor(self, doctor_id: str) -> Doctor:
        doctor = await self._store.doctors.get(doctor_id)
        if doctor is None:
            raise NotFoundError("doctor", doctor_id)
        return doctor

    async def _require_patient(self, patient_id: str) -> Patient:
        patient = await self._store.patients.get(patient_id)
        if patient is None:
            raise NotFoundError("patient", patient_id)
        return patient

    async def _require_appointment(self, appointment_id: str) -> Appointment:
        appointment = await self._store.appointments.get(appointment_id)
        if appointment is None:
            raise NotFoundError("appointment", appointment_id)
        return appointment

    async def available_slots(self, doctor_id: str, date: dt.date) -> list[dt.time]:
        """Resolve availability from a fresh read of schedules and appointments."""
        await self._require_doctor(doctor_id)
        slots = resolve_available_slots(
            doctor_id,
            date,
            self._slots,
            await self._store.schedules.list(),
            await self._store.appointments.list(),
        )
        logger.debug("Doctor {} has {} free slot(s) on {}", doctor_id, len(slots), date)
        return slots

    async def book_appointment(
        self,
        caller: Caller,
        patient_id: str,
        doctor_id: str,
        date: dt.date,
        time: dt.time,
        notes: str = "",
    ) -> Appointment:
        require_patient_self(caller, patient_id, "book appointments for this patient")
        await self._require_patient(patient_id)
        await self._require_doctor(doctor_id)

        first, last = self.booking_range()
        if not first <= date <= last:
            raise ValidationError(
                ValidationReason.OUT_OF_RANGE,
                f"date {date} must be between {first} and {last}",
            )

        logger.info("Booking request: doctor={}, date={}, time={}", doctor_id, date, time)

        async with self._store.locked():
            schedules = await self._store.schedules.list()
            appointments = await self._store.appointments.list()
            available = resolve_available_slots(
                doctor_id, date, self._slots, schedules, appointments
            )
            if time not in available:
                if time in window_slots(doctor_id, date, self._slots, schedules):
                    raise ConflictError(
                        ConflictReason.SLOT_TAKEN, f"{date} {time:%H:%M} is already booked"
                    )
                raise ConflictError(
                    ConflictReason.OUTSIDE_SCHEDULE,
                    f"{time:%H:%M} is not a slot in the doctor's hours on {date:%A}",
                )

            appointment = Appointment(
                appointment_id=await self._store.appointments.next_id(),
                patient_id=patient_id,
                doctor_id=doctor_id,
                date=date,
                time=time,
                status=AppointmentStatus.PENDING,
                notes=notes,
            )
            await self._store.appointments.insert(appointment)

        logger.info("Appointment created: id={}", appointment.appointment_id)
        return appointment

    async def transition(
        self, caller: Caller, appointment_id: str, target: AppointmentStatus
    ) -> Appointment:
        async with self._store.locked():
            appointment = await self._require_appointment(appointment_id)
            require_admin_or_doctor(
                caller, appointment.doctor_id, f"mark this appointment {target.value}"
            )
            check_transition(appointment.status, target)
            updated = appointment.model_copy(update={"status": target})
            await self._store.appointments.update(updated)

        logger.info(
            "Appointment {} moved {} -> {}",
            appointment_id,
            appointment.status.value,
            target.value,
        )
        return updated

    async def update_notes(self, caller: Caller, appointment_id: str, notes: str) -> Appointment:
        """Replace the notes on an appointment. Status is untouched."""
        async with self._store.locked():
            appointment = await self._require_appointment(appointment_id)
            require_admin_or_doctor(caller, appointment.doctor_id, "edit appointment notes")
            updated = appointment.model_copy(update={"notes": notes})
            await self._store.appointments.update(updated)

        logger.info("Notes updated on appointment {}", appointment_id)
        return updated

    async def get_appointment(self, caller: Caller, appointment_id: str) -> Appointment:
        appointment = await self._require_appointment(appointment_id)
        if not _can_view(caller, appointment):
            raise AuthorizationError(caller.role.value, "view this appointment")
        return appointment

    async def list_appointments(
        self,
        caller: Caller,
        *,
        status: AppointmentStatus | None = None,
        on_date: dt.date | None = None,
        search: str | None = None,
    ) -> list[Appointment]:
        """Appointments visible to ``caller``, filtered and sorted by date then time.

        ``search`` matches the patient's name or the notes, case-insensitively.
        """
        appointments = [a for a in await self._store.appointments.list() if _can_view(caller, a)]
        if status is not None:
            appointments = [a for a in appointments if a.status == status]
        if on_date is not None:
            appointments = [a for a in appointments if a.date == on_date]
        if search:
            needle = search.lower()
            names = {p.patient_id: p.name.lower() for p in await self._store.patients.list()}
            appointments = [
                a
                for a in appointments
                if needle in a.notes.lower() or needle in names.get(a.patient_id, "")
            ]
        return sorted(appointments, key=lambda a: (a.date, a.time))

    async def patient_history(self, caller: Caller, patient_id: str) -> list[Appointment]:
        """Every appointment of a patient, newest first."""
        if caller.role == Role.PATIENT:
            require_patient_self(caller, patient_id, "view another patient's history")
        await self._require_patient(patient_id)
        history = [a for a in await self._store.appointments.list() if a.patient_id == patient_id]
        return sorted(history, key=lambda a: (a.date, a.time), reverse=True)


def _can_view(caller: Caller, appointment: Appointment) -> bool:
    if caller.role == Role.ADMIN:
        return True
    if caller.role == Role.DOCTOR:
        return appointment.doctor_id == caller.caller_id
    return appointment.patient_id == caller.caller_id
