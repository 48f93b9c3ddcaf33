from collections import Counter
from collections.abc import Iterable

from medbook.clinic.access import require_admin, require_admin_or_doctor, require_patient_self
from medbook.clinic.ports import ClinicStoreProtocol, ClockProtocol
from medbook.domain.models import (
    AdminOverview,
    Appointment,
    AppointmentStatus,
    Caller,
    DoctorOverview,
    PatientOverview,
    Role,
)

RECENT_LIMIT = 5
DOCTOR_UPCOMING_LIMIT = 5
PATIENT_UPCOMING_LIMIT = 3
PATIENT_COMPLETED_LIMIT = 3


def _status_counts(appointments: Iterable[Appointment]) -> dict[AppointmentStatus, int]:
    counts = Counter(a.status for a in appointments)
    return {status: counts.get(status, 0) for status in AppointmentStatus}


def _chronological(appointments: Iterable[Appointment]) -> list[Appointment]:
    return sorted(appointments, key=lambda a: (a.date, a.time))


class DashboardService:
    """Read models behind the three portal landing pages."""

    def __init__(self, store: ClinicStoreProtocol, clock: ClockProtocol) -> None:
        self._store = store
        self._clock = clock

    async def admin_overview(self, caller: Caller) -> AdminOverview:
        require_admin(caller, "view the admin dashboard")
        appointments = await self._store.appointments.list()
        recent = sorted(appointments, key=lambda a: (a.date, a.time), reverse=True)
        return AdminOverview(
            total_doctors=len(await self._store.doctors.list()),
            total_patients=len(await self._store.patients.list()),
            total_appointments=len(appointments),
            status_counts=_status_counts(appointments),
            recent_appointments=recent[:RECENT_LIMIT],
        )

    async def doctor_overview(self, caller: Caller, doctor_id: str) -> DoctorOverview:
        require_admin_or_doctor(caller, doctor_id, "view this doctor's dashboard")
        today = self._clock.today()
        mine = [a for a in await self._store.appointments.list() if a.doctor_id == doctor_id]
        active = [a for a in mine if a.blocks_slot]
        return DoctorOverview(
            doctor_id=doctor_id,
            total_appointments=len(mine),
            total_patients=len({a.patient_id for a in mine}),
            status_counts=_status_counts(mine),
            today=_chronological(a for a in active if a.date == today),
            upcoming=_chronological(a for a in active if a.date > today)[:DOCTOR_UPCOMING_LIMIT],
        )

    async def patient_overview(self, caller: Caller, patient_id: str) -> PatientOverview:
        if caller.role != Role.ADMIN:
            require_patient_self(caller, patient_id, "view this patient's dashboard")
        today = self._clock.today()
        mine = [a for a in await self._store.appointments.list() if a.patient_id == patient_id]
        upcoming = _chronological(a for a in mine if a.blocks_slot and a.date >= today)
        completed = _chronological(a for a in mine if a.status == AppointmentStatus.COMPLETED)
        return PatientOverview(
            patient_id=patient_id,
            total_appointments=len(mine),
            status_counts=_status_counts(mine),
            upcoming=upcoming[:PATIENT_UPCOMING_LIMIT],
            recent_completed=completed[::-1][:PATIENT_COMPLETED_LIMIT],
        )
