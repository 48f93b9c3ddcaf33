import datetime as dt

import pytest
import pytest_asyncio

from medbook.clinic.adapters.memory import InMemoryClinicStore
from medbook.domain.exceptions import AuthorizationError
from medbook.domain.models import Appointment, AppointmentStatus, Caller, Role
from medbook.portal.dashboard import DashboardService

# Fixtures (dashboard, store, admin, doctor, patient) provided by tests/conftest.py

TODAY = dt.date(2026, 10, 14)


async def _add(
    store: InMemoryClinicStore,
    date: dt.date,
    time: dt.time,
    status: AppointmentStatus,
    *,
    patient_id: str = "1",
    doctor_id: str = "1",
) -> Appointment:
    return await store.appointments.insert(
        Appointment(
            appointment_id=await store.appointments.next_id(),
            patient_id=patient_id,
            doctor_id=doctor_id,
            date=date,
            time=time,
            status=status,
        )
    )


@pytest_asyncio.fixture
async def populated(store: InMemoryClinicStore) -> InMemoryClinicStore:
    day = dt.timedelta(days=1)
    await _add(store, TODAY - 7 * day, dt.time(9, 0), AppointmentStatus.COMPLETED)
    await _add(store, TODAY, dt.time(11, 0), AppointmentStatus.CONFIRMED, patient_id="2")
    await _add(store, TODAY, dt.time(9, 30), AppointmentStatus.PENDING)
    await _add(store, TODAY, dt.time(10, 0), AppointmentStatus.CANCELLED)
    await _add(store, TODAY + 5 * day, dt.time(9, 0), AppointmentStatus.PENDING)
    await _add(store, TODAY + 2 * day, dt.time(9, 0), AppointmentStatus.CONFIRMED, doctor_id="2")
    return store


class TestAdminOverview:
    @pytest.mark.asyncio
    async def test_counts(
        self, dashboard: DashboardService, populated: InMemoryClinicStore, admin: Caller
    ) -> None:
        overview = await dashboard.admin_overview(admin)

        assert overview.total_doctors == 2
        assert overview.total_patients == 2
        assert overview.total_appointments == 6
        assert overview.status_counts == {
            AppointmentStatus.PENDING: 2,
            AppointmentStatus.CONFIRMED: 2,
            AppointmentStatus.COMPLETED: 1,
            AppointmentStatus.CANCELLED: 1,
        }
        assert len(overview.recent_appointments) == 5
        assert overview.recent_appointments[0].date == TODAY + dt.timedelta(days=5)

    @pytest.mark.asyncio
    async def test_requires_admin(self, dashboard: DashboardService, doctor: Caller) -> None:
        with pytest.raises(AuthorizationError):
            await dashboard.admin_overview(doctor)


class TestDoctorOverview:
    @pytest.mark.asyncio
    async def test_today_and_upcoming(
        self, dashboard: DashboardService, populated: InMemoryClinicStore, doctor: Caller
    ) -> None:
        overview = await dashboard.doctor_overview(doctor, "1")

        assert overview.total_appointments == 5
        assert overview.total_patients == 2
        assert [a.time for a in overview.today] == [dt.time(9, 30), dt.time(11, 0)]
        assert [a.date for a in overview.upcoming] == [TODAY + dt.timedelta(days=5)]

    @pytest.mark.asyncio
    async def test_other_doctor_refused(self, dashboard: DashboardService) -> None:
        with pytest.raises(AuthorizationError):
            await dashboard.doctor_overview(Caller(role=Role.DOCTOR, caller_id="2"), "1")


class TestPatientOverview:
    @pytest.mark.asyncio
    async def test_upcoming_and_completed(
        self, dashboard: DashboardService, populated: InMemoryClinicStore, patient: Caller
    ) -> None:
        overview = await dashboard.patient_overview(patient, "1")

        assert overview.total_appointments == 5
        assert [a.time for a in overview.upcoming] == [dt.time(9, 30), dt.time(9, 0), dt.time(9, 0)]
        assert [a.status for a in overview.recent_completed] == [AppointmentStatus.COMPLETED]

    @pytest.mark.asyncio
    async def test_other_patient_refused(self, dashboard: DashboardService) -> None:
        with pytest.raises(AuthorizationError):
            await dashboard.patient_overview(Caller(role=Role.PATIENT, caller_id="2"), "1")
