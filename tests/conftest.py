import datetime as dt

import pytest

from medbook.clinic.adapters.clock import FixedClock
from medbook.clinic.adapters.memory import InMemoryClinicStore
from medbook.clinic.directory import DirectoryService
from medbook.clinic.schedules import ScheduleService
from medbook.clinic.service import BookingService
from medbook.config import DEFAULT_SLOT_TIMES
from medbook.domain.models import (
    Caller,
    Doctor,
    Patient,
    Role,
    ScheduleWindow,
    UserAccount,
    Weekday,
)
from medbook.portal.dashboard import DashboardService
from medbook.portal.session import SessionGate

# Wednesday. The next Monday is 2026-10-19; the booking horizon ends 2027-01-14.
TODAY = dt.date(2026, 10, 14)
MONDAY = dt.date(2026, 10, 19)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock.on(TODAY)


@pytest.fixture
def store() -> InMemoryClinicStore:
    """Doctor 1 works Monday 09:00-12:00; doctor 2 has no schedule."""
    return InMemoryClinicStore(
        doctors=[
            Doctor(doctor_id="1", name="Dr. John Smith", specialty="Cardiology"),
            Doctor(doctor_id="2", name="Dr. Sarah Johnson", specialty="Neurology"),
        ],
        patients=[
            Patient(patient_id="1", name="John Doe", date_of_birth=dt.date(1985, 5, 15)),
            Patient(patient_id="2", name="Jane Smith", date_of_birth=dt.date(1990, 10, 20)),
        ],
        schedules=[
            ScheduleWindow(
                window_id="1",
                doctor_id="1",
                weekday=Weekday.MONDAY,
                start_time=dt.time(9, 0),
                end_time=dt.time(12, 0),
            ),
        ],
        accounts=[
            UserAccount(user_id="1", email="admin@hospital.com", password="admin123",
                        name="Admin User", role=Role.ADMIN, profile_id="1"),
            UserAccount(user_id="2", email="doctor@hospital.com", password="doctor123",
                        name="Dr. Smith", role=Role.DOCTOR, profile_id="1"),
            UserAccount(user_id="3", email="patient@hospital.com", password="patient123",
                        name="John Doe", role=Role.PATIENT, profile_id="1"),
        ],  # fmt: skip
    )


@pytest.fixture
def booking(store: InMemoryClinicStore, clock: FixedClock) -> BookingService:
    return BookingService(store, clock, DEFAULT_SLOT_TIMES, horizon_months=3)


@pytest.fixture
def schedules(store: InMemoryClinicStore) -> ScheduleService:
    return ScheduleService(store)


@pytest.fixture
def directory(store: InMemoryClinicStore) -> DirectoryService:
    return DirectoryService(store)


@pytest.fixture
def sessions(
    store: InMemoryClinicStore, clock: FixedClock, directory: DirectoryService
) -> SessionGate:
    return SessionGate(store, clock, directory, ttl_minutes=60)


@pytest.fixture
def dashboard(store: InMemoryClinicStore, clock: FixedClock) -> DashboardService:
    return DashboardService(store, clock)


@pytest.fixture
def admin() -> Caller:
    return Caller(role=Role.ADMIN, caller_id="1")


@pytest.fixture
def doctor() -> Caller:
    return Caller(role=Role.DOCTOR, caller_id="1")


@pytest.fixture
def patient() -> Caller:
    return Caller(role=Role.PATIENT, caller_id="1")
