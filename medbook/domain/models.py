import datetime as dt
from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


class Role(str, Enum):
    """Portal roles a session can act as."""

    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def of(cls, date: dt.date) -> "Weekday":
        return list(cls)[date.weekday()]


class AppointmentStatus(str, Enum):
    """Lifecycle states of an appointment."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses that occupy a doctor's slot.
BLOCKING_STATUSES: frozenset[AppointmentStatus] = frozenset(
    {AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED}
)


class Doctor(BaseModel):
    """A doctor listed in the hospital directory."""

    model_config = ConfigDict(frozen=True)

    doctor_id: str
    name: str
    specialty: str
    email: str = ""
    phone: str = ""
    # Display only; bookable hours come from ScheduleWindow records.
    available_days: tuple[Weekday, ...] = ()


class Patient(BaseModel):
    """A patient registered with the hospital."""

    model_config = ConfigDict(frozen=True)

    patient_id: str
    name: str
    email: str = ""
    phone: str = ""
    date_of_birth: dt.date | None = None

    def age_on(self, date: dt.date) -> int | None:
        if self.date_of_birth is None:
            return None
        dob = self.date_of_birth
        had_birthday = (date.month, date.day) >= (dob.month, dob.day)
        return date.year - dob.year - (0 if had_birthday else 1)


class ScheduleWindow(BaseModel):
    """A doctor's working interval on one weekday."""

    model_config = ConfigDict(frozen=True)

    window_id: str
    doctor_id: str
    weekday: Weekday
    start_time: dt.time
    end_time: dt.time

    @model_validator(mode="after")
    def _check_order(self) -> "ScheduleWindow":
        if self.start_time.tzinfo is not None or self.end_time.tzinfo is not None:
            raise ValueError("window times must not carry a timezone")
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self

    def contains(self, time: dt.time) -> bool:
        """Half-open membership: a slot starting at ``end_time`` is outside."""
        return self.start_time <= time < self.end_time


class Appointment(BaseModel):
    """A booking of one doctor slot by one patient."""

    model_config = ConfigDict(frozen=True)

    appointment_id: str
    patient_id: str
    doctor_id: str
    date: dt.date
    time: dt.time
    status: AppointmentStatus = AppointmentStatus.PENDING
    notes: str = ""

    @property
    def blocks_slot(self) -> bool:
        return self.status in BLOCKING_STATUSES


class Caller(BaseModel):
    """Who is making a core call, as established by the session gate."""

    model_config = ConfigDict(frozen=True)

    role: Role
    caller_id: str


class UserAccount(BaseModel):
    """Login credentials bound to a directory profile."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    password: str
    name: str
    role: Role
    profile_id: str


class Session(BaseModel):
    """An authenticated portal session."""

    model_config = ConfigDict(frozen=True)

    token: str
    user_id: str
    name: str
    email: str
    role: Role
    profile_id: str
    expires_at: dt.datetime

    @property
    def caller(self) -> Caller:
        return Caller(role=self.role, caller_id=self.profile_id)


class AdminOverview(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_doctors: int
    total_patients: int
    total_appointments: int
    status_counts: dict[AppointmentStatus, int]
    recent_appointments: list[Appointment]


class DoctorOverview(BaseModel):
    model_config = ConfigDict(frozen=True)

    doctor_id: str
    total_appointments: int
    total_patients: int
    status_counts: dict[AppointmentStatus, int]
    today: list[Appointment]
    upcoming: list[Appointment]


class PatientOverview(BaseModel):
    model_config = ConfigDict(frozen=True)

    patient_id: str
    total_appointments: int
    status_counts: dict[AppointmentStatus, int]
    upcoming: list[Appointment]
    recent_completed: list[Appointment]
