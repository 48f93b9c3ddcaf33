"""Demo dataset loaded by the ``seeded`` store adapter."""

import datetime as dt

from medbook.clinic.adapters.memory import InMemoryClinicStore
from medbook.domain.models import (
    Appointment,
    AppointmentStatus,
    Doctor,
    Patient,
    Role,
    ScheduleWindow,
    UserAccount,
    Weekday,
)

MON, TUE, WED, THU, FRI = (
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
)

DOCTORS: list[Doctor] = [
    Doctor(doctor_id="1", name="Dr. John Smith", specialty="Cardiology",
           email="john.smith@hospital.com", phone="123-456-7890", available_days=(MON, WED, FRI)),
    Doctor(doctor_id="2", name="Dr. Sarah Johnson", specialty="Neurology",
           email="sarah.johnson@hospital.com", phone="123-456-7891", available_days=(TUE, THU)),
    Doctor(doctor_id="3", name="Dr. Michael Brown", specialty="Orthopedics",
           email="michael.brown@hospital.com", phone="123-456-7892", available_days=(MON, TUE, FRI)),
    Doctor(doctor_id="4", name="Dr. Emily Davis", specialty="Pediatrics",
           email="emily.davis@hospital.com", phone="123-456-7893", available_days=(WED, THU, FRI)),
    Doctor(doctor_id="5", name="Dr. Robert Wilson", specialty="Dermatology",
           email="robert.wilson@hospital.com", phone="123-456-7894", available_days=(MON, THU)),
]  # fmt: skip

PATIENTS: list[Patient] = [
    Patient(patient_id="1", name="John Doe", email="john.doe@example.com",
            phone="123-456-7895", date_of_birth=dt.date(1985, 5, 15)),
    Patient(patient_id="2", name="Jane Smith", email="jane.smith@example.com",
            phone="123-456-7896", date_of_birth=dt.date(1990, 10, 20)),
    Patient(patient_id="3", name="Michael Johnson", email="michael.johnson@example.com",
            phone="123-456-7897", date_of_birth=dt.date(1978, 3, 25)),
    Patient(patient_id="4", name="Emily Brown", email="emily.brown@example.com",
            phone="123-456-7898", date_of_birth=dt.date(1995, 12, 10)),
    Patient(patient_id="5", name="David Wilson", email="david.wilson@example.com",
            phone="123-456-7899", date_of_birth=dt.date(1982, 7, 30)),
]  # fmt: skip


def _appt(
    appointment_id: str,
    patient_id: str,
    doctor_id: str,
    date: str,
    time: str,
    status: AppointmentStatus,
    notes: str,
) -> Appointment:
    return Appointment(
        appointment_id=appointment_id,
        patient_id=patient_id,
        doctor_id=doctor_id,
        date=dt.date.fromisoformat(date),
        time=dt.time.fromisoformat(time),
        status=status,
        notes=notes,
    )


_P, _C, _D, _X = (
    AppointmentStatus.PENDING,
    AppointmentStatus.CONFIRMED,
    AppointmentStatus.COMPLETED,
    AppointmentStatus.CANCELLED,
)

APPOINTMENTS: list[Appointment] = [
    _appt("1", "1", "1", "2025-06-15", "09:00", _C, "Regular checkup"),
    _appt("2", "2", "3", "2025-06-16", "10:30", _P, "Follow-up appointment"),
    _appt("3", "3", "2", "2025-06-17", "14:00", _D, "Prescription renewal"),
    _appt("4", "4", "5", "2025-06-18", "11:15", _X, "Skin examination"),
    _appt("5", "5", "4", "2025-06-19", "15:45", _C, "Annual checkup"),
    _appt("6", "1", "2", "2025-06-20", "13:30", _P, "Consultation"),
    _appt("7", "2", "1", "2025-06-21", "10:00", _C, "Blood test results"),
    _appt("8", "3", "5", "2025-06-22", "16:15", _P, "New patient visit"),
    _appt("9", "4", "3", "2025-06-23", "09:45", _C, "X-ray review"),
    _appt("10", "5", "4", "2025-06-24", "14:30", _P, "Vaccination"),
]


def _window(
    window_id: str, doctor_id: str, weekday: Weekday, start: str, end: str
) -> ScheduleWindow:
    return ScheduleWindow(
        window_id=window_id,
        doctor_id=doctor_id,
        weekday=weekday,
        start_time=dt.time.fromisoformat(start),
        end_time=dt.time.fromisoformat(end),
    )


SCHEDULES: list[ScheduleWindow] = [
    _window("1", "1", MON, "09:00", "17:00"),
    _window("2", "1", WED, "09:00", "17:00"),
    _window("3", "1", FRI, "09:00", "17:00"),
    _window("4", "2", TUE, "08:00", "16:00"),
    _window("5", "2", THU, "08:00", "16:00"),
    _window("6", "3", MON, "10:00", "18:00"),
    _window("7", "3", TUE, "10:00", "18:00"),
    _window("8", "3", FRI, "10:00", "18:00"),
    _window("9", "4", WED, "09:00", "17:00"),
    _window("10", "4", THU, "09:00", "17:00"),
    _window("11", "4", FRI, "09:00", "17:00"),
    _window("12", "5", MON, "08:00", "16:00"),
    _window("13", "5", THU, "08:00", "16:00"),
]

ACCOUNTS: list[UserAccount] = [
    UserAccount(user_id="1", email="admin@hospital.com", password="admin123",
                name="Admin User", role=Role.ADMIN, profile_id="1"),
    UserAccount(user_id="2", email="doctor@hospital.com", password="doctor123",
                name="Dr. Smith", role=Role.DOCTOR, profile_id="1"),
    UserAccount(user_id="3", email="patient@hospital.com", password="patient123",
                name="John Doe", role=Role.PATIENT, profile_id="1"),
]  # fmt: skip


def build_seeded_store() -> InMemoryClinicStore:
    """A fresh store holding the demo dataset."""
    return InMemoryClinicStore(
        doctors=DOCTORS,
        patients=PATIENTS,
        schedules=SCHEDULES,
        appointments=APPOINTMENTS,
        accounts=ACCOUNTS,
    )
