import datetime as dt
from typing import Any, TypeVar

import pydantic
from loguru import logger

from medbook.clinic.access import require_admin
from medbook.clinic.ports import ClinicStoreProtocol
from medbook.domain.exceptions import NotFoundError, ValidationError, ValidationReason
from medbook.domain.models import AppointmentStatus, Caller, Doctor, Patient, Weekday

RecordT = TypeVar("RecordT", Doctor, Patient)

SPECIALTIES: list[str] = [
    "Cardiology",
    "Dermatology",
    "Endocrinology",
    "Gastroenterology",
    "Neurology",
    "Obstetrics",
    "Oncology",
    "Ophthalmology",
    "Orthopedics",
    "Pediatrics",
    "Psychiatry",
    "Radiology",
    "Urology",
]


def _apply(model: type[RecordT], record: RecordT, changes: dict[str, Any]) -> RecordT:
    try:
        return model.model_validate({**record.model_dump(), **changes})
    except pydantic.ValidationError as exc:
        raise ValidationError(ValidationReason.INVALID_INPUT, str(exc)) from exc


class DirectoryService:
    """Doctor and patient records. Reads are open; writes are admin-only."""

    def __init__(self, store: ClinicStoreProtocol) -> None:
        self._store = store

    async def list_doctors(
        self, search: str | None = None, specialty: str | None = None
    ) -> list[Doctor]:
        """Filter doctors by a name/specialty substring and an exact specialty."""
        doctors = await self._store.doctors.list()
        if search:
            needle = search.lower()
            doctors = [
                d for d in doctors if needle in d.name.lower() or needle in d.specialty.lower()
            ]
        if specialty:
            doctors = [d for d in doctors if d.specialty == specialty]
        return doctors

    async def get_doctor(self, doctor_id: str) -> Doctor:
        doctor = await self._store.doctors.get(doctor_id)
        if doctor is None:
            raise NotFoundError("doctor", doctor_id)
        return doctor

    async def create_doctor(
        self,
        caller: Caller,
        *,
        name: str,
        specialty: str,
        email: str = "",
        phone: str = "",
        available_days: tuple[Weekday, ...] = (),
    ) -> Doctor:
        require_admin(caller, "add doctors")
        async with self._store.locked():
            doctor = Doctor(
                doctor_id=await self._store.doctors.next_id(),
                name=name,
                specialty=specialty,
                email=email,
                phone=phone,
                available_days=available_days,
            )
            await self._store.doctors.insert(doctor)
        logger.info("Doctor created: id={}", doctor.doctor_id)
        return doctor

    async def update_doctor(self, caller: Caller, doctor_id: str, **changes: Any) -> Doctor:
        """Apply field ``changes`` to a doctor. The id cannot be changed."""
        require_admin(caller, "edit doctors")
        changes.pop("doctor_id", None)
        async with self._store.locked():
            doctor = await self.get_doctor(doctor_id)
            updated = _apply(Doctor, doctor, changes)
            await self._store.doctors.update(updated)
        logger.info("Doctor updated: id={}", doctor_id)
        return updated

    async def delete_doctor(self, caller: Caller, doctor_id: str) -> None:
        """Remove a doctor with their weekly windows and cancel their open appointments.

        Completed and cancelled appointments stay as history.
        """
        require_admin(caller, "remove doctors")
        async with self._store.locked():
            if not await self._store.doctors.delete(doctor_id):
                raise NotFoundError("doctor", doctor_id)
            for window in await self._store.schedules.list():
                if window.doctor_id == doctor_id:
                    await self._store.schedules.delete(window.window_id)
            cancelled = 0
            for appointment in await self._store.appointments.list():
                if appointment.doctor_id == doctor_id and appointment.blocks_slot:
                    await self._store.appointments.update(
                        appointment.model_copy(update={"status": AppointmentStatus.CANCELLED})
                    )
                    cancelled += 1
        logger.info("Doctor deleted: id={}, cancelled {} appointments", doctor_id, cancelled)

    async def list_patients(self, caller: Caller, search: str | None = None) -> list[Patient]:
        require_admin(caller, "list patients")
        patients = await self._store.patients.list()
        if search:
            needle = search.lower()
            patients = [
                p for p in patients if needle in p.name.lower() or needle in p.email.lower()
            ]
        return patients

    async def get_patient(self, patient_id: str) -> Patient:
        patient = await self._store.patients.get(patient_id)
        if patient is None:
            raise NotFoundError("patient", patient_id)
        return patient

    async def create_patient(
        self,
        caller: Caller,
        *,
        name: str,
        email: str = "",
        phone: str = "",
        date_of_birth: dt.date | None = None,
    ) -> Patient:
        require_admin(caller, "add patients")
        async with self._store.locked():
            return await self.insert_patient_record(
                name=name, email=email, phone=phone, date_of_birth=date_of_birth
            )

    async def insert_patient_record(
        self,
        *,
        name: str,
        email: str = "",
        phone: str = "",
        date_of_birth: dt.date | None = None,
    ) -> Patient:
        """Insert a patient without a role check. The caller must hold ``store.locked()``."""
        patient = Patient(
            patient_id=await self._store.patients.next_id(),
            name=name,
            email=email,
            phone=phone,
            date_of_birth=date_of_birth,
        )
        await self._store.patients.insert(patient)
        logger.info("Patient created: id={}", patient.patient_id)
        return patient

    async def update_patient(self, caller: Caller, patient_id: str, **changes: Any) -> Patient:
        require_admin(caller, "edit patients")
        changes.pop("patient_id", None)
        async with self._store.locked():
            patient = await self.get_patient(patient_id)
            updated = _apply(Patient, patient, changes)
            await self._store.patients.update(updated)
        logger.info("Patient updated: id={}", patient_id)
        return updated

    async def delete_patient(self, caller: Caller, patient_id: str) -> None:
        require_admin(caller, "remove patients")
        async with self._store.locked():
            if not await self._store.patients.delete(patient_id):
                raise NotFoundError("patient", patient_id)
        logger.info("Patient deleted: id={}", patient_id)
