import asyncio
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from typing import Generic, TypeVar

from pydantic import BaseModel

from medbook.domain.exceptions import NotFoundError
from medbook.domain.models import Appointment, Doctor, Patient, ScheduleWindow, UserAccount

RecordT = TypeVar("RecordT", bound=BaseModel)


class InMemoryTable(Generic[RecordT]):
    """Dict-backed table of frozen records keyed by ``id_field``.

    Ids are handed out from a counter that only moves forward, so an id freed
    by ``delete`` is never reused.
    """

    def __init__(self, entity: str, id_field: str, records: Iterable[RecordT] = ()) -> None:
        self.entity = entity
        self._id_field = id_field
        self._rows: dict[str, RecordT] = {}
        self._last_id = 0
        for record in records:
            self._put(record)

    def _key(self, record: RecordT) -> str:
        return str(getattr(record, self._id_field))

    def _put(self, record: RecordT) -> RecordT:
        key = self._key(record)
        self._rows[key] = record
        if key.isdigit():
            self._last_id = max(self._last_id, int(key))
        return record

    async def list(self) -> list[RecordT]:
        return list(self._rows.values())

    async def get(self, record_id: str) -> RecordT | None:
        return self._rows.get(record_id)

    async def insert(self, record: RecordT) -> RecordT:
        key = self._key(record)
        if key in self._rows:
            raise ValueError(f"Duplicate {self.entity} id: {key}")
        return self._put(record)

    async def update(self, record: RecordT) -> RecordT:
        key = self._key(record)
        if key not in self._rows:
            raise NotFoundError(self.entity, key)
        return self._put(record)

    async def delete(self, record_id: str) -> bool:
        return self._rows.pop(record_id, None) is not None

    async def next_id(self) -> str:
        self._last_id += 1
        return str(self._last_id)

    def __len__(self) -> int:
        return len(self._rows)


class InMemoryClinicStore:
    """Process-local clinic store. Contents vanish with the process.

    A single ``asyncio.Lock`` guards every check-then-write unit; reads go
    straight to the tables.
    """

    def __init__(
        self,
        *,
        doctors: Iterable[Doctor] = (),
        patients: Iterable[Patient] = (),
        schedules: Iterable[ScheduleWindow] = (),
        appointments: Iterable[Appointment] = (),
        accounts: Iterable[UserAccount] = (),
    ) -> None:
        self.doctors: InMemoryTable[Doctor] = InMemoryTable("doctor", "doctor_id", doctors)
        self.patients: InMemoryTable[Patient] = InMemoryTable("patient", "patient_id", patients)
        self.schedules: InMemoryTable[ScheduleWindow] = InMemoryTable(
            "schedule", "window_id", schedules
        )
        self.appointments: InMemoryTable[Appointment] = InMemoryTable(
            "appointment", "appointment_id", appointments
        )
        self.accounts: InMemoryTable[UserAccount] = InMemoryTable("account", "user_id", accounts)
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def locked(self) -> AsyncIterator[None]:
        async with self._lock:
            yield
