import asyncio
import datetime as dt

import pytest

from medbook.clinic.adapters.clock import FixedClock, SystemClock
from medbook.clinic.adapters.memory import InMemoryClinicStore, InMemoryTable
from medbook.clinic.adapters.seed import build_seeded_store
from medbook.domain.exceptions import NotFoundError
from medbook.domain.models import Doctor


def _doctor(doctor_id: str, name: str = "Dr. A") -> Doctor:
    return Doctor(doctor_id=doctor_id, name=name, specialty="Cardiology")


class TestInMemoryTable:
    @pytest.mark.asyncio
    async def test_next_id_continues_after_preloaded_rows(self) -> None:
        table = InMemoryTable("doctor", "doctor_id", [_doctor("1"), _doctor("7")])

        assert await table.next_id() == "8"
        assert await table.next_id() == "9"

    @pytest.mark.asyncio
    async def test_update_replaces_record(self) -> None:
        table = InMemoryTable("doctor", "doctor_id", [_doctor("1")])

        await table.update(_doctor("1", name="Dr. B"))

        stored = await table.get("1")
        assert stored is not None
        assert stored.name == "Dr. B"

    @pytest.mark.asyncio
    async def test_update_missing_raises(self) -> None:
        table: InMemoryTable[Doctor] = InMemoryTable("doctor", "doctor_id")

        with pytest.raises(NotFoundError, match="Doctor not found: 3"):
            await table.update(_doctor("3"))

    @pytest.mark.asyncio
    async def test_insert_duplicate_raises(self) -> None:
        table = InMemoryTable("doctor", "doctor_id", [_doctor("1")])

        with pytest.raises(ValueError, match="Duplicate doctor id"):
            await table.insert(_doctor("1"))

    @pytest.mark.asyncio
    async def test_delete(self) -> None:
        table = InMemoryTable("doctor", "doctor_id", [_doctor("1")])

        assert await table.delete("1") is True
        assert await table.delete("1") is False
        assert len(table) == 0


class TestStoreLock:
    @pytest.mark.asyncio
    async def test_locked_serializes_writers(self) -> None:
        store = InMemoryClinicStore()
        order: list[str] = []

        async def writer(name: str) -> None:
            async with store.locked():
                order.append(f"{name}-in")
                await asyncio.sleep(0)
                order.append(f"{name}-out")

        await asyncio.gather(writer("a"), writer("b"))

        assert order == ["a-in", "a-out", "b-in", "b-out"]


class TestSeededStore:
    @pytest.mark.asyncio
    async def test_loads_demo_dataset(self) -> None:
        store = build_seeded_store()

        assert len(await store.doctors.list()) == 5
        assert len(await store.patients.list()) == 5
        assert len(await store.appointments.list()) == 10
        assert len(await store.schedules.list()) == 13
        assert await store.appointments.next_id() == "11"

    @pytest.mark.asyncio
    async def test_each_call_is_independent(self) -> None:
        first = build_seeded_store()
        await first.doctors.delete("1")

        assert await build_seeded_store().doctors.get("1") is not None


class TestClocks:
    def test_fixed_clock_advances(self) -> None:
        clock = FixedClock.on(dt.date(2026, 10, 14))

        clock.advance(dt.timedelta(days=1))

        assert clock.today() == dt.date(2026, 10, 15)
        assert clock.now().tzinfo is not None

    def test_system_clock_is_timezone_aware(self) -> None:
        assert SystemClock("Europe/Madrid").now().tzinfo is not None
