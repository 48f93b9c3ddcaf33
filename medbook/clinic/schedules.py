import datetime as dt

from loguru import logger

from medbook.clinic.access import require_admin_or_doctor
from medbook.clinic.ports import ClinicStoreProtocol
from medbook.domain.exceptions import (
    ConflictError,
    ConflictReason,
    NotFoundError,
    ValidationError,
    ValidationReason,
)
from medbook.domain.models import Caller, ScheduleWindow, Weekday

_WEEK_ORDER = {day: index for index, day in enumerate(Weekday)}


def _check_window(start_time: dt.time, end_time: dt.time) -> None:
    if start_time.tzinfo is not None or end_time.tzinfo is not None:
        raise ValidationError(
            ValidationReason.INVALID_WINDOW, "window times are clinic-local and take no timezone"
        )
    if start_time >= end_time:
        raise ValidationError(
            ValidationReason.INVALID_WINDOW,
            f"end time {end_time:%H:%M} must be after start time {start_time:%H:%M}",
        )


class ScheduleService:
    """Maintains each doctor's weekly windows. At most one window per weekday."""

    def __init__(self, store: ClinicStoreProtocol) -> None:
        self._store = store

    async def list_schedule(self, doctor_id: str) -> list[ScheduleWindow]:
        """The doctor's windows ordered Monday to Sunday."""
        windows = [w for w in await self._store.schedules.list() if w.doctor_id == doctor_id]
        return sorted(windows, key=lambda w: _WEEK_ORDER[w.weekday])

    async def working_days(self, doctor_id: str) -> list[Weekday]:
        return [w.weekday for w in await self.list_schedule(doctor_id)]

    async def _ensure_free_weekday(
        self, doctor_id: str, weekday: Weekday, ignore_window_id: str | None = None
    ) -> None:
        for window in await self._store.schedules.list():
            if window.window_id == ignore_window_id:
                continue
            if window.doctor_id == doctor_id and window.weekday == weekday:
                raise ConflictError(
                    ConflictReason.DUPLICATE_WINDOW,
                    f"doctor {doctor_id} already has a schedule for {weekday.value}",
                )

    async def add_schedule_window(
        self,
        caller: Caller,
        doctor_id: str,
        weekday: Weekday,
        start_time: dt.time,
        end_time: dt.time,
    ) -> ScheduleWindow:
        require_admin_or_doctor(caller, doctor_id, "edit this doctor's schedule")
        _check_window(start_time, end_time)
        if await self._store.doctors.get(doctor_id) is None:
            raise NotFoundError("doctor", doctor_id)

        async with self._store.locked():
            await self._ensure_free_weekday(doctor_id, weekday)
            window = ScheduleWindow(
                window_id=await self._store.schedules.next_id(),
                doctor_id=doctor_id,
                weekday=weekday,
                start_time=start_time,
                end_time=end_time,
            )
            await self._store.schedules.insert(window)

        logger.info(
            "Schedule window {} added: doctor={}, {} {}-{}",
            window.window_id,
            doctor_id,
            weekday.value,
            start_time,
            end_time,
        )
        return window

    async def update_schedule_window(
        self,
        caller: Caller,
        window_id: str,
        *,
        weekday: Weekday | None = None,
        start_time: dt.time | None = None,
        end_time: dt.time | None = None,
    ) -> ScheduleWindow:
        async with self._store.locked():
            window = await self._store.schedules.get(window_id)
            if window is None:
                raise NotFoundError("schedule", window_id)
            require_admin_or_doctor(caller, window.doctor_id, "edit this doctor's schedule")

            new_weekday = window.weekday if weekday is None else weekday
            new_start = window.start_time if start_time is None else start_time
            new_end = window.end_time if end_time is None else end_time
            _check_window(new_start, new_end)
            if new_weekday != window.weekday:
                await self._ensure_free_weekday(window.doctor_id, new_weekday, window_id)

            updated = window.model_copy(
                update={"weekday": new_weekday, "start_time": new_start, "end_time": new_end}
            )
            await self._store.schedules.update(updated)

        logger.info("Schedule window {} updated", window_id)
        return updated

    async def remove_schedule_window(self, caller: Caller, window_id: str) -> ScheduleWindow:
        """Delete a window. Existing appointments on that weekday are kept."""
        async with self._store.locked():
            window = await self._store.schedules.get(window_id)
            if window is None:
                raise NotFoundError("schedule", window_id)
            require_admin_or_doctor(caller, window.doctor_id, "edit this doctor's schedule")
            await self._store.schedules.delete(window_id)

        logger.info("Schedule window {} removed", window_id)
        return window
