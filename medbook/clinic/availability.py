"""Slot availability for a doctor on a calendar date.

Availability is the doctor's weekday window cut down to the clinic's candidate
slots, minus the slots already held by pending or confirmed appointments.
Nothing here touches a store or a clock; callers pass in fresh snapshots.
"""

import datetime as dt
from collections.abc import Iterable, Sequence

from medbook.domain.models import Appointment, ScheduleWindow, Weekday


def find_window(
    doctor_id: str, date: dt.date, schedule_windows: Iterable[ScheduleWindow]
) -> ScheduleWindow | None:
    """Return the doctor's window for ``date``'s weekday, if any."""
    weekday = Weekday.of(date)
    for window in schedule_windows:
        if window.doctor_id == doctor_id and window.weekday == weekday:
            return window
    return None


def window_slots(
    doctor_id: str,
    date: dt.date,
    candidate_slots: Sequence[dt.time],
    schedule_windows: Iterable[ScheduleWindow],
) -> list[dt.time]:
    """Candidate slots that fall inside the doctor's window, ignoring bookings."""
    window = find_window(doctor_id, date, schedule_windows)
    if window is None:
        return []
    return [slot for slot in candidate_slots if window.contains(slot)]


def booked_times(
    doctor_id: str, date: dt.date, appointments: Iterable[Appointment]
) -> set[dt.time]:
    """Times on ``date`` held by the doctor's pending or confirmed appointments."""
    return {
        a.time
        for a in appointments
        if a.doctor_id == doctor_id and a.date == date and a.blocks_slot
    }


def resolve_available_slots(
    doctor_id: str,
    date: dt.date,
    candidate_slots: Sequence[dt.time],
    schedule_windows: Iterable[ScheduleWindow],
    appointments: Iterable[Appointment],
) -> list[dt.time]:
    """Bookable slots for ``doctor_id`` on ``date``, in ascending order."""
    in_window = window_slots(doctor_id, date, sorted(candidate_slots), schedule_windows)
    if not in_window:
        return []
    taken = booked_times(doctor_id, date, appointments)
    return [slot for slot in in_window if slot not in taken]
