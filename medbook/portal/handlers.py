import datetime as dt
from typing import Any

from loguru import logger

from medbook.clinic.adapters.datetime_helpers import time_to_12h
from medbook.clinic.directory import DirectoryService
from medbook.clinic.schedules import ScheduleService
from medbook.clinic.service import BookingService
from medbook.clinic.transitions import allowed_targets
from medbook.domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ClinicError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from medbook.domain.models import Appointment, AppointmentStatus, Doctor, Role, Weekday
from medbook.portal.session import SessionGate, home_portal

Result = dict[str, Any]

_ERROR_CODES: list[tuple[type[ClinicError], str]] = [
    (ValidationError, "validation"),
    (ConflictError, "conflict"),
    (NotFoundError, "not_found"),
    (InvalidTransitionError, "invalid_transition"),
    (AuthorizationError, "forbidden"),
    (AuthenticationError, "unauthenticated"),
]


def _error_result(exc: ClinicError) -> Result:
    code = next((c for cls, c in _ERROR_CODES if isinstance(exc, cls)), "error")
    result: Result = {"success": False, "error": True, "code": code, "message": str(exc)}
    if isinstance(exc, (ValidationError, ConflictError)):
        result["reason"] = exc.reason.value
    return result


def _unexpected(action: str) -> Result:
    logger.exception("Unexpected error in {}", action)
    return {
        "success": False,
        "error": True,
        "code": "internal",
        "message": f"An unexpected error occurred while trying to {action}.",
    }


def _invalid(message: str) -> Result:
    return {"success": False, "error": True, "code": "validation", "message": message}


def _parse_iso_date(value: object, field_name: str) -> tuple[dt.date | None, str | None]:
    """Parse an ISO 8601 date string. Returns ``(date, None)`` or ``(None, error_msg)``."""
    if not isinstance(value, str):
        return (
            None,
            f"Invalid date format for '{field_name}': must be a string in YYYY-MM-DD format.",
        )
    try:
        return dt.date.fromisoformat(value), None
    except (ValueError, TypeError):
        return None, f"Invalid date format for '{field_name}': '{value}'. Expected YYYY-MM-DD."


def _parse_hhmm(value: object, field_name: str) -> tuple[dt.time | None, str | None]:
    """Parse an ``HH:MM`` time string. Returns ``(time, None)`` or ``(None, error_msg)``."""
    if not isinstance(value, str):
        return None, f"Invalid time format for '{field_name}': must be a string in HH:MM format."
    try:
        parsed = dt.time.fromisoformat(value)
    except (ValueError, TypeError):
        return None, f"Invalid time format for '{field_name}': '{value}'. Expected HH:MM."
    if parsed.tzinfo is not None or parsed.second or parsed.microsecond:
        return None, f"Invalid time for '{field_name}': '{value}'. Expected plain HH:MM."
    return parsed, None


def appointment_payload(appointment: Appointment) -> Result:
    return {
        "appointment_id": appointment.appointment_id,
        "patient_id": appointment.patient_id,
        "doctor_id": appointment.doctor_id,
        "date": appointment.date.isoformat(),
        "time": appointment.time.strftime("%H:%M"),
        "status": appointment.status.value,
        "notes": appointment.notes,
        "next_statuses": [s.value for s in allowed_targets(appointment.status)],
    }


def doctor_payload(doctor: Doctor) -> Result:
    return {
        "doctor_id": doctor.doctor_id,
        "name": doctor.name,
        "specialty": doctor.specialty,
        "email": doctor.email,
        "phone": doctor.phone,
        "available_days": [d.value for d in doctor.available_days],
    }


class PortalHandlers:
    """Entry points the portal views call with a session token and raw form values."""

    def __init__(
        self,
        sessions: SessionGate,
        booking: BookingService,
        directory: DirectoryService,
        schedules: ScheduleService,
    ) -> None:
        self._sessions = sessions
        self._booking = booking
        self._directory = directory
        self._schedules = schedules

    async def handle_login(self, arguments: dict[str, Any]) -> Result:
        email: str = arguments.get("email", "")
        password: str = arguments.get("password", "")

        if not email or not password:
            return _invalid("Both 'email' and 'password' are required.")

        try:
            session = await self._sessions.login(email, password)
        except ClinicError as exc:
            return _error_result(exc)
        except Exception:
            return _unexpected("log in")

        return {
            "success": True,
            "token": session.token,
            "name": session.name,
            "role": session.role.value,
            "redirect": home_portal(session.role),
            "expires_at": session.expires_at.isoformat(),
        }

    async def handle_find_doctors(self, token: str, arguments: dict[str, Any]) -> Result:
        search: str = arguments.get("search", "")
        specialty: str = arguments.get("specialty", "")

        try:
            self._sessions.resolve(token)
            doctors = await self._directory.list_doctors(search or None, specialty or None)
        except ClinicError as exc:
            return _error_result(exc)
        except Exception:
            return _unexpected("search for doctors")

        return {"success": True, "doctors": [doctor_payload(d) for d in doctors]}

    async def handle_available_slots(self, token: str, arguments: dict[str, Any]) -> Result:
        doctor_id: str = arguments.get("doctor_id", "")
        date_str: str = arguments.get("date", "")

        if not doctor_id or not date_str:
            return _invalid("Both 'doctor_id' and 'date' are required.")

        date_val, err = _parse_iso_date(date_str, "date")
        if err or date_val is None:
            return _invalid(err or "Invalid date.")

        logger.debug("Portal call: available_slots")

        try:
            self._sessions.resolve(token)
            slots = await self._booking.available_slots(doctor_id, date_val)
        except ClinicError as exc:
            return _error_result(exc)
        except Exception:
            return _unexpected("load available times")

        first, last = self._booking.booking_range()
        result: Result = {
            "success": True,
            "doctor_id": doctor_id,
            "date": date_val.isoformat(),
            "slots": [{"time": s.strftime("%H:%M"), "label": time_to_12h(s)} for s in slots],
            "min_date": first.isoformat(),
            "max_date": last.isoformat(),
        }
        if not slots:
            result["message"] = (
                "No available time slots for this date. Please select another date."
            )
        return result

    async def handle_book_appointment(self, token: str, arguments: dict[str, Any]) -> Result:
        doctor_id: str = arguments.get("doctor_id", "")
        date_str: str = arguments.get("date", "")
        time_str: str = arguments.get("time", "")
        notes: str = arguments.get("notes", "")

        if not doctor_id or not date_str or not time_str:
            return _invalid("'doctor_id', 'date', and 'time' are all required.")

        date_val, date_err = _parse_iso_date(date_str, "date")
        time_val, time_err = _parse_hhmm(time_str, "time")
        err = date_err or time_err
        if err or date_val is None or time_val is None:
            return _invalid(err or "Invalid date/time format.")

        logger.debug("Portal call: book_appointment")

        try:
            session = self._sessions.resolve(token)
            self._sessions.require_role(session, Role.PATIENT)
            appointment = await self._booking.book_appointment(
                session.caller,
                session.profile_id,
                doctor_id,
                date_val,
                time_val,
                notes,
            )
        except ClinicError as exc:
            return _error_result(exc)
        except Exception:
            return _unexpected("book the appointment")

        return {
            "success": True,
            "appointment": appointment_payload(appointment),
            "message": "Appointment booked successfully.",
        }

    async def handle_update_status(self, token: str, arguments: dict[str, Any]) -> Result:
        appointment_id: str = arguments.get("appointment_id", "")
        status_str: str = arguments.get("status", "")

        if not appointment_id or not status_str:
            return _invalid("Both 'appointment_id' and 'status' are required.")

        try:
            target = AppointmentStatus(status_str)
        except ValueError:
            valid = ", ".join(s.value for s in AppointmentStatus)
            return _invalid(f"Unknown status '{status_str}'. Expected one of: {valid}.")

        try:
            session = self._sessions.resolve(token)
            appointment = await self._booking.transition(session.caller, appointment_id, target)
        except ClinicError as exc:
            return _error_result(exc)
        except Exception:
            return _unexpected("update the appointment status")

        return {
            "success": True,
            "appointment": appointment_payload(appointment),
            "message": f"Appointment {appointment.status.value}.",
        }

    async def handle_update_notes(self, token: str, arguments: dict[str, Any]) -> Result:
        appointment_id: str = arguments.get("appointment_id", "")
        notes = arguments.get("notes", "")

        if not appointment_id:
            return _invalid("'appointment_id' is required.")
        if not isinstance(notes, str):
            return _invalid("'notes' must be a string.")

        try:
            session = self._sessions.resolve(token)
            appointment = await self._booking.update_notes(session.caller, appointment_id, notes)
        except ClinicError as exc:
            return _error_result(exc)
        except Exception:
            return _unexpected("update the notes")

        return {"success": True, "appointment": appointment_payload(appointment)}

    async def handle_list_appointments(self, token: str, arguments: dict[str, Any]) -> Result:
        status_str: str = arguments.get("status", "all")
        date_str: str = arguments.get("date", "")
        search: str = arguments.get("search", "")

        status: AppointmentStatus | None = None
        if status_str and status_str != "all":
            try:
                status = AppointmentStatus(status_str)
            except ValueError:
                return _invalid(f"Unknown status filter '{status_str}'.")

        on_date: dt.date | None = None
        if date_str:
            on_date, err = _parse_iso_date(date_str, "date")
            if err:
                return _invalid(err)

        try:
            session = self._sessions.resolve(token)
            appointments = await self._booking.list_appointments(
                session.caller, status=status, on_date=on_date, search=search or None
            )
        except ClinicError as exc:
            return _error_result(exc)
        except Exception:
            return _unexpected("list appointments")

        return {
            "success": True,
            "count": len(appointments),
            "appointments": [appointment_payload(a) for a in appointments],
        }

    async def handle_add_schedule_window(self, token: str, arguments: dict[str, Any]) -> Result:
        day: str = arguments.get("day", "")
        start_str: str = arguments.get("start_time", "")
        end_str: str = arguments.get("end_time", "")

        if not day or not start_str or not end_str:
            return _invalid("'day', 'start_time', and 'end_time' are all required.")

        try:
            weekday = Weekday(day)
        except ValueError:
            return _invalid(f"Unknown day '{day}'.")

        start_val, start_err = _parse_hhmm(start_str, "start_time")
        end_val, end_err = _parse_hhmm(end_str, "end_time")
        err = start_err or end_err
        if err or start_val is None or end_val is None:
            return _invalid(err or "Invalid time format.")

        try:
            session = self._sessions.resolve(token)
            doctor_id: str = arguments.get("doctor_id", "") or session.profile_id
            window = await self._schedules.add_schedule_window(
                session.caller, doctor_id, weekday, start_val, end_val
            )
        except ClinicError as exc:
            return _error_result(exc)
        except Exception:
            return _unexpected("add the schedule")

        return {
            "success": True,
            "window_id": window.window_id,
            "doctor_id": window.doctor_id,
            "day": window.weekday.value,
            "start_time": window.start_time.strftime("%H:%M"),
            "end_time": window.end_time.strftime("%H:%M"),
            "message": "Schedule created successfully.",
        }
