import asyncio
import datetime as dt
import sys

from loguru import logger

from medbook.clinic.factory import build_clinic
from medbook.config import AppConfig


def _next_weekday(start: dt.date, weekday: int) -> dt.date:
    return start + dt.timedelta(days=(weekday - start.weekday()) % 7 or 7)


async def run_demo(config: AppConfig) -> None:
    logger.info("Starting medbook portal walkthrough")

    clinic = build_clinic(config)
    portal = clinic.portal

    patient = await portal.handle_login(
        {"email": "patient@hospital.com", "password": "patient123"}
    )
    logger.info("Patient login: {}", patient)

    doctors = await portal.handle_find_doctors(patient["token"], {"specialty": "Cardiology"})
    doctor_id = doctors["doctors"][0]["doctor_id"]

    monday = _next_weekday(clinic.clock.today(), 0)
    slots = await portal.handle_available_slots(
        patient["token"], {"doctor_id": doctor_id, "date": monday.isoformat()}
    )
    logger.info("Free slots on {}: {}", monday, [s["label"] for s in slots["slots"]])

    booking_args = {
        "doctor_id": doctor_id,
        "date": monday.isoformat(),
        "time": slots["slots"][0]["time"],
        "notes": "Annual checkup",
    }
    booked = await portal.handle_book_appointment(patient["token"], booking_args)
    logger.info("Booked: {}", booked)

    again = await portal.handle_book_appointment(patient["token"], booking_args)
    logger.info("Second booking of the same slot: {}", again["message"])

    doctor = await portal.handle_login({"email": "doctor@hospital.com", "password": "doctor123"})
    confirmed = await portal.handle_update_status(
        doctor["token"],
        {"appointment_id": booked["appointment"]["appointment_id"], "status": "confirmed"},
    )
    logger.info("Doctor confirmed: {}", confirmed["appointment"])

    admin = await portal.handle_login({"email": "admin@hospital.com", "password": "admin123"})
    overview = await clinic.dashboard.admin_overview(
        clinic.sessions.resolve(admin["token"]).caller
    )
    logger.info("Admin overview: {}", overview.model_dump(exclude={"recent_appointments"}))


def main() -> None:
    config = AppConfig()
    logger.remove()
    logger.add(sys.stderr, level=config.log_level)
    asyncio.run(run_demo(config))


if __name__ == "__main__":
    main()
