from dataclasses import dataclass
from typing import Callable

from loguru import logger

from medbook.clinic.adapters.clock import SystemClock
from medbook.clinic.adapters.memory import InMemoryClinicStore
from medbook.clinic.adapters.seed import build_seeded_store
from medbook.clinic.directory import DirectoryService
from medbook.clinic.ports import ClinicStoreProtocol, ClockProtocol
from medbook.clinic.schedules import ScheduleService
from medbook.clinic.service import BookingService
from medbook.config import AppConfig, StoreAdapter
from medbook.portal.dashboard import DashboardService
from medbook.portal.handlers import PortalHandlers
from medbook.portal.session import SessionGate


@dataclass(frozen=True)
class ClinicServices:
    """Every service wired over one shared store and clock."""

    store: ClinicStoreProtocol
    clock: ClockProtocol
    booking: BookingService
    schedules: ScheduleService
    directory: DirectoryService
    sessions: SessionGate
    dashboard: DashboardService
    portal: PortalHandlers


_BUILDERS: dict[StoreAdapter, Callable[[], ClinicStoreProtocol]] = {
    StoreAdapter.MEMORY: InMemoryClinicStore,
    StoreAdapter.SEEDED: build_seeded_store,
}


def build_clinic(config: AppConfig, clock: ClockProtocol | None = None) -> ClinicServices:
    """Build the clinic services based on config."""
    adapter = config.store.adapter
    logger.info("Building clinic with store adapter: {}", adapter.value)

    store = _BUILDERS[adapter]()
    clock = clock or SystemClock(config.clinic.timezone)
    booking = BookingService(
        store,
        clock,
        config.clinic.slot_times,
        horizon_months=config.clinic.booking_horizon_months,
    )
    schedules = ScheduleService(store)
    directory = DirectoryService(store)
    sessions = SessionGate(store, clock, directory, ttl_minutes=config.session.ttl_minutes)
    return ClinicServices(
        store=store,
        clock=clock,
        booking=booking,
        schedules=schedules,
        directory=directory,
        sessions=sessions,
        dashboard=DashboardService(store, clock),
        portal=PortalHandlers(sessions, booking, directory, schedules),
    )
