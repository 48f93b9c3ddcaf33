from medbook.domain.exceptions import InvalidTransitionError
from medbook.domain.models import AppointmentStatus

TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset(
        {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.CONFIRMED: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}


def allowed_targets(status: AppointmentStatus) -> list[AppointmentStatus]:
    """Statuses reachable from ``status`` in one step, in lifecycle order."""
    return [s for s in AppointmentStatus if s in TRANSITIONS[status]]


def check_transition(current: AppointmentStatus, target: AppointmentStatus) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is permitted."""
    if target not in TRANSITIONS[current]:
        raise InvalidTransitionError(current.value, target.value)
