from enum import Enum


class ValidationReason(str, Enum):
    OUT_OF_RANGE = "out_of_range"
    INVALID_WINDOW = "invalid_window"
    INVALID_INPUT = "invalid_input"


class ConflictReason(str, Enum):
    SLOT_TAKEN = "slot_taken"
    OUTSIDE_SCHEDULE = "outside_schedule"
    DUPLICATE_WINDOW = "duplicate_window"


class ClinicError(Exception):
    """Base exception for all clinic-related errors."""


class ValidationError(ClinicError):
    """Raised when input is malformed or outside booking policy."""

    def __init__(self, reason: ValidationReason, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(f"Invalid request ({reason.value}): {detail}" if detail else reason.value)


class ConflictError(ClinicError):
    """Raised when a slot or schedule window is no longer available at commit time."""

    def __init__(self, reason: ConflictReason, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(f"Conflict ({reason.value}): {detail}" if detail else reason.value)


class NotFoundError(ClinicError):
    """Raised when a referenced record does not exist."""

    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} not found: {entity_id}")


class InvalidTransitionError(ClinicError):
    """Raised when an appointment status change is not in the transition table."""

    def __init__(self, from_status: str, to_status: str) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Cannot move appointment from '{from_status}' to '{to_status}'")


class AuthorizationError(ClinicError):
    """Raised when the caller's role does not permit the action."""

    def __init__(self, role: str, action: str) -> None:
        self.role = role
        self.action = action
        super().__init__(f"Role '{role}' is not allowed to {action}")


class AuthenticationError(ClinicError):
    """Raised when credentials or a session token are rejected."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Authentication failed: {reason}")
