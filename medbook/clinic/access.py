from medbook.domain.exceptions import AuthorizationError
from medbook.domain.models import Caller, Role


def require_admin(caller: Caller, action: str) -> None:
    if caller.role != Role.ADMIN:
        raise AuthorizationError(caller.role.value, action)


def require_admin_or_doctor(caller: Caller, doctor_id: str, action: str) -> None:
    """Admins may act on any doctor's records; a doctor only on their own."""
    if caller.role == Role.ADMIN:
        return
    if caller.role == Role.DOCTOR and caller.caller_id == doctor_id:
        return
    raise AuthorizationError(caller.role.value, action)


def require_patient_self(caller: Caller, patient_id: str, action: str) -> None:
    if caller.role != Role.PATIENT or caller.caller_id != patient_id:
        raise AuthorizationError(caller.role.value, action)
