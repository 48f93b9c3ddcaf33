import datetime as dt
import secrets

from loguru import logger

from medbook.clinic.directory import DirectoryService
from medbook.clinic.ports import ClinicStoreProtocol, ClockProtocol
from medbook.domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ValidationError,
    ValidationReason,
)
from medbook.domain.models import Role, Session, UserAccount

PORTAL_ROLES: dict[str, Role] = {
    "/admin": Role.ADMIN,
    "/doctor": Role.DOCTOR,
    "/patient": Role.PATIENT,
}

_HOME_PORTALS: dict[Role, str] = {role: path for path, role in PORTAL_ROLES.items()}


def home_portal(role: Role) -> str:
    """Where a role lands after login or after being turned away from another portal."""
    return _HOME_PORTALS[role]


class SessionGate:
    """Matches credentials against stored accounts and hands out session tokens.

    Sessions live in this object only. A token stops resolving once the clock
    passes its expiry or after ``logout``. Expired sessions are dropped each
    time a new one opens.
    """

    def __init__(
        self,
        store: ClinicStoreProtocol,
        clock: ClockProtocol,
        directory: DirectoryService,
        *,
        ttl_minutes: int = 60,
    ) -> None:
        self._store = store
        self._clock = clock
        self._directory = directory
        self._ttl = dt.timedelta(minutes=ttl_minutes)
        self._sessions: dict[str, Session] = {}

    def _prune_expired(self) -> None:
        now = self._clock.now()
        expired = [token for token, s in self._sessions.items() if s.expires_at <= now]
        for token in expired:
            del self._sessions[token]

    def _open_session(self, account: UserAccount) -> Session:
        self._prune_expired()
        session = Session(
            token=secrets.token_urlsafe(24),
            user_id=account.user_id,
            name=account.name,
            email=account.email,
            role=account.role,
            profile_id=account.profile_id,
            expires_at=self._clock.now() + self._ttl,
        )
        self._sessions[session.token] = session
        logger.info("Session opened: user={}, role={}", account.user_id, account.role.value)
        return session

    async def _find_account(self, email: str) -> UserAccount | None:
        email = email.strip().lower()
        for account in await self._store.accounts.list():
            if account.email.lower() == email:
                return account
        return None

    async def login(self, email: str, password: str) -> Session:
        account = await self._find_account(email)
        if account is None or not secrets.compare_digest(
            account.password.encode(), password.encode()
        ):
            raise AuthenticationError("invalid email or password")
        return self._open_session(account)

    async def register_patient(
        self,
        *,
        name: str,
        email: str,
        password: str,
        phone: str = "",
        date_of_birth: dt.date | None = None,
    ) -> Session:
        """Create a patient record with a login, then sign in as that patient."""
        if not name.strip() or not email.strip() or not password:
            raise ValidationError(
                ValidationReason.INVALID_INPUT, "name, email and password are required"
            )
        async with self._store.locked():
            if await self._find_account(email) is not None:
                raise ValidationError(
                    ValidationReason.INVALID_INPUT, f"{email} is already registered"
                )
            patient = await self._directory.insert_patient_record(
                name=name, email=email, phone=phone, date_of_birth=date_of_birth
            )
            account = UserAccount(
                user_id=await self._store.accounts.next_id(),
                email=email.strip(),
                password=password,
                name=name,
                role=Role.PATIENT,
                profile_id=patient.patient_id,
            )
            await self._store.accounts.insert(account)
        return self._open_session(account)

    def resolve(self, token: str) -> Session:
        session = self._sessions.get(token)
        if session is None:
            raise AuthenticationError("unknown session")
        if session.expires_at <= self._clock.now():
            del self._sessions[token]
            raise AuthenticationError("session expired")
        return session

    def logout(self, token: str) -> None:
        if self._sessions.pop(token, None) is not None:
            logger.info("Session closed")

    def require_role(self, session: Session, *roles: Role) -> None:
        if session.role not in roles:
            allowed = ", ".join(r.value for r in roles)
            raise AuthorizationError(session.role.value, f"use a portal for {allowed}")

    def enter_portal(self, token: str, portal: str) -> Session:
        """Resolve the token and check the role may open ``portal``."""
        session = self.resolve(token)
        self.require_role(session, PORTAL_ROLES[portal])
        return session
