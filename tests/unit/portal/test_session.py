import asyncio
import datetime as dt

import pytest

from medbook.clinic.adapters.clock import FixedClock
from medbook.clinic.adapters.memory import InMemoryClinicStore
from medbook.domain.exceptions import AuthenticationError, AuthorizationError, ValidationError
from medbook.domain.models import Caller, Role, Session, UserAccount
from medbook.portal.session import PORTAL_ROLES, SessionGate, home_portal

# Fixtures (sessions, store, clock) provided by tests/conftest.py


class TestLogin:
    @pytest.mark.asyncio
    async def test_matches_credentials(self, sessions: SessionGate) -> None:
        session = await sessions.login("doctor@hospital.com", "doctor123")

        assert session.role == Role.DOCTOR
        assert session.caller == Caller(role=Role.DOCTOR, caller_id="1")
        assert sessions.resolve(session.token) == session

    @pytest.mark.asyncio
    async def test_email_is_case_insensitive(self, sessions: SessionGate) -> None:
        session = await sessions.login("  Admin@Hospital.com", "admin123")

        assert session.role == Role.ADMIN

    @pytest.mark.parametrize(
        ("email", "password"),
        [("doctor@hospital.com", "wrong"), ("nobody@hospital.com", "doctor123")],
        ids=["bad-password", "unknown-email"],
    )
    @pytest.mark.asyncio
    async def test_rejects_bad_credentials(
        self, sessions: SessionGate, email: str, password: str
    ) -> None:
        with pytest.raises(AuthenticationError, match="invalid email or password"):
            await sessions.login(email, password)

    @pytest.mark.asyncio
    async def test_tokens_are_unique(self, sessions: SessionGate) -> None:
        first = await sessions.login("patient@hospital.com", "patient123")
        second = await sessions.login("patient@hospital.com", "patient123")

        assert first.token != second.token


class TestResolve:
    def test_unknown_token(self, sessions: SessionGate) -> None:
        with pytest.raises(AuthenticationError, match="unknown session"):
            sessions.resolve("nope")

    @pytest.mark.asyncio
    async def test_expires_after_ttl(self, sessions: SessionGate, clock: FixedClock) -> None:
        session = await sessions.login("patient@hospital.com", "patient123")

        clock.advance(dt.timedelta(minutes=59))
        sessions.resolve(session.token)
        clock.advance(dt.timedelta(minutes=1))

        with pytest.raises(AuthenticationError, match="session expired"):
            sessions.resolve(session.token)
        with pytest.raises(AuthenticationError, match="unknown session"):
            sessions.resolve(session.token)

    @pytest.mark.asyncio
    async def test_logout(self, sessions: SessionGate) -> None:
        session = await sessions.login("patient@hospital.com", "patient123")

        sessions.logout(session.token)

        with pytest.raises(AuthenticationError):
            sessions.resolve(session.token)

    @pytest.mark.asyncio
    async def test_new_login_drops_abandoned_sessions(
        self, sessions: SessionGate, clock: FixedClock
    ) -> None:
        stale = await sessions.login("patient@hospital.com", "patient123")
        clock.advance(dt.timedelta(minutes=61))

        fresh = await sessions.login("doctor@hospital.com", "doctor123")

        assert set(sessions._sessions) == {fresh.token}
        assert stale.token not in sessions._sessions


class TestRegisterPatient:
    @pytest.mark.asyncio
    async def test_creates_patient_and_account(
        self, sessions: SessionGate, store: InMemoryClinicStore
    ) -> None:
        session = await sessions.register_patient(
            name="Emily Brown", email="emily@example.com", password="secret"
        )

        assert session.role == Role.PATIENT
        assert session.profile_id == "3"
        patient = await store.patients.get("3")
        assert patient is not None
        assert patient.name == "Emily Brown"
        again = await sessions.login("emily@example.com", "secret")
        assert again.profile_id == "3"

    @pytest.mark.asyncio
    async def test_rejects_taken_email(self, sessions: SessionGate) -> None:
        with pytest.raises(ValidationError, match="already registered"):
            await sessions.register_patient(
                name="Dup", email="PATIENT@hospital.com", password="x"
            )

    @pytest.mark.asyncio
    async def test_requires_fields(self, sessions: SessionGate) -> None:
        with pytest.raises(ValidationError):
            await sessions.register_patient(name=" ", email="a@b.c", password="x")

    @pytest.mark.asyncio
    async def test_concurrent_registrations_share_one_email(
        self, sessions: SessionGate, store: InMemoryClinicStore
    ) -> None:
        read_accounts = store.accounts.list

        async def slow_list() -> list[UserAccount]:
            accounts = await read_accounts()
            await asyncio.sleep(0)
            return accounts

        store.accounts.list = slow_list  # type: ignore[method-assign]

        results = await asyncio.gather(
            *(
                sessions.register_patient(name="Eve", email="eve@example.com", password="pw")
                for _ in range(2)
            ),
            return_exceptions=True,
        )

        assert sum(isinstance(r, Session) for r in results) == 1
        assert sum(isinstance(r, ValidationError) for r in results) == 1
        accounts = [a for a in await read_accounts() if a.email == "eve@example.com"]
        assert len(accounts) == 1
        assert len(await store.patients.list()) == 3


class TestPortals:
    @pytest.mark.parametrize(
        ("role", "path"),
        [(Role.ADMIN, "/admin"), (Role.DOCTOR, "/doctor"), (Role.PATIENT, "/patient")],
        ids=["admin", "doctor", "patient"],
    )
    def test_home_portal(self, role: Role, path: str) -> None:
        assert home_portal(role) == path
        assert PORTAL_ROLES[path] == role

    @pytest.mark.asyncio
    async def test_enter_own_portal(self, sessions: SessionGate) -> None:
        session = await sessions.login("patient@hospital.com", "patient123")

        assert sessions.enter_portal(session.token, "/patient") == session

    @pytest.mark.asyncio
    async def test_other_portal_is_refused(self, sessions: SessionGate) -> None:
        session = await sessions.login("patient@hospital.com", "patient123")

        with pytest.raises(AuthorizationError):
            sessions.enter_portal(session.token, "/admin")
