"""
Pytest fixtures for the campus events test suite.

Every test gets its own SQLite file database under ``tmp_path``; services
are exercised with sessions from ``session_factory`` and the HTTP layer
through an httpx client bound to the ASGI app.
"""

from datetime import date, timedelta
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient

from campus_events import database
from campus_events.auth import create_access_token
from campus_events.models import budget, registration  # noqa: F401
from campus_events.models.event import Event, EventStatus
from campus_events.models.user import User
from campus_events.permissions import Caller, Role
from campus_events.schemas.proposal import ProposalCreate
from campus_events.schemas.registration import RegistrationCreate
from campus_events.services import approval_workflow, proposal_store


@pytest.fixture
def anyio_backend():
    return "asyncio"


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
async def engine(tmp_path, anyio_backend):
    engine = database.build_engine(f"sqlite+aiosqlite:///{tmp_path / 'campus_events_test.db'}")
    await database.create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return database.build_sessionmaker(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


# =============================================================================
# Users and callers
# =============================================================================


@pytest.fixture
async def users(session_factory):
    async with session_factory() as session:
        people = SimpleNamespace(
            admin=User(email="admin@campus.edu", full_name="Campus Admin", role=Role.ADMIN.value),
            society=User(
                email="tech@campus.edu",
                full_name="Tech Society Lead",
                role=Role.SOCIETY.value,
                society_name="Tech Society",
                phone_number="0300-1111111",
            ),
            other_society=User(
                email="drama@campus.edu",
                full_name="Drama Club Lead",
                role=Role.SOCIETY.value,
                society_name="Drama Club",
            ),
            student=User(email="ayesha@campus.edu", full_name="Ayesha Khan", role=Role.STUDENT.value),
            other_student=User(email="bilal@campus.edu", full_name="Bilal Ahmed", role=Role.STUDENT.value),
            inactive=User(
                email="gone@campus.edu", full_name="Former Student", role=Role.STUDENT.value, is_active=False
            ),
        )
        session.add_all(vars(people).values())
        await session.commit()
    return people


@pytest.fixture
def callers(users):
    return SimpleNamespace(
        **{name: Caller(user_id=user.id, role=Role(user.role)) for name, user in vars(users).items()}
    )


def bearer(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, Role(user.role))}"}


# =============================================================================
# Domain helpers
# =============================================================================


def future_date(days: int = 30) -> date:
    return date.today() + timedelta(days=days)


def proposal_data(**overrides) -> ProposalCreate:
    fields = dict(
        event_name="Tech Fest",
        venue="Main Auditorium",
        requested_date=future_date(),
        time_slot="10:00-14:00",
        budget=10000,
        details="Annual technology festival with talks and a hackathon.",
    )
    fields.update(overrides)
    return ProposalCreate(**fields)


def registration_data(event_id: int, **overrides) -> RegistrationCreate:
    fields = dict(
        event_id=event_id,
        full_name="Ayesha Khan",
        email="ayesha@campus.edu",
        phone="0300-1234567",
    )
    fields.update(overrides)
    return RegistrationCreate(**fields)


@pytest.fixture
async def pending_proposal(session_factory, callers):
    async with session_factory() as session:
        proposal = await proposal_store.submit_proposal(session, callers.society, proposal_data())
    return proposal.id


@pytest.fixture
async def approved_event(session_factory, callers, pending_proposal):
    async with session_factory() as session:
        result = await approval_workflow.approve_proposal(session, pending_proposal, callers.admin)
    return result["event_id"]


@pytest.fixture
def make_event(session_factory, users):
    """Inserts an event directly, for states the workflow doesn't produce."""

    async def _make_event(**overrides) -> int:
        fields = dict(
            society_id=users.society.id,
            society_name="Tech Society",
            name="Robotics Workshop",
            venue="Lab 3",
            date=future_date(),
            time_slot="09:00-12:00",
            budget=2000.0,
            description="Hands-on robotics.",
            max_participants=10,
            current_participants=0,
            status=EventStatus.UPCOMING.value,
        )
        fields.update(overrides)
        async with session_factory() as session:
            db_event = Event(**fields)
            session.add(db_event)
            await session.commit()
            return db_event.id

    return _make_event


# =============================================================================
# HTTP
# =============================================================================


@pytest.fixture
def app(session_factory):
    from main import create_app

    application = create_app()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    application.dependency_overrides[database.get_db] = override_get_db
    return application


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client
