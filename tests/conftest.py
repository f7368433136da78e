"""Shared fixtures: an in-memory database, a site with a guide and a manager,
a frozen clock and a notifier that records what it was asked to send."""

from datetime import date, datetime, timezone

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pilgrim.core.db import Base, make_engine
from pilgrim.core.locks import KeyedLocks
from pilgrim.models import Site, User
from pilgrim.models.enums import SystemRole
from pilgrim.services.moderation import ModerationEngine
from pilgrim.services.submissions import SubmissionWorkflow

# Wednesday 2024-06-05 10:00 in Asia/Ho_Chi_Minh
FIXED_NOW = datetime(2024, 6, 5, 3, 0, tzinfo=timezone.utc)
WEEK = date(2024, 6, 3)


class RecordingNotifier:
    """Notifier double that keeps every (user_id, text) it receives."""

    def __init__(self, ok: bool = True):
        self.ok = ok
        self.sent: list[tuple[int, str]] = []

    def __call__(self, user_id: int, text: str) -> bool:
        self.sent.append((user_id, text))
        return self.ok


def make_people(db):
    """Create one site with a guide and a manager, and return them."""
    site = Site(code="LV", name="La Vang")
    db.add(site)
    db.flush()
    guide = User(
        email="guide@example.com",
        full_name="Anna Tran",
        role=SystemRole.LOCAL_GUIDE.value,
        site_id=site.id,
    )
    manager = User(
        email="manager@example.com",
        full_name="Minh Le",
        role=SystemRole.MANAGER.value,
        site_id=site.id,
    )
    db.add_all([guide, manager])
    db.commit()
    return site, guide, manager


@pytest.fixture
def engine():
    eng = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    with Session() as session:
        yield session


@pytest.fixture
def people(db):
    return make_people(db)


@pytest.fixture
def site(people):
    return people[0]


@pytest.fixture
def guide(people):
    return people[1]


@pytest.fixture
def manager(people):
    return people[2]


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def moderation(db, clock, notifier) -> ModerationEngine:
    return ModerationEngine(db, clock=clock, notifier=notifier, locks=KeyedLocks())


@pytest.fixture
def workflow(db, clock, notifier) -> SubmissionWorkflow:
    return SubmissionWorkflow(db, clock=clock, notifier=notifier, locks=KeyedLocks())
