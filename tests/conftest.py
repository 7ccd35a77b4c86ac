"""Shared fixtures: an in-memory database per test, factories, and an API client"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gymhub import models  # noqa: F401
from gymhub.database import Base, get_db
from gymhub.domain.discounts.schemas import DiscountCodeCreate
from gymhub.domain.discounts.service import DiscountCodeService
from gymhub.domain.members.schemas import MemberCreate
from gymhub.domain.members.service import MemberService
from gymhub.domain.memberships.service import MembershipService
from gymhub.domain.plans.schemas import PlanCreate
from gymhub.domain.plans.service import PlanService
from gymhub.main import app


class RecordingNotifier:
    """Collects events instead of posting them"""

    def __init__(self):
        self.events = []

    async def notify(self, event):
        return self.notify_sync(event)

    def notify_sync(self, event):
        self.events.append(event)
        return True

    @property
    def types(self):
        return [event.type for event in self.events]


class FailingNotifier:
    async def notify(self, event):
        raise RuntimeError("webhook unreachable")

    def notify_sync(self, event):
        raise RuntimeError("webhook unreachable")


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def memberships(db, notifier):
    return MembershipService(db, notifier=notifier)


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def make_member(db):
    counter = {"n": 0}

    def factory(first_name="Alex", last_name="Rivera", email=None, phone=None):
        counter["n"] += 1
        return MemberService(db).create_member(
            MemberCreate(
                first_name=first_name,
                last_name=last_name,
                email=email or f"member{counter['n']}@example.com",
                phone=phone,
            )
        )

    return factory


@pytest.fixture()
def make_plan(db):
    def factory(name="Pro", price="49.99", duration="MONTHLY", duration_days=None, features=None):
        return PlanService(db).create_plan(
            PlanCreate(
                name=name,
                price=Decimal(price),
                duration=duration,
                duration_days=duration_days,
                features=features or ["Gym floor access"],
            )
        )

    return factory


@pytest.fixture()
def make_code(db):
    def factory(code="SAVE20", kind="PERCENT", value="20", **extra):
        return DiscountCodeService(db).create_code(
            DiscountCodeCreate(code=code, kind=kind, value=Decimal(value), **extra)
        )

    return factory


@pytest.fixture()
def active_member(make_member, make_plan, memberships):
    """A member holding an ACTIVE monthly membership that started today"""
    member = make_member()
    plan = make_plan()
    subscription = memberships.assign(member.id, plan.id)
    return member, subscription
