from datetime import UTC, date, datetime

import pytest

from stablecore.adapters.ids import SequentialIdGenerator
from stablecore.domain.entities import Assignment, DefaultPass, Membership, Stable, User
from stablecore.domain.policy import PolicyEngine
from stablecore.domain.store import DomainStore
from stablecore.rules.loader import load_rules
from stablecore.services.gateway import MutationGateway

# Monday 10 March 2025, 08:00 UTC
NOW = datetime(2025, 3, 10, 8, 0, tzinfo=UTC)
TODAY = date(2025, 3, 10)


class FixedClock:
    def __init__(self, now: datetime = NOW, today: date = TODAY):
        self.now = now
        self.current_date = today

    def now_utc(self) -> datetime:
        return self.now

    def today(self) -> date:
        return self.current_date


@pytest.fixture(scope="session")
def rules():
    # Loads the real rules.yaml from the project root.
    return load_rules()


@pytest.fixture
def policy(rules):
    return PolicyEngine(rules)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def ids():
    return SequentialIdGenerator()


def seed_users() -> list[User]:
    return [
        User(
            id="user-anna",
            name="Anna",
            email="anna@example.com",
            membership=[Membership(stable_id="stable-sol", role="admin", access="owner")],
        ),
        User(
            id="user-bo",
            name="Bo",
            membership=[Membership(stable_id="stable-sol", role="staff", access="edit")],
        ),
        User(
            id="user-cia",
            name="Cia",
            email="cia@example.com",
            default_passes=[DefaultPass(weekday=1, slot="lunch")],
            membership=[
                Membership(stable_id="stable-sol", role="rider", access="view", rider_role="medryttare")
            ],
        ),
        User(
            id="user-dan",
            name="Dan",
            membership=[Membership(stable_id="stable-ek", role="staff", access="owner")],
        ),
        User(id="user-eva", name="Eva"),
    ]


def seed_assignments() -> list[Assignment]:
    return [
        Assignment(
            id="assign-a", stable_id="stable-sol", date="2025-03-10", slot="morning",
            label="Morgon", time="07:00",
        ),
        Assignment(
            id="assign-b", stable_id="stable-sol", date="2025-03-10", slot="evening",
            label="Kväll", time="18:00", status="assigned", assignee_id="user-cia",
            assigned_via="manual",
        ),
        Assignment(
            id="assign-c", stable_id="stable-sol", date="2025-03-11", slot="lunch",
            label="Lunch", time="12:00",
        ),
        Assignment(
            id="assign-d", stable_id="stable-ek", date="2025-03-10", slot="morning",
            label="Morgon", time="07:00",
        ),
    ]


@pytest.fixture
def store():
    return DomainStore.from_seed(
        users=seed_users(),
        stables=[
            Stable(id="stable-sol", name="Solbacka", location="Uppsala"),
            Stable(id="stable-ek", name="Ekbacken"),
        ],
        assignments=seed_assignments(),
        current_user_id="user-anna",
        current_stable_id="stable-sol",
    )


@pytest.fixture
def gateway(store, policy, ids, clock):
    return MutationGateway(store, policy, ids, clock)


@pytest.fixture
def deps(store, policy, ids, clock):
    """Keyword arguments for calling component entry points directly."""
    return {"store": store, "policy": policy, "ids": ids, "clock": clock}
