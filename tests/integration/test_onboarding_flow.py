"""
End-to-end setup journey: a new user creates a stable, runs the guided
setup, staffs the first passes and lands on a ready schedule.
"""

import pytest

from stablecore.adapters.auth_session import StaticAuthSession
from stablecore.adapters.ids import SequentialIdGenerator
from stablecore.context import ServiceContext
from stablecore.domain.entities import User
from stablecore.domain.store import DomainStore
from stablecore.ports.session import AuthSession


@pytest.fixture
def ctx(rules, clock):
    store = DomainStore.from_seed(users=[User(id="user-new", name="Nora", email="nora@example.com")])
    return ServiceContext.create(rules, store, clock=clock, ids=SequentialIdGenerator())


def test_guided_setup_journey(ctx):
    session = ctx.session
    actions = ctx.gateway

    started = session.start(StaticAuthSession(AuthSession(user_id="user-new")))
    assert started.success

    # Nobody without an owner or admin membership may open setup.
    assert ctx.onboarding.mount().code == "forbidden"
    assert ctx.onboarding.mounted is False

    created = actions.upsert_stable("Norrgården", location="Sala")
    assert created.success
    assert session.current_stable().id == created.stable.id
    assert session.needs_onboarding() is True

    flow = ctx.onboarding
    assert flow.mount().success
    assert flow.set_mode("guided").state.step == "mode_selected"
    assert flow.set_has_farm(False).state.step == "stables"

    assert flow.advance().state.step == "members"
    member = actions.add_member(
        "Cia", [created.stable.id], role="rider", access="view", email="cia@example.com"
    )
    assert member.success

    assert flow.advance().state.step == "paddocks"
    assert actions.upsert_paddock("Stora hagen", horse_names=["Saga", "Bamse"]).success

    assert flow.advance().state.step == "events"
    assert actions.add_day_event("2025-03-11", "Hovslagare", tone="farrier_away").success
    for slot in ("morning", "lunch", "evening"):
        assert actions.create_assignment("2025-03-11", slot).success

    finished = flow.finish()
    assert finished.success
    assert finished.state.step == "complete"
    assert session.needs_onboarding() is False

    flow.unmount()
    assert flow.state is None

    # The new member takes a pass on their own.
    actions.set_current_user(member.user.id)
    claimed = actions.claim_next_open_assignment()
    assert claimed.assignment.slot == "morning"

    days = session.schedule()
    assert len(days) == 1
    assert [a.status for a in days[0].assignments] == ["assigned", "open", "open"]
    assert [h.action for h in session.history(limit=2)] == ["assigned", "created"]


def test_guard_is_rechecked_on_every_mount(ctx):
    actions = ctx.gateway
    actions.set_current_user("user-new")
    stable = actions.upsert_stable("Norrgården").stable
    helper = actions.add_member("Bo", [stable.id], role="staff", access="owner").user

    actions.set_current_user(helper.id)
    assert ctx.onboarding.mount().success
    ctx.onboarding.unmount()

    # Demoted to editor, the next mount is refused.
    actions.set_current_user("user-new")
    assert actions.update_member_role(helper.id, stable.id, access="edit").success
    actions.set_current_user(helper.id)

    assert ctx.onboarding.mount().code == "forbidden"


def test_quick_setup_can_skip_events(ctx):
    ctx.gateway.set_current_user("user-new")
    ctx.gateway.upsert_stable("Norrgården")
    flow = ctx.onboarding

    flow.mount()
    flow.set_mode("quick")
    assert flow.advance().state.step == "stables"
    assert flow.finish().success


def test_steps_need_a_mounted_flow(ctx):
    out = ctx.onboarding.advance()
    assert out.success is False
    assert out.reason == "Setup is not open"


def test_context_requires_rules():
    with pytest.raises(ValueError):
        ServiceContext.create(None)  # type: ignore[arg-type]
