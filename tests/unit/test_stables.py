"""
Stables component unit tests.

Creation, partial updates with settings merging, and the onboarding
dismissal flag.
"""

from stablecore.components.stables import (
    SetOnboardingDismissedInput,
    UpdateStableInput,
    UpsertStableInput,
    run_set_onboarding_dismissed,
    run_update,
    run_upsert,
)
from stablecore.components.stables.component import resolve_stable_settings


class TestUpsert:
    def test_create_makes_actor_owner(self, store, policy, ids):
        out = run_upsert(
            UpsertStableInput(actor_id="user-anna", name="  Norrgården ", location="Sala"),
            store=store,
            policy=policy,
            ids=ids,
        )

        assert out.success
        assert out.stable.id == "stable-1"
        assert out.stable.name == "Norrgården"
        membership = store.get_user("user-anna").membership_for("stable-1")
        assert membership.access == "owner"
        assert membership.role == "admin"

    def test_new_stable_shows_every_event_kind(self, store, policy, ids):
        out = run_upsert(
            UpsertStableInput(actor_id="user-anna", name="Norrgården"),
            store=store,
            policy=policy,
            ids=ids,
        )
        visibility = out.stable.settings.event_visibility
        assert all(visibility.model_dump().values())

    def test_create_needs_signed_in_user(self, store, policy, ids):
        out = run_upsert(
            UpsertStableInput(actor_id=None, name="Norrgården"), store=store, policy=policy, ids=ids
        )
        assert out.code == "forbidden"
        assert len(store.list_stables()) == 2

    def test_blank_name_is_invalid(self, store, policy, ids):
        out = run_upsert(
            UpsertStableInput(actor_id="user-anna", name="   "), store=store, policy=policy, ids=ids
        )
        assert out.reason == "Stable name is required"

    def test_update_existing_requires_manage_stable(self, store, policy, ids):
        out = run_upsert(
            UpsertStableInput(actor_id="user-bo", name="Renamed", stable_id="stable-sol"),
            store=store,
            policy=policy,
            ids=ids,
        )
        assert out.code == "forbidden"
        assert store.get_stable("stable-sol").name == "Solbacka"

    def test_update_existing_keeps_unset_fields(self, store, policy, ids):
        out = run_upsert(
            UpsertStableInput(actor_id="user-anna", name="Solbacka gård", stable_id="stable-sol"),
            store=store,
            policy=policy,
            ids=ids,
        )
        assert out.success
        stable = store.get_stable("stable-sol")
        assert stable.name == "Solbacka gård"
        assert stable.location == "Uppsala"


class TestUpdate:
    def test_partial_visibility_update_accepts_camel_case(self, store, policy, ids):
        out = run_update(
            UpdateStableInput(
                actor_id="user-anna",
                stable_id="stable-sol",
                updates={"settings": {"eventVisibility": {"riderAway": False}}},
            ),
            store=store,
            policy=policy,
            ids=ids,
        )

        assert out.success
        visibility = store.get_stable("stable-sol").settings.event_visibility
        assert visibility.rider_away is False
        assert visibility.feeding is True

    def test_unknown_event_kind_is_rejected(self, store, policy, ids):
        out = run_update(
            UpdateStableInput(
                actor_id="user-anna",
                stable_id="stable-sol",
                updates={"settings": {"event_visibility": {"parties": False}}},
            ),
            store=store,
            policy=policy,
            ids=ids,
        )
        assert out.code == "invalid"
        assert "parties" in out.reason

    def test_unknown_field_is_rejected(self, store, policy, ids):
        out = run_update(
            UpdateStableInput(actor_id="user-anna", stable_id="stable-sol", updates={"owner": "x"}),
            store=store,
            policy=policy,
            ids=ids,
        )
        assert out.reason == "Unknown stable field(s): owner"

    def test_missing_stable_reported_before_access(self, store, policy, ids):
        before = store.list_stables()

        out = run_update(
            UpdateStableInput(actor_id="user-eva", stable_id="nope", updates={"name": "X"}),
            store=store,
            policy=policy,
            ids=ids,
        )
        assert out.code == "not_found"
        assert store.list_stables() == before

    def test_editor_cannot_update(self, store, policy, ids):
        out = run_update(
            UpdateStableInput(actor_id="user-bo", stable_id="stable-sol", updates={"name": "X"}),
            store=store,
            policy=policy,
            ids=ids,
        )
        assert out.reason == "Insufficient access to update this stable"

    def test_blank_description_clears_it(self, store, policy, ids):
        run_update(
            UpdateStableInput(
                actor_id="user-anna", stable_id="stable-sol", updates={"description": "Nice"}
            ),
            store=store,
            policy=policy,
            ids=ids,
        )
        run_update(
            UpdateStableInput(
                actor_id="user-anna", stable_id="stable-sol", updates={"description": "  "}
            ),
            store=store,
            policy=policy,
            ids=ids,
        )
        assert store.get_stable("stable-sol").description is None

    def test_ride_types_get_ids_from_generator(self, store, policy, ids):
        out = run_update(
            UpdateStableInput(
                actor_id="user-anna",
                stable_id="stable-sol",
                updates={"ride_types": [{"code": "M", "label": "Medryttare"}]},
            ),
            store=store,
            policy=policy,
            ids=ids,
        )

        assert out.success
        assert out.stable.ride_types[0].id == "ride-type-1"


def test_set_onboarding_dismissed(store, policy):
    out = run_set_onboarding_dismissed(
        SetOnboardingDismissedInput(actor_id="user-anna", dismissed=True),
        store=store,
        policy=policy,
    )
    assert out.success
    assert store.get_stable("stable-sol").settings.onboarding_dismissed is True


def test_rider_cannot_dismiss_onboarding(store, policy):
    out = run_set_onboarding_dismissed(
        SetOnboardingDismissedInput(actor_id="user-cia", dismissed=True, stable_id="stable-sol"),
        store=store,
        policy=policy,
    )
    assert out.code == "forbidden"


def test_resolve_settings_without_stable():
    settings = resolve_stable_settings(None)
    assert settings.event_visibility.evening is True
    assert settings.onboarding_dismissed is False
