from __future__ import annotations

from stablecore.domain.entities import Paddock
from stablecore.domain.policy import PolicyEngine
from stablecore.ports.clock import ClockPort
from stablecore.ports.ids import IdGeneratorPort
from stablecore.ports.store import StorePort

from .models import DeletePaddockInput, PaddockOutput, UpsertPaddockInput

SEASONS = ("summer", "winter", "all_year")


def normalize_horse_names(names: list[str]) -> list[str]:
    """Trim, drop blanks and case-insensitive duplicates; first spelling wins."""
    seen: set[str] = set()
    result: list[str] = []
    for name in names:
        cleaned = name.strip()
        if not cleaned:
            continue
        key = cleaned.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(cleaned)
    return result


def run_upsert(
    inp: UpsertPaddockInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
    ids: IdGeneratorPort,
    clock: ClockPort,
) -> PaddockOutput:
    name = inp.name.strip()
    if not name:
        return PaddockOutput(success=False, reason="Paddock name is required", code="invalid")
    if inp.season not in SEASONS:
        return PaddockOutput(success=False, reason=f"Unknown season: {inp.season}", code="invalid")

    state = store.snapshot()
    if not state.find_stable(inp.stable_id):
        return PaddockOutput(success=False, reason="No such stable", code="not_found")

    actor = state.users.get(inp.actor_id) if inp.actor_id else None
    if not policy.resolve(actor, inp.stable_id).can_manage_paddocks:
        return PaddockOutput(
            success=False, reason="Insufficient access to manage paddocks", code="forbidden"
        )

    existing = state.paddocks.get(inp.paddock_id) if inp.paddock_id else None
    if existing and existing.stable_id != inp.stable_id:
        return PaddockOutput(
            success=False, reason="Paddock belongs to another stable", code="conflict"
        )

    if inp.clear_image:
        image = None
    else:
        image = inp.image or (existing.image if existing else None)

    paddock = Paddock(
        id=existing.id if existing else (inp.paddock_id or ids.new_id("paddock")),
        stable_id=inp.stable_id,
        name=name,
        season=inp.season,  # type: ignore[arg-type]
        horse_names=normalize_horse_names(inp.horse_names),
        image=image,
        updated_at=clock.now_utc(),
    )
    state.paddocks[paddock.id] = paddock
    store.commit(state)
    return PaddockOutput(paddock=paddock, success=True)


def run_delete(
    inp: DeletePaddockInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
) -> PaddockOutput:
    state = store.snapshot()
    paddock = state.paddocks.get(inp.paddock_id)
    if not paddock:
        return PaddockOutput(success=False, reason="No such paddock", code="not_found")

    actor = state.users.get(inp.actor_id) if inp.actor_id else None
    if not policy.resolve(actor, paddock.stable_id).can_manage_paddocks:
        return PaddockOutput(
            success=False, reason="Insufficient access to manage paddocks", code="forbidden"
        )

    del state.paddocks[paddock.id]
    store.commit(state)
    return PaddockOutput(paddock=paddock, success=True)


def run(
    inp: UpsertPaddockInput | DeletePaddockInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
    ids: IdGeneratorPort | None = None,
    clock: ClockPort | None = None,
) -> PaddockOutput:
    if isinstance(inp, UpsertPaddockInput):
        assert ids and clock
        return run_upsert(inp, store=store, policy=policy, ids=ids, clock=clock)
    elif isinstance(inp, DeletePaddockInput):
        return run_delete(inp, store=store, policy=policy)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
