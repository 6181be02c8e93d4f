"""
Onboarding flow - holds the wizard state for one mounted setup session.

The state lives only between ``mount`` and ``unmount``; nothing about the
wizard is written to the store except the dismissal flag set by ``finish``.
"""

from __future__ import annotations

import logging

from stablecore.components import onboarding
from stablecore.domain.onboarding import OnboardingState
from stablecore.domain.policy import PolicyEngine
from stablecore.domain.store import DomainStore

logger = logging.getLogger(__name__)

_NOT_MOUNTED = onboarding.OnboardingOutput(
    success=False, reason="Setup is not open", code="conflict"
)


class OnboardingFlow:
    def __init__(self, store: DomainStore, policy: PolicyEngine):
        self.store = store
        self.policy = policy
        self.state: OnboardingState | None = None

    @property
    def mounted(self) -> bool:
        return self.state is not None

    def _apply(self, result: onboarding.OnboardingOutput) -> onboarding.OnboardingOutput:
        if result.success and result.state is not None:
            self.state = result.state
        return result

    def mount(self) -> onboarding.OnboardingOutput:
        """Enter setup. The access check runs on every mount."""
        result = onboarding.run_enter(
            onboarding.EnterOnboardingInput(actor_id=self.store.selection.current_user_id),
            store=self.store,
            policy=self.policy,
        )
        self.state = result.state if result.success else None
        return result

    def unmount(self) -> None:
        self.state = None

    def set_mode(self, mode: str) -> onboarding.OnboardingOutput:
        if self.state is None:
            return _NOT_MOUNTED
        return self._apply(onboarding.run_set_mode(onboarding.SetModeInput(self.state, mode)))

    def set_has_farm(self, has_farm: bool | None) -> onboarding.OnboardingOutput:
        if self.state is None:
            return _NOT_MOUNTED
        return self._apply(
            onboarding.run_set_has_farm(onboarding.SetHasFarmInput(self.state, has_farm))
        )

    def advance(self, step: str | None = None) -> onboarding.OnboardingOutput:
        if self.state is None:
            return _NOT_MOUNTED
        return self._apply(onboarding.run_advance(onboarding.AdvanceInput(self.state, step)))

    def finish(self) -> onboarding.OnboardingOutput:
        if self.state is None:
            return _NOT_MOUNTED
        selection = self.store.selection
        result = onboarding.run_finish(
            onboarding.FinishInput(
                actor_id=selection.current_user_id,
                state=self.state,
                stable_id=selection.current_stable_id,
            ),
            store=self.store,
            policy=self.policy,
        )
        if result.success:
            logger.info("Onboarding finished for %s", selection.current_user_id)
        return self._apply(result)
