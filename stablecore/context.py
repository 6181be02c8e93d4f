from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from stablecore.adapters.clock import SystemClock
from stablecore.adapters.ids import UuidIdGenerator
from stablecore.adapters.memory_secure_store import InMemorySecureStore
from stablecore.app_shell.config import load_config, validate_rules
from stablecore.app_shell.logging import configure_logging
from stablecore.domain.policy import PolicyEngine
from stablecore.domain.store import DomainStore
from stablecore.ports.clock import ClockPort
from stablecore.ports.ids import IdGeneratorPort
from stablecore.ports.secure_store import SecureStorePort
from stablecore.rules.loader import load_rules
from stablecore.rules.models import Rules
from stablecore.services.gateway import MutationGateway
from stablecore.services.onboarding import OnboardingFlow
from stablecore.services.session import StableSession

logger = logging.getLogger(__name__)


@dataclass
class ServiceContext:
    rules: Rules
    policy: PolicyEngine
    store: DomainStore
    gateway: MutationGateway
    session: StableSession
    onboarding: OnboardingFlow
    secure_store: SecureStorePort
    clock: ClockPort
    ids: IdGeneratorPort

    @classmethod
    def create(
        cls,
        rules: Rules,
        store: DomainStore | None = None,
        *,
        clock: ClockPort | None = None,
        ids: IdGeneratorPort | None = None,
        secure_store: SecureStorePort | None = None,
    ) -> ServiceContext:
        if rules is None:
            raise ValueError("ServiceContext needs rules")
        validate_rules(rules)

        store = store if store is not None else DomainStore()
        clock = clock or SystemClock()
        ids = ids or UuidIdGenerator()
        secure_store = secure_store if secure_store is not None else InMemorySecureStore()

        policy = PolicyEngine(rules)
        gateway = MutationGateway(store, policy, ids, clock)
        session = StableSession(store, policy, gateway, secure_store)
        onboarding = OnboardingFlow(store, policy)

        return cls(
            rules=rules,
            policy=policy,
            store=store,
            gateway=gateway,
            session=session,
            onboarding=onboarding,
            secure_store=secure_store,
            clock=clock,
            ids=ids,
        )

    @classmethod
    def from_env(cls, store: DomainStore | None = None) -> ServiceContext:
        """Configure logging and build a context from STABLECORE_* variables."""
        config = load_config()
        configure_logging(config.log_level)
        rules = load_rules(Path(config.rules_path))
        logger.info("Loaded rules from %s", config.rules_path)
        return cls.create(rules, store)
