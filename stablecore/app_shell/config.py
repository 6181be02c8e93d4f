import logging
import os
from dataclasses import dataclass
from pathlib import Path

from stablecore.rules.loader import DEFAULT_RULES_PATH
from stablecore.rules.models import Rules

RULES_PATH_ENV = "STABLECORE_RULES_PATH"
LOG_LEVEL_ENV = "STABLECORE_LOG_LEVEL"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class AppConfig:
    rules_path: Path
    log_level: str = "INFO"


def load_config(environ: dict[str, str] | None = None) -> AppConfig:
    """
    Read configuration from the environment.

    Raises ValueError for an unknown log level and FileNotFoundError when the
    rules file does not exist.
    """
    env = os.environ if environ is None else environ

    raw_path = env.get(RULES_PATH_ENV)
    rules_path = Path(raw_path).expanduser() if raw_path else DEFAULT_RULES_PATH
    if not rules_path.exists():
        raise FileNotFoundError(f"Rules file not found: {rules_path}")

    log_level = env.get(LOG_LEVEL_ENV, "INFO").strip().upper() or "INFO"
    if log_level not in _LOG_LEVELS:
        raise ValueError(f"{LOG_LEVEL_ENV} must be one of {', '.join(_LOG_LEVELS)}, got {log_level!r}")

    return AppConfig(rules_path=rules_path, log_level=log_level)


def validate_rules(rules: Rules) -> None:
    """
    Cross-field checks the schema alone cannot express.
    """
    problems: list[str] = []

    for tier in ("view", "edit", "owner"):
        if tier not in rules.access.capabilities:
            problems.append(f"access.capabilities is missing the '{tier}' tier")

    for role in rules.roles.onboarding_roles:
        if role not in rules.roles.labels:
            problems.append(f"onboarding role '{role}' has no label")

    for slot in ("morning", "lunch", "evening"):
        if slot not in rules.schedule.slots:
            problems.append(f"schedule.slots is missing '{slot}'")

    if problems:
        raise ValueError("Invalid rules: " + "; ".join(problems))

    logging.getLogger(__name__).debug("Rules validated")
