from typing import Literal

from pydantic import ValidationError

# Structured companion to the human-readable ``reason`` on every mutation output.
# Callers that only look at ``reason`` keep working.
ErrorCode = Literal["not_found", "invalid", "forbidden", "conflict", "invariant"]


class InvariantViolation(Exception):
    """Raised by the store when a commit would break a data-model invariant."""

    def __init__(self, violations: list[str]):
        self.violations = violations
        super().__init__("; ".join(violations))


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic ValidationError into one readable sentence."""
    parts: list[str] = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error.get("loc", ()))
        msg = error.get("msg", "Invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid value"
