from typing import Literal

from pydantic import BaseModel, Field, field_validator

CapabilityName = Literal[
    "view_schedule",
    "claim_assignments",
    "edit_schedule",
    "manage_paddocks",
    "manage_stable",
    "manage_members",
    "manage_onboarding",
]


class RoleRules(BaseModel):
    labels: dict[str, str]
    owner_label: str = "Owner"
    no_membership_label: str = "No role"
    # Roles that may run stable setup regardless of access tier.
    onboarding_roles: list[str] = Field(default_factory=lambda: ["admin"])


class AccessRules(BaseModel):
    # Capabilities granted at each tier. Higher tiers inherit lower ones.
    capabilities: dict[Literal["owner", "edit", "view"], list[CapabilityName]]
    labels: dict[str, str] = Field(default_factory=dict)


class SlotRules(BaseModel):
    title: str
    time: str
    short_label: str

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        hours, _, minutes = value.partition(":")
        if not (hours.isdigit() and minutes.isdigit() and len(minutes) == 2):
            raise ValueError(f"Slot time must be HH:MM, got {value!r}")
        if int(hours) > 23 or int(minutes) > 59:
            raise ValueError(f"Slot time out of range: {value!r}")
        return value


class ScheduleRules(BaseModel):
    date_option_count: int = Field(default=5, ge=1)
    weekday_locale: str = "en-GB"
    label_locale: str = "sv-SE"
    default_label: str = "Pass"
    slots: dict[Literal["morning", "lunch", "evening"], SlotRules]


class Rules(BaseModel):
    roles: RoleRules
    access: AccessRules
    event_visibility_defaults: dict[str, bool] = Field(default_factory=dict)
    schedule: ScheduleRules
