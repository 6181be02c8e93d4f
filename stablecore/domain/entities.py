from datetime import UTC, date, datetime
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# --- Enums / Literals ---
RoleType = Literal["admin", "staff", "rider", "farrier", "vet", "trainer", "therapist", "guest"]
AccessLevel = Literal["owner", "edit", "view"]
RiderRole = Literal["owner", "medryttare", "other"]
Season = Literal["summer", "winter", "all_year"]
AssignmentSlot = Literal["morning", "lunch", "evening"]
AssignmentStatus = Literal["open", "assigned", "completed"]
AssignedVia = Literal["default", "manual"]
HistoryAction = Literal["created", "completed", "assigned", "declined"]
DayEventTone = Literal[
    "feeding", "cleaning", "rider_away", "farrier_away", "vet_away", "evening", "info"
]

ROLES: tuple[str, ...] = get_args(RoleType)
ACCESS_LEVELS: tuple[str, ...] = get_args(AccessLevel)
SLOTS: tuple[str, ...] = get_args(AssignmentSlot)


def parse_iso_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD string."""
    if len(value) != 10:
        raise ValueError(f"Expected YYYY-MM-DD, got {value!r}")
    return date.fromisoformat(value)


# --- Users & Membership ---

class DefaultPass(BaseModel):
    model_config = ConfigDict(frozen=True)

    weekday: int = Field(ge=0, le=6)  # 0 = Monday
    slot: AssignmentSlot


class Membership(BaseModel):
    stable_id: str
    role: RoleType = "guest"
    custom_role: str | None = None
    access: AccessLevel = "view"
    rider_role: RiderRole | None = None


class User(BaseModel):
    id: str
    name: str
    email: str | None = None
    phone: str = ""
    location: str = ""
    horses: list[str] = Field(default_factory=list)
    responsibilities: list[str] = Field(default_factory=list)
    default_passes: list[DefaultPass] = Field(default_factory=list)
    membership: list[Membership] = Field(default_factory=list)

    def membership_for(self, stable_id: str) -> Membership | None:
        for entry in self.membership:
            if entry.stable_id == stable_id:
                return entry
        return None


# --- Stables ---

class EventVisibility(BaseModel):
    # Camel-case keys are accepted so payloads written by the mobile client load unchanged.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    feeding: bool = True
    cleaning: bool = True
    rider_away: bool = True
    farrier_away: bool = True
    vet_away: bool = True
    evening: bool = True

    def is_visible(self, tone: str) -> bool:
        # Tones without a toggle (e.g. "info") are always shown.
        return bool(getattr(self, tone, True))


class StableSettings(BaseModel):
    event_visibility: EventVisibility = Field(default_factory=EventVisibility)
    onboarding_dismissed: bool = False

    @field_validator("event_visibility", mode="before")
    @classmethod
    def _complete_visibility(cls, value: Any) -> Any:
        return {} if value is None else value


class RideType(BaseModel):
    id: str
    code: str
    label: str
    description: str | None = None


class Stable(BaseModel):
    id: str
    name: str
    location: str = ""
    description: str | None = None
    farm_id: str | None = None
    ride_types: list[RideType] = Field(default_factory=list)
    settings: StableSettings = Field(default_factory=StableSettings)

    @field_validator("settings", mode="before")
    @classmethod
    def _default_settings(cls, value: Any) -> Any:
        return {} if value is None else value


# --- Paddocks ---

class PaddockImage(BaseModel):
    uri: str | None = None
    base64: str | None = None
    mime_type: str | None = None

    @model_validator(mode="after")
    def _check_payload(self) -> "PaddockImage":
        if not self.uri and not self.base64:
            raise ValueError("Paddock image needs a uri or an inline base64 payload")
        if self.base64 and not self.mime_type:
            raise ValueError("Inline paddock image needs a mime_type")
        return self


class Paddock(BaseModel):
    id: str
    stable_id: str
    name: str
    season: Season = "all_year"
    horse_names: list[str] = Field(default_factory=list)
    image: PaddockImage | None = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


# --- Scheduling ---

class Assignment(BaseModel):
    id: str
    stable_id: str
    date: str  # ISO date, e.g. 2025-03-10
    slot: AssignmentSlot
    label: str
    time: str
    note: str | None = None
    status: AssignmentStatus = "open"
    assignee_id: str | None = None
    assigned_via: AssignedVia | None = None
    declined_by_user_ids: list[str] = Field(default_factory=list)
    completed_at: datetime | None = None

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        parse_iso_date(value)
        return value


class AssignmentHistoryEntry(BaseModel):
    id: str
    assignment_id: str
    label: str
    timestamp: datetime
    action: HistoryAction


class DayEvent(BaseModel):
    id: str
    stable_id: str
    date: str
    label: str
    tone: DayEventTone = "info"

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        parse_iso_date(value)
        return value


# --- Store state ---

class Selection(BaseModel):
    current_user_id: str | None = None
    current_stable_id: str | None = None


class StoreState(BaseModel):
    users: dict[str, User] = Field(default_factory=dict)
    stables: list[Stable] = Field(default_factory=list)
    paddocks: dict[str, Paddock] = Field(default_factory=dict)
    assignments: dict[str, Assignment] = Field(default_factory=dict)
    assignment_history: list[AssignmentHistoryEntry] = Field(default_factory=list)
    day_events: dict[str, DayEvent] = Field(default_factory=dict)
    selection: Selection = Field(default_factory=Selection)

    def find_stable(self, stable_id: str | None) -> Stable | None:
        if not stable_id:
            return None
        for stable in self.stables:
            if stable.id == stable_id:
                return stable
        return None
