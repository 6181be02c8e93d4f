"""
Schedule component models - calendar groupings and locale name tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from stablecore.domain.entities import Assignment


@dataclass
class GroupedAssignmentDay:
    iso_date: str
    date: date
    assignments: list[Assignment] = field(default_factory=list)


@dataclass(frozen=True)
class DateOption:
    label: str
    value: str


@dataclass(frozen=True)
class MonthWeek:
    week_number: int
    start: str
    days: tuple[date, ...]


@dataclass(frozen=True)
class LocaleNames:
    """Weekday and month names for one locale. Weekdays start on Monday."""

    weekdays_short: tuple[str, ...]
    weekdays_long: tuple[str, ...]
    months_short: tuple[str, ...]
    months_long: tuple[str, ...]


LOCALES: dict[str, LocaleNames] = {
    "en-GB": LocaleNames(
        weekdays_short=("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
        weekdays_long=(
            "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
        ),
        months_short=(
            "Jan", "Feb", "Mar", "Apr", "May", "Jun",
            "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
        ),
        months_long=(
            "January", "February", "March", "April", "May", "June",
            "July", "August", "September", "October", "November", "December",
        ),
    ),
    # Short month names without the trailing period; labels strip it anyway.
    "sv-SE": LocaleNames(
        weekdays_short=("mån", "tis", "ons", "tors", "fre", "lör", "sön"),
        weekdays_long=("måndag", "tisdag", "onsdag", "torsdag", "fredag", "lördag", "söndag"),
        months_short=(
            "jan", "feb", "mars", "apr", "maj", "juni",
            "juli", "aug", "sep", "okt", "nov", "dec",
        ),
        months_long=(
            "januari", "februari", "mars", "april", "maj", "juni",
            "juli", "augusti", "september", "oktober", "november", "december",
        ),
    ),
}
