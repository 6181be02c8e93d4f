"""
Schedule component - grouping and labelling assignments for calendar views.

Everything here is pure: no store access and no clock unless ``today`` is
left out, in which case the local date is used.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, timedelta

from stablecore.domain.entities import (
    Assignment,
    DayEvent,
    EventVisibility,
    parse_iso_date as _parse_strict,
)

from .models import LOCALES, DateOption, GroupedAssignmentDay, LocaleNames, MonthWeek

DEFAULT_DATE_OPTION_COUNT = 5
DEFAULT_LABEL_LOCALE = "sv-SE"
DEFAULT_WEEKDAY_LOCALE = "en-GB"


def _names(locale: str) -> LocaleNames:
    try:
        return LOCALES[locale]
    except KeyError:
        raise ValueError(f"Unsupported locale: {locale}") from None


# --- Dates ---


def to_iso_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def parse_iso_date(value: str) -> date:
    return _parse_strict(value)


def start_of_week(value: date) -> date:
    """Monday of the week containing ``value``."""
    return value - timedelta(days=value.weekday())


def iso_week_number(value: date) -> int:
    return value.isocalendar()[1]


def build_month_weeks(value: date) -> list[MonthWeek]:
    """
    Full Monday-to-Sunday weeks covering the month of ``value``.

    Leading and trailing days from neighbouring months are included so every
    week has seven days.
    """
    first = value.replace(day=1)
    next_month = (first + timedelta(days=32)).replace(day=1)
    last = next_month - timedelta(days=1)

    cursor = start_of_week(first)
    end = start_of_week(last) + timedelta(days=6)
    weeks: list[MonthWeek] = []
    while cursor <= end:
        days = tuple(cursor + timedelta(days=offset) for offset in range(7))
        weeks.append(
            MonthWeek(week_number=iso_week_number(cursor), start=to_iso_date(cursor), days=days)
        )
        cursor += timedelta(days=7)
    return weeks


# --- Grouping ---


def group_assignments_by_day(assignments: Iterable[Assignment]) -> list[GroupedAssignmentDay]:
    """
    Group assignments by ISO date, days in chronological order.

    Within a day the input order is preserved, so flattening the result and
    grouping again yields the same groups.
    """
    groups: dict[str, GroupedAssignmentDay] = {}
    for assignment in assignments:
        day = groups.get(assignment.date)
        if day is None:
            day = GroupedAssignmentDay(
                iso_date=assignment.date, date=parse_iso_date(assignment.date)
            )
            groups[assignment.date] = day
        day.assignments.append(assignment)
    return sorted(groups.values(), key=lambda d: d.date)


def generate_date_options(
    grouped_days: Iterable[GroupedAssignmentDay],
    count: int | None = None,
    include_dates: Iterable[str] | None = None,
    today: date | None = None,
    locale: str = DEFAULT_LABEL_LOCALE,
) -> list[DateOption]:
    """
    Selectable dates for the new-assignment picker.

    Seeded from the grouped days (up to ``count``), then the forced
    ``include_dates``, then padded day by day from ``today``. Duplicates are
    dropped by ISO date with the first occurrence kept, and the result is cut
    to ``count``.
    """
    count = DEFAULT_DATE_OPTION_COUNT if count is None else count
    if count <= 0:
        return []

    options: list[DateOption] = []
    seen: set[str] = set()

    def add(value: date) -> None:
        iso = to_iso_date(value)
        if iso in seen:
            return
        seen.add(iso)
        options.append(DateOption(label=format_option_label(value, locale), value=iso))

    for day in grouped_days:
        if len(options) >= count:
            break
        add(day.date)

    for iso in include_dates or ():
        if not iso:
            continue
        try:
            add(parse_iso_date(iso))
        except ValueError:
            continue

    cursor = today or date.today()
    while len(options) < count:
        add(cursor)
        cursor += timedelta(days=1)

    return options[:count]


def filter_visible_events(
    events: Iterable[DayEvent], visibility: EventVisibility
) -> list[DayEvent]:
    return [event for event in events if visibility.is_visible(event.tone)]


# --- Labels ---


def capitalize(value: str) -> str:
    if not value:
        return value
    return value[0].upper() + value[1:]


def format_short_weekday(value: date, locale: str = DEFAULT_WEEKDAY_LOCALE) -> str:
    return _names(locale).weekdays_short[value.weekday()]


def format_day_number(value: date) -> str:
    return str(value.day)


def format_option_label(value: date, locale: str = DEFAULT_LABEL_LOCALE) -> str:
    """Chip label such as "mån 10/3"."""
    weekday = _names(locale).weekdays_short[value.weekday()]
    return f"{weekday} {value.day}/{value.month}"


def format_header_label(value: date, locale: str = DEFAULT_LABEL_LOCALE) -> str:
    """Day header such as "MÅNDAG 10 MARS"."""
    names = _names(locale)
    label = f"{names.weekdays_long[value.weekday()]} {value.day} {names.months_long[value.month - 1]}"
    return label.upper()


def format_short_date_label(iso_date: str, locale: str = DEFAULT_LABEL_LOCALE) -> str:
    """Compact label such as "mån 10 mars"."""
    value = parse_iso_date(iso_date)
    names = _names(locale)
    return (
        f"{names.weekdays_short[value.weekday()]} {value.day} "
        f"{names.months_short[value.month - 1]}"
    )


def format_month_label(value: date, locale: str = DEFAULT_LABEL_LOCALE) -> str:
    return capitalize(f"{_names(locale).months_long[value.month - 1]} {value.year}")


def format_week_range(start: date, end: date, locale: str = DEFAULT_LABEL_LOCALE) -> str:
    """Week span such as "10–16 mars", or "28 feb–6 mars" across months."""
    names = _names(locale)
    end_label = f"{end.day} {names.months_short[end.month - 1]}"
    if start.month == end.month:
        return f"{start.day}–{end_label}"
    return f"{start.day} {names.months_short[start.month - 1]}–{end_label}"


_MISSING_WORD = re.compile("saknas", re.IGNORECASE)
_NEEDS_PREFIX = re.compile(r"^behöver\s+", re.IGNORECASE)


def format_pass_note(note: str | None, status: str | None = None) -> str | None:
    """
    Note text as shown on a pass card.

    Once a pass is staffed the "saknas" / "behöver" wording no longer applies
    and is dropped.
    """
    if not note:
        return None
    cleaned = note.strip()
    if not cleaned:
        return None
    if status and status != "open":
        cleaned = _MISSING_WORD.sub("", cleaned).strip()
        cleaned = _NEEDS_PREFIX.sub("", cleaned).strip()
    return capitalize(cleaned) if cleaned else None
