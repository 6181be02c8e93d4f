"""
Schedule component - pure calendar grouping and date labels.
"""

from .component import (
    build_month_weeks,
    capitalize,
    filter_visible_events,
    format_day_number,
    format_header_label,
    format_month_label,
    format_option_label,
    format_pass_note,
    format_short_date_label,
    format_short_weekday,
    format_week_range,
    generate_date_options,
    group_assignments_by_day,
    iso_week_number,
    parse_iso_date,
    start_of_week,
    to_iso_date,
)
from .models import LOCALES, DateOption, GroupedAssignmentDay, LocaleNames, MonthWeek

__all__ = [
    # Grouping
    "group_assignments_by_day",
    "generate_date_options",
    "filter_visible_events",
    # Dates
    "to_iso_date",
    "parse_iso_date",
    "start_of_week",
    "iso_week_number",
    "build_month_weeks",
    # Labels
    "capitalize",
    "format_day_number",
    "format_header_label",
    "format_month_label",
    "format_option_label",
    "format_pass_note",
    "format_short_date_label",
    "format_short_weekday",
    "format_week_range",
    # Models
    "LOCALES",
    "DateOption",
    "GroupedAssignmentDay",
    "LocaleNames",
    "MonthWeek",
]
