# wavy/services/formatting.py
# French labels for months and days, independent of the host locale.

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from ..config import settings

MONTHS = [
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
]
SHORT_MONTHS = [
    "janv.", "févr.", "mars", "avr.", "mai", "juin",
    "juil.", "août", "sept.", "oct.", "nov.", "déc.",
]
SHORT_WEEKDAYS = ["lun.", "mar.", "mer.", "jeu.", "ven.", "sam.", "dim."]


def month_label(month: str) -> str:
    """'2024-03' -> 'mars 2024'. Unparseable input is returned unchanged."""
    try:
        year, month_number = (int(part) for part in month.split("-")[:2])
    except ValueError:
        return month
    if not 1 <= month_number <= 12:
        return month
    return f"{MONTHS[month_number - 1]} {year}"


def short_day_label(day: date) -> str:
    """date(2024, 3, 4) -> 'lun. 4 mars'"""
    return f"{SHORT_WEEKDAYS[day.weekday()]} {day.day} {SHORT_MONTHS[day.month - 1]}"


def datetime_label(moment: datetime) -> str:
    """Local (settings.TIMEZONE) date and time, e.g. '4 mars 2024 à 14:05'."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    local = moment.astimezone(ZoneInfo(settings.TIMEZONE))
    return f"{local.day} {MONTHS[local.month - 1]} {local.year} à {local:%H:%M}"
