"""
French-locale date and time formatting.

Every formatter accepts a ``date``, a ``datetime`` or an ISO-ish string and
returns an empty string for anything it cannot parse. Aware and naive
datetimes (naive ones are stored UTC) are shown on the studio's clock.
"""

import math
from datetime import date, datetime
from typing import Optional, Union

import pytz
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from gymdesk.app.core.settings import get_settings
from gymdesk.app.core.time import ensure_utc, utc_now

DateLike = Union[str, date, datetime, None]

MONTH_NAMES = (
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
)
MONTH_ABBREVIATIONS = (
    "janv.", "févr.", "mars", "avr.", "mai", "juin",
    "juil.", "août", "sept.", "oct.", "nov.", "déc.",
)
# Indexed by Python's weekday(): Monday is 0.
WEEKDAY_NAMES = ("lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche")


class DateFormats:
    SHORT_DATE = "{day}/{month}/{year}"
    MEDIUM_DATE = "{day} {month_abbr} {year}"
    LONG_DATE = "{day} {month_name} {year}"
    FULL_DATE = "{weekday_name} {day} {month_name} {year}"

    SHORT_TIME = "{hour}:{minute}"
    MEDIUM_TIME = "{hour}:{minute}:{second}"

    SHORT_DATETIME = "{day}/{month}/{year} {hour}:{minute}"
    MEDIUM_DATETIME = "{day} {month_abbr} {year} {hour}:{minute}"
    LONG_DATETIME = "{day} {month_name} {year} à {hour}:{minute}"
    FULL_DATETIME = "{weekday_name} {day} {month_name} {year} à {hour}:{minute}"

    CALENDAR_HEADER = "{month_name} {year}"
    CALENDAR_DAY = "{weekday_name} {day}"

    DATE_INPUT = "{year}-{month}-{day}"
    DATETIME_INPUT = "{year}-{month}-{day}T{hour}:{minute}"

    CSV = "{year}-{month}-{day} {hour}:{minute}:{second}"


def _studio_tz():
    return pytz.timezone(get_settings().STUDIO_TIMEZONE)


def safe_parse_date(value: DateLike) -> Optional[datetime]:
    """Parse ``value`` into an aware datetime on the studio clock, or None."""
    if value is None or value == "":
        return None
    tz = _studio_tz()
    if isinstance(value, datetime):
        return ensure_utc(value).astimezone(tz)
    if isinstance(value, date):
        return tz.localize(datetime(value.year, value.month, value.day))
    if not isinstance(value, str):
        return None
    try:
        parsed = date_parser.isoparse(value)
    except ValueError:
        try:
            parsed = date_parser.parse(value)
        except (ValueError, OverflowError):
            return None
    if parsed.tzinfo is None and len(value.strip()) <= 10:
        # A bare calendar date names a studio-local day.
        return tz.localize(parsed)
    return ensure_utc(parsed).astimezone(tz)


def format_date(value: DateLike, format_str: str = DateFormats.SHORT_DATE) -> str:
    parsed = safe_parse_date(value)
    if parsed is None:
        return ""
    return format_str.format(
        day=f"{parsed.day:02d}",
        month=f"{parsed.month:02d}",
        year=f"{parsed.year:04d}",
        month_abbr=MONTH_ABBREVIATIONS[parsed.month - 1],
        month_name=MONTH_NAMES[parsed.month - 1],
        weekday_name=WEEKDAY_NAMES[parsed.weekday()],
        hour=f"{parsed.hour:02d}",
        minute=f"{parsed.minute:02d}",
        second=f"{parsed.second:02d}",
    )


def short_date(value: DateLike) -> str:
    return format_date(value, DateFormats.SHORT_DATE)


def medium_date(value: DateLike) -> str:
    return format_date(value, DateFormats.MEDIUM_DATE)


def long_date(value: DateLike) -> str:
    return format_date(value, DateFormats.LONG_DATE)


def full_date(value: DateLike) -> str:
    return format_date(value, DateFormats.FULL_DATE)


def short_time(value: DateLike) -> str:
    return format_date(value, DateFormats.SHORT_TIME)


def medium_time(value: DateLike) -> str:
    return format_date(value, DateFormats.MEDIUM_TIME)


def short_datetime(value: DateLike) -> str:
    return format_date(value, DateFormats.SHORT_DATETIME)


def medium_datetime(value: DateLike) -> str:
    return format_date(value, DateFormats.MEDIUM_DATETIME)


def long_datetime(value: DateLike) -> str:
    return format_date(value, DateFormats.LONG_DATETIME)


def full_datetime(value: DateLike) -> str:
    return format_date(value, DateFormats.FULL_DATETIME)


def calendar_header(value: DateLike) -> str:
    return format_date(value, DateFormats.CALENDAR_HEADER)


def calendar_day(value: DateLike) -> str:
    return format_date(value, DateFormats.CALENDAR_DAY)


def date_input(value: DateLike) -> str:
    return format_date(value, DateFormats.DATE_INPUT)


def datetime_input(value: DateLike) -> str:
    return format_date(value, DateFormats.DATETIME_INPUT)


def format_date_for_csv(value: DateLike) -> str:
    """Locale-independent timestamp for exports: YYYY-MM-DD HH:MM:SS."""
    return format_date(value, DateFormats.CSV)


def _plural(count: int, one: str, other: str) -> str:
    return one if count == 1 else other.format(count=count)


def _distance_words(earlier: datetime, later: datetime) -> str:
    seconds = (later - earlier).total_seconds()
    minutes = round(seconds / 60)

    if minutes < 2:
        if minutes == 0:
            return "moins d’une minute"
        return "1 minute"
    if minutes < 45:
        return f"{minutes} minutes"
    if minutes < 90:
        return "environ 1 heure"
    if minutes < 1440:
        hours = round(minutes / 60)
        return _plural(hours, "environ 1 heure", "environ {count} heures")
    if minutes < 2520:
        return "1 jour"
    if minutes < 43200:
        days = round(minutes / 1440)
        return _plural(days, "1 jour", "{count} jours")
    if minutes < 86400:
        months = round(minutes / 43200)
        return _plural(months, "environ 1 mois", "environ {count} mois")

    delta = relativedelta(later, earlier)
    months = delta.years * 12 + delta.months
    if months < 12:
        nearest = round(minutes / 43200)
        return _plural(nearest, "1 mois", "{count} mois")

    months_into_year = months % 12
    years = math.floor(months / 12)
    if months_into_year < 3:
        return _plural(years, "environ 1 an", "environ {count} ans")
    if months_into_year < 9:
        return _plural(years, "plus d’un an", "plus de {count} ans")
    return _plural(years + 1, "presqu’un an", "presque {count} ans")


def distance_between(left: DateLike, right: DateLike) -> str:
    """Unsigned distance in words, e.g. "3 jours"."""
    first = safe_parse_date(left)
    second = safe_parse_date(right)
    if first is None or second is None:
        return ""
    earlier, later = sorted((first, second))
    return _distance_words(earlier, later)


def from_now(value: DateLike, now: Optional[datetime] = None) -> str:
    """Relative time with direction, e.g. "il y a 2 heures" or "dans 3 jours"."""
    parsed = safe_parse_date(value)
    if parsed is None:
        return ""
    reference = ensure_utc(now) if now is not None else utc_now()
    if parsed > reference:
        return f"dans {_distance_words(reference, parsed)}"
    return f"il y a {_distance_words(parsed, reference)}"


def is_valid_date(value: DateLike) -> bool:
    return safe_parse_date(value) is not None


def days_between(start: DateLike, end: DateLike) -> int:
    """Whole days between two dates, rounded up, regardless of order."""
    first = safe_parse_date(start)
    second = safe_parse_date(end)
    if first is None or second is None:
        return 0
    return math.ceil(abs((second - first).total_seconds()) / 86400)


def today() -> str:
    return short_date(utc_now())


def now() -> str:
    return short_datetime(utc_now())
