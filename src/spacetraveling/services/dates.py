"""Locale aware formatting of publication dates (``dd MMM yyyy``)."""

from __future__ import annotations

from datetime import datetime

__all__ = ["INVALID_DATE", "format_publication_date", "parse_publication_date"]

INVALID_DATE = "Invalid Date"

MONTH_ABBREVIATIONS = {
    "pt-BR": ("jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez"),
    "en-US": ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"),
}
DEFAULT_LOCALE = "pt-BR"


def parse_publication_date(value: str) -> datetime:
    """Parse a CMS timestamp such as ``2021-03-25T19:25:28+0000``."""

    try:
        return datetime.strptime(value, "%Y-%m-%dT%H:%M:%S%z")
    except ValueError:
        return datetime.fromisoformat(value)


def format_publication_date(value: str | None, locale: str = DEFAULT_LOCALE) -> str:
    """Return ``value`` formatted as ``dd MMM yyyy`` in ``locale``.

    ``None`` renders as an empty string and unparseable values as
    :data:`INVALID_DATE`; neither raises.
    """

    if value is None:
        return ""

    try:
        moment = parse_publication_date(value)
    except (TypeError, ValueError):
        return INVALID_DATE

    months = MONTH_ABBREVIATIONS.get(locale, MONTH_ABBREVIATIONS[DEFAULT_LOCALE])
    return f"{moment.day:02d} {months[moment.month - 1]} {moment.year:04d}"
