"""Publication date formatting."""
from __future__ import annotations

from datetime import datetime

import structlog
from babel.dates import format_date, get_month_names

log = structlog.get_logger(__name__)

# Prismic sends e.g. "2021-03-15T19:25:28+0000"
PRISMIC_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def parse_publication_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.strptime(value, PRISMIC_TIMESTAMP_FORMAT)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        log.warning("unparseable_publication_date", value=value)
        return None


def format_publication_date(
    value: str | None,
    locale: str = "pt_BR",
    fmt: str = "dd MMM yyyy",
) -> str | None:
    """
    Format a publication timestamp for display, e.g. ``"15 mar 2021"``.

    Abbreviation dots of the month name are dropped (pt_BR "mar." becomes
    "mar"). Dots written in ``fmt`` itself are kept.
    """
    parsed = parse_publication_date(value)
    if parsed is None:
        return None
    formatted = format_date(parsed, format=fmt, locale=locale)
    for context in ("format", "stand-alone"):
        month = get_month_names("abbreviated", context=context, locale=locale)[parsed.month]
        if "." in month:
            formatted = formatted.replace(month, month.replace(".", ""))
    return formatted
