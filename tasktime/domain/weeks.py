from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone


def utc_date(moment: datetime) -> date:
    # Naive datetimes are stored as UTC.
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


def day_key(moment: datetime) -> str:
    return utc_date(moment).isoformat()


def iso_week_key(moment: datetime) -> str:
    """Return ``YYYY-W##`` for the ISO-8601 week containing ``moment``.

    The date is moved to the Thursday of its Monday-based week; that
    Thursday's year is the week-year and its day offset from January 1st
    gives the week number.
    """
    day = utc_date(moment)
    thursday = day + timedelta(days=4 - day.isoweekday())
    year_start = date(thursday.year, 1, 1)
    week = math.ceil(((thursday - year_start).days + 1) / 7)
    return f"{thursday.year}-W{week:02d}"
