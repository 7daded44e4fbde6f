"""Resolution of ISO-8601-like strings to epoch milliseconds.

Three shapes are accepted, told apart by their marker characters:

* ``2024-01-15T10:30:00`` (has ``T``): an exact local date and time.
* ``10:30:00`` (has ``:``): a time of day on the current local date.
* ``2024-01-15`` (neither): a date at the current local time of day.

Partial shapes only overwrite the fields they carry; every other field,
including sub-second precision, comes from the supplied local "now".
"""

from __future__ import annotations

import datetime as dt
from typing import Literal

from timeshift.errors import parse_error
from timeshift.util import to_epoch_millis

Shape = Literal["datetime", "time", "date"]

DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"
TIME_FORMAT = "%H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"

_FORMATS: dict[str, str] = {
    "datetime": DATETIME_FORMAT,
    "time": TIME_FORMAT,
    "date": DATE_FORMAT,
}

_PATTERNS: dict[str, str] = {
    "datetime": "yyyy-MM-ddTHH:mm:ss",
    "time": "HH:mm:ss",
    "date": "yyyy-MM-dd",
}


def iso_shape(text: str | None) -> Shape:
    value = str(text or "")
    if "T" in value:
        return "datetime"
    if ":" in value:
        return "time"
    return "date"


def resolve_iso_millis(text: str | None, *, local_now: dt.datetime) -> int:
    if text is None:
        raise parse_error(text, "time value is empty")
    value = str(text).strip()
    if not value:
        raise parse_error(text, "time value is empty")

    shape = iso_shape(value)
    try:
        parsed = dt.datetime.strptime(value, _FORMATS[shape])
    except ValueError as exc:
        raise parse_error(value, f"expected {_PATTERNS[shape]}").with_cause(exc)

    match shape:
        case "datetime":
            wanted = parsed
        case "time":
            wanted = local_now.replace(hour=parsed.hour, minute=parsed.minute, second=parsed.second)
        case _:
            wanted = local_now.replace(year=parsed.year, month=parsed.month, day=parsed.day)

    try:
        return to_epoch_millis(wanted)
    except (ValueError, OverflowError) as exc:
        raise parse_error(value, "time is outside the supported range").with_cause(exc)
