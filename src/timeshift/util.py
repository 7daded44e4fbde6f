from __future__ import annotations

import datetime as dt

_EPOCH = dt.datetime.fromtimestamp(0, tz=dt.UTC)
_NAIVE_EPOCH = dt.datetime(1970, 1, 1)
_ONE_MS = dt.timedelta(milliseconds=1)

# astimezone() can step outside years 1..9999 within a day of either end
_FIRST_SAFE = dt.datetime(1, 1, 2)
_LAST_SAFE = dt.datetime(9999, 12, 30)


def to_epoch_millis(value: dt.datetime | dt.date) -> int:
    """Epoch milliseconds for a datetime or date.

    Aware datetimes use their own tzinfo. Naive datetimes and plain dates are
    read as host local time, a plain date being local midnight. Every value
    datetime can hold converts, including the first and last days of its range.
    """
    if not isinstance(value, dt.datetime):
        value = dt.datetime(value.year, value.month, value.day)
    if value.tzinfo is not None and value.utcoffset() is not None:
        return (value - _EPOCH) // _ONE_MS
    naive = value.replace(tzinfo=None)
    return (naive - _NAIVE_EPOCH - _local_utcoffset(naive)) // _ONE_MS


def _local_utcoffset(naive: dt.datetime) -> dt.timedelta:
    clamped = min(max(naive, _FIRST_SAFE), _LAST_SAFE)
    for candidate in (naive, clamped):
        try:
            offset = candidate.astimezone().utcoffset()
        except (ValueError, OverflowError):
            continue
        if offset is not None:
            return offset
    return dt.datetime.now().astimezone().utcoffset() or dt.timedelta(0)


def from_epoch_millis(epoch_ms: int, tz: dt.tzinfo | None = None) -> dt.datetime:
    """Datetime for epoch milliseconds; naive host local time when tz is None.

    Raises OverflowError or ValueError when the instant lies outside the
    years datetime supports.
    """
    aware = _EPOCH + dt.timedelta(milliseconds=int(epoch_ms))
    if tz is None:
        return aware.astimezone().replace(tzinfo=None)
    return aware.astimezone(tz)


def to_millis(delta: int | dt.timedelta) -> int:
    if isinstance(delta, dt.timedelta):
        return delta // _ONE_MS
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise TypeError("delta must be int milliseconds or timedelta")
    return int(delta)


def format_duration_ms(millis: int) -> str:
    value = int(millis or 0)
    sign = "-" if value < 0 else ""
    value = abs(value)

    hours, rem = divmod(value, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    seconds, ms = divmod(rem, 1_000)

    parts: list[str] = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds:
        parts.append(f"{seconds}s")
    if ms or not parts:
        parts.append(f"{ms}ms")
    return sign + " ".join(parts)


def sanitize_log_string(value: str) -> str:
    v = str(value or "")
    if not v:
        return v
    return v.replace("\r", "").replace("\n", "")
