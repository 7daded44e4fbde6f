"""Virtual clock that can be set, offset and reset while tracking real time.

``now()`` is computed as::

    init_wall_ms + offset_ms + elapsed monotonic ms since construction

The wall clock is read once, when the clock is built. Elapsed time always
comes from the monotonic source, so stepping the host clock afterwards does
not move virtual time. Setters only recompute ``offset_ms``.

Values produced before a shift keep the time they were built with; only calls made
after the shift observe it.
"""

from __future__ import annotations

import datetime as dt
import os
import re
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from timeshift.errors import TimeParseError
from timeshift.isotime import resolve_iso_millis
from timeshift.logger import StructuredLogger, get_logger
from timeshift.util import from_epoch_millis, sanitize_log_string, to_epoch_millis, to_millis

TimeValue = int | dt.datetime | dt.date | str
NanosSource = Callable[[], int]
LocalNowSource = Callable[[], dt.datetime]

_NANOS_PER_MS = 1_000_000
_EPOCH_MILLIS = re.compile(r"^[+-]?\d+$")


def initial_time_from_env() -> TimeValue | None:
    raw = os.environ.get("TIMESHIFT_NOW", "").strip()
    if not raw:
        return None
    if _EPOCH_MILLIS.match(raw):
        return int(raw)
    return raw


@dataclass(slots=True, eq=False)
class VirtualClock:
    _init_wall_ms: int
    _init_monotonic_ns: int
    _offset_ms: int
    _monotonic_ns: NanosSource
    _local_now: LocalNowSource
    _logger: StructuredLogger | None
    _lock: threading.Lock

    def __init__(
        self,
        initial: TimeValue | None = None,
        *,
        monotonic_ns: NanosSource | None = None,
        wall_ns: NanosSource | None = None,
        local_now: LocalNowSource | None = None,
        logger: StructuredLogger | None = None,
    ) -> None:
        self._monotonic_ns = monotonic_ns or time.monotonic_ns
        self._local_now = local_now or dt.datetime.now
        self._logger = logger
        self._lock = threading.Lock()
        self._offset_ms = 0

        read_wall = wall_ns or time.time_ns
        self._init_wall_ms = read_wall() // _NANOS_PER_MS
        self._init_monotonic_ns = self._monotonic_ns()

        if initial is not None:
            self.set_time(initial)

    @classmethod
    def from_env(
        cls,
        *,
        monotonic_ns: NanosSource | None = None,
        wall_ns: NanosSource | None = None,
        local_now: LocalNowSource | None = None,
        logger: StructuredLogger | None = None,
    ) -> VirtualClock:
        """Build a clock whose initial time comes from ``TIMESHIFT_NOW``.

        A signed integer is read as epoch milliseconds, anything else as an
        ISO-like string. Unset or blank leaves the clock unshifted.
        """
        return cls(
            initial_time_from_env(),
            monotonic_ns=monotonic_ns,
            wall_ns=wall_ns,
            local_now=local_now,
            logger=logger,
        )

    @property
    def init_wall_ms(self) -> int:
        return self._init_wall_ms

    @property
    def offset_ms(self) -> int:
        with self._lock:
            return self._offset_ms

    @property
    def is_shifted(self) -> bool:
        return self.offset_ms != 0

    def now(self) -> int:
        with self._lock:
            offset = self._offset_ms
        return self._init_wall_ms + offset + self._elapsed_ms()

    def datetime(self, tz: dt.tzinfo | None = None) -> dt.datetime:
        """Virtual now as a datetime; naive host local time when tz is None.

        Raises OverflowError or ValueError when the clock has been set beyond
        the years datetime supports. ``now()`` and ``time()`` keep working.
        """
        return from_epoch_millis(self.now(), tz)

    def time(self) -> float:
        """Virtual now in epoch seconds, shaped like ``time.time()``."""
        return self.now() / 1000.0

    def set_time(self, value: TimeValue) -> bool:
        match value:
            case bool():
                raise TypeError("timeshift: bool is not a time value")
            case int():
                self.set_epoch_millis(value)
            case dt.datetime() | dt.date():
                self.set_datetime(value)
            case str():
                return self.set_iso(value)
            case _:
                raise TypeError(f"timeshift: unsupported time value type {type(value).__name__}")
        return True

    def set_epoch_millis(self, epoch_ms: int) -> None:
        self._store_offset(int(epoch_ms))

    def set_datetime(self, value: dt.datetime | dt.date) -> None:
        self._store_offset(to_epoch_millis(value))

    def set_iso(self, text: str) -> bool:
        """Shift to an ISO-like date-time, time or date string.

        Returns False, leaving the offset untouched, when the string cannot be
        parsed. The failure is written to the logger as a warning.
        """
        try:
            wanted = resolve_iso_millis(text, local_now=self._local_now())
        except TimeParseError as exc:
            self._log().warn(
                "timeshift: failed to parse time",
                {
                    "value": sanitize_log_string("" if text is None else str(text)),
                    "error_code": exc.code,
                    "error": exc.message,
                },
            )
            return False
        self._store_offset(wanted)
        return True

    def advance(self, delta: int | dt.timedelta) -> int:
        delta_ms = to_millis(delta)
        with self._lock:
            self._offset_ms += delta_ms
            offset = self._offset_ms
        self._log().debug("timeshift: clock advanced", {"delta_ms": delta_ms, "offset_ms": offset})
        return offset

    def reset(self) -> None:
        with self._lock:
            self._offset_ms = 0
        self._log().debug("timeshift: clock reset")

    def _store_offset(self, wanted_ms: int) -> None:
        offset = wanted_ms - self._elapsed_ms() - self._init_wall_ms
        with self._lock:
            self._offset_ms = offset
        self._log().debug("timeshift: clock shifted", {"offset_ms": offset})

    def _elapsed_ms(self) -> int:
        return (self._monotonic_ns() - self._init_monotonic_ns) // _NANOS_PER_MS

    def _log(self) -> StructuredLogger:
        return self._logger if self._logger is not None else get_logger()
