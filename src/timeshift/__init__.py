"""timeshift: an in-process virtual clock for time-dependent code."""

from __future__ import annotations

from timeshift.clock import Clock, ManualClock, RealClock
from timeshift.errors import TimeParseError, TimeShiftError
from timeshift.isotime import iso_shape, resolve_iso_millis
from timeshift.logger import NoOpLogger, StdlibLogger, StructuredLogger, get_logger, set_logger
from timeshift.middleware import (
    LoggedConfig,
    ProfilingConfig,
    classify_elapsed,
    logged_middleware,
    profiling_middleware,
)
from timeshift.testkit import FakeTimeSource, RecordingLogger, TestEnv, create_test_env, host_time_zone
from timeshift.util import format_duration_ms, from_epoch_millis, to_epoch_millis
from timeshift.virtual_clock import TimeValue, VirtualClock, initial_time_from_env

__version__ = "0.1.0"

__all__ = [
    "Clock",
    "FakeTimeSource",
    "LoggedConfig",
    "ManualClock",
    "NoOpLogger",
    "ProfilingConfig",
    "RealClock",
    "RecordingLogger",
    "StdlibLogger",
    "StructuredLogger",
    "TestEnv",
    "TimeParseError",
    "TimeShiftError",
    "TimeValue",
    "VirtualClock",
    "classify_elapsed",
    "create_test_env",
    "format_duration_ms",
    "from_epoch_millis",
    "get_logger",
    "host_time_zone",
    "initial_time_from_env",
    "iso_shape",
    "logged_middleware",
    "profiling_middleware",
    "resolve_iso_millis",
    "set_logger",
    "to_epoch_millis",
]
