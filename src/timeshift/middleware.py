from __future__ import annotations

import functools
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from timeshift.clock import Clock, RealClock
from timeshift.logger import StructuredLogger, get_logger
from timeshift.util import format_duration_ms, sanitize_log_string

Wrapper = Callable[[Callable[..., Any]], Callable[..., Any]]


@dataclass(slots=True)
class LoggedConfig:
    level: str = "debug"
    timed: bool = True
    max_time_ms: int = 10


@dataclass(slots=True)
class ProfilingConfig:
    slow_ms: int = 5
    potential_issue_ms: int = 100
    needs_attention_ms: int = 500


def logged_middleware(
    config: LoggedConfig | None = None,
    *,
    name: str = "",
    clock: Clock | None = None,
    logger: StructuredLogger | None = None,
) -> Wrapper:
    cfg = _normalize_logged_config(config or LoggedConfig())
    clk = clock or RealClock()

    def wrap(fn: Callable[..., Any]) -> Callable[..., Any]:
        op = _operation_name(fn, name)

        @functools.wraps(fn)
        def wrapped(*args: Any, **kwargs: Any) -> Any:
            log = logger if logger is not None else get_logger()
            emit = getattr(log, cfg.level)
            call = _describe_call(op, args, kwargs)

            emit(f">>>> In [{call}]", {"operation": op})
            start = clk.now()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed = clk.now() - start
                fields: dict[str, Any] = {"operation": op}
                if cfg.timed:
                    fields["elapsed_ms"] = elapsed
                    emit(f"<<<< Out Time taken: {format_duration_ms(elapsed)} [{call}]", fields)
                else:
                    emit(f"<<<< Out [{call}]", fields)

                if elapsed > cfg.max_time_ms:
                    log.error(
                        f"logged call exceeded max time [{call}]",
                        {"operation": op, "elapsed_ms": elapsed, "max_time_ms": cfg.max_time_ms},
                    )

        return wrapped

    return wrap


def profiling_middleware(
    config: ProfilingConfig | None = None,
    *,
    name: str = "",
    clock: Clock | None = None,
    logger: StructuredLogger | None = None,
) -> Wrapper:
    cfg = _normalize_profiling_config(config or ProfilingConfig())
    clk = clock or RealClock()

    def wrap(fn: Callable[..., Any]) -> Callable[..., Any]:
        op = _operation_name(fn, name)

        @functools.wraps(fn)
        def wrapped(*args: Any, **kwargs: Any) -> Any:
            start = clk.now()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed = clk.now() - start
                level, tier = classify_elapsed(elapsed, cfg)
                log = logger if logger is not None else get_logger()
                getattr(log, level)(
                    f"{format_duration_ms(elapsed)} to execute [{op}]",
                    {"operation": op, "elapsed_ms": elapsed, "tier": tier},
                )

        return wrapped

    return wrap


def classify_elapsed(elapsed_ms: int, config: ProfilingConfig) -> tuple[str, str]:
    """Log level and tier name for a measured duration."""
    if config.slow_ms < 0 or elapsed_ms == 0:
        return "debug", "untimed"
    if elapsed_ms < config.slow_ms:
        return "debug", "fast"
    if elapsed_ms < config.potential_issue_ms:
        return "info", "slow"
    if elapsed_ms < config.needs_attention_ms:
        return "warn", "potential_issue"
    return "error", "needs_attention"


def _normalize_logged_config(config: LoggedConfig) -> LoggedConfig:
    level = str(getattr(config, "level", "") or "").strip().lower()
    if level not in {"debug", "info"}:
        level = "debug"

    try:
        max_time_ms = int(getattr(config, "max_time_ms", 10))
    except (TypeError, ValueError):
        max_time_ms = 10
    if max_time_ms < 0:
        max_time_ms = 10

    return LoggedConfig(
        level=level,
        timed=bool(getattr(config, "timed", True)),
        max_time_ms=max_time_ms,
    )


def _normalize_profiling_config(config: ProfilingConfig) -> ProfilingConfig:
    defaults = ProfilingConfig()
    slow = _int_or(getattr(config, "slow_ms", None), defaults.slow_ms)
    potential = _int_or(getattr(config, "potential_issue_ms", None), defaults.potential_issue_ms)
    attention = _int_or(getattr(config, "needs_attention_ms", None), defaults.needs_attention_ms)

    potential = max(potential, slow, 0)
    attention = max(attention, potential)

    return ProfilingConfig(slow_ms=slow, potential_issue_ms=potential, needs_attention_ms=attention)


def _int_or(value: Any, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _operation_name(fn: Callable[..., Any], name: str) -> str:
    explicit = str(name or "").strip()
    if explicit:
        return explicit
    module = str(getattr(fn, "__module__", "") or "")
    qualname = str(getattr(fn, "__qualname__", "") or getattr(fn, "__name__", "") or repr(fn))
    return f"{module}.{qualname}" if module else qualname


def _describe_call(op: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
    parts = [repr(a) for a in args]
    parts.extend(f"{k}={v!r}" for k, v in kwargs.items())
    return sanitize_log_string(f"{op}({', '.join(parts)})")
