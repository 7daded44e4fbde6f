from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from timeshift.util import sanitize_log_string


@runtime_checkable
class StructuredLogger(Protocol):
    def debug(self, message: str, *fields: dict[str, Any]) -> None: ...

    def info(self, message: str, *fields: dict[str, Any]) -> None: ...

    def warn(self, message: str, *fields: dict[str, Any]) -> None: ...

    def error(self, message: str, *fields: dict[str, Any]) -> None: ...

    def with_field(self, key: str, value: Any) -> StructuredLogger: ...

    def with_fields(self, fields: dict[str, Any]) -> StructuredLogger: ...

    def flush(self) -> None: ...

    def is_healthy(self) -> bool: ...


class NoOpLogger:
    def debug(self, _message: str, *fields: dict[str, Any]) -> None:
        return None

    def info(self, _message: str, *fields: dict[str, Any]) -> None:
        return None

    def warn(self, _message: str, *fields: dict[str, Any]) -> None:
        return None

    def error(self, _message: str, *fields: dict[str, Any]) -> None:
        return None

    def with_field(self, _key: str, _value: Any) -> StructuredLogger:
        return self

    def with_fields(self, _fields: dict[str, Any]) -> StructuredLogger:
        return self

    def flush(self) -> None:
        return None

    def is_healthy(self) -> bool:
        return True


@dataclass(slots=True)
class StdlibLogger:
    """Adapts a ``logging.Logger`` to ``StructuredLogger``.

    Fields are appended to the message as sorted ``key=value`` pairs.
    """

    logger: logging.Logger
    fields: dict[str, Any]

    def __init__(self, logger: logging.Logger | str | None = None, fields: dict[str, Any] | None = None) -> None:
        if isinstance(logger, logging.Logger):
            self.logger = logger
        else:
            self.logger = logging.getLogger(str(logger or "timeshift"))
        self.fields = dict(fields or {})

    def debug(self, message: str, *fields: dict[str, Any]) -> None:
        self._log(logging.DEBUG, message, fields)

    def info(self, message: str, *fields: dict[str, Any]) -> None:
        self._log(logging.INFO, message, fields)

    def warn(self, message: str, *fields: dict[str, Any]) -> None:
        self._log(logging.WARNING, message, fields)

    def error(self, message: str, *fields: dict[str, Any]) -> None:
        self._log(logging.ERROR, message, fields)

    def with_field(self, key: str, value: Any) -> StructuredLogger:
        return StdlibLogger(self.logger, {**self.fields, str(key): value})

    def with_fields(self, fields: dict[str, Any]) -> StructuredLogger:
        return StdlibLogger(self.logger, {**self.fields, **dict(fields or {})})

    def flush(self) -> None:
        for handler in self.logger.handlers:
            handler.flush()

    def is_healthy(self) -> bool:
        return True

    def _log(self, level: int, message: str, fields: tuple[dict[str, Any], ...]) -> None:
        if not self.logger.isEnabledFor(level):
            return
        merged = merge_fields(self.fields, *fields)
        if not merged:
            self.logger.log(level, "%s", message)
            return
        rendered = " ".join(f"{k}={sanitize_log_string(str(v))}" for k, v in sorted(merged.items()))
        self.logger.log(level, "%s %s", message, rendered)


def merge_fields(*fields: dict[str, Any] | None) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for f in fields:
        if f:
            out.update(f)
    return out


_global_logger: StructuredLogger = NoOpLogger()


def get_logger() -> StructuredLogger:
    return _global_logger


def set_logger(logger: StructuredLogger | None) -> None:
    global _global_logger
    _global_logger = logger if logger is not None else NoOpLogger()


__all__ = [
    "NoOpLogger",
    "StdlibLogger",
    "StructuredLogger",
    "get_logger",
    "merge_fields",
    "set_logger",
]
