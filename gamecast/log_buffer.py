"""Ring buffer of recent service log records, served by /api/logs."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

SERVICE_LOGGER = "gamecast"
BUFFER_CAPACITY = 500


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    level: str
    logger: str
    message: str


def _record_time(record: logging.LogRecord) -> str:
    created = datetime.fromtimestamp(record.created, tz=timezone.utc)
    return created.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class RecentLogHandler(logging.Handler):
    def __init__(self, capacity: int = BUFFER_CAPACITY) -> None:
        super().__init__(level=logging.INFO)
        self._records: deque[tuple[int, LogEntry]] = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = LogEntry(
                timestamp=_record_time(record),
                level=record.levelname,
                logger=record.name,
                message=self.format(record),
            )
        except Exception:
            self.handleError(record)
            return
        self._records.append((record.levelno, entry))

    def entries(
        self,
        limit: int = 100,
        *,
        min_level: int = logging.NOTSET,
        logger_prefix: str | None = None,
    ) -> list[dict]:
        """Newest-first entries at or above ``min_level``, optionally from one logger subtree."""
        if limit <= 0:
            return []
        selected: list[dict] = []
        for levelno, entry in reversed(self._records):
            if levelno < min_level:
                continue
            if logger_prefix and not (
                entry.logger == logger_prefix or entry.logger.startswith(logger_prefix + ".")
            ):
                continue
            selected.append(asdict(entry))
            if len(selected) == limit:
                break
        return selected


_handler: RecentLogHandler | None = None


def get_log_handler() -> RecentLogHandler:
    global _handler
    if _handler is None:
        _handler = RecentLogHandler()
        _handler.setFormatter(logging.Formatter("%(message)s"))
    return _handler


def install_log_handler() -> RecentLogHandler:
    """Capture INFO and above from every ``gamecast.*`` logger."""
    handler = get_log_handler()
    service_logger = logging.getLogger(SERVICE_LOGGER)
    if handler not in service_logger.handlers:
        service_logger.addHandler(handler)
    service_logger.setLevel(logging.INFO)
    return handler
