"""Capture femtologging output for assertions on structured audit events."""

from __future__ import annotations

import contextlib
import dataclasses
import threading
import time
import typing as typ

from femtologging import get_logger


@dataclasses.dataclass(slots=True)
class FemtoLogRecord:
    """A captured log line."""

    logger: str
    level: str
    message: str

    @property
    def is_warning(self) -> bool:
        """Return True for WARN/WARNING records."""
        return self.level in {"WARN", "WARNING"}


class FemtoLogCapture:
    """Handler that stores records emitted on the femtologging worker thread."""

    def __init__(self) -> None:
        """Initialise storage and the condition used by waiters."""
        self.records: list[FemtoLogRecord] = []
        self._condition = threading.Condition()

    def handle(self, logger: str, level: str, message: str) -> None:
        """Store one record."""
        with self._condition:
            self.records.append(
                FemtoLogRecord(logger=str(logger), level=str(level), message=message)
            )
            self._condition.notify_all()

    def wait_for_count(self, count: int, timeout: float = 1.0) -> None:
        """Block until ``count`` records arrived or ``timeout`` elapsed."""
        deadline = time.monotonic() + timeout
        with self._condition:
            while len(self.records) < count:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self._condition.wait(timeout=remaining)

        assert len(self.records) >= count, (
            f"Expected {count} records, got {len(self.records)}"
        )

    def messages_containing(self, fragment: str) -> list[FemtoLogRecord]:
        """Return the records whose message contains ``fragment``."""
        with self._condition:
            return [record for record in self.records if fragment in record.message]


@contextlib.contextmanager
def capture_femto_logs(
    logger_name: str,
    *,
    level: str = "TRACE",
) -> typ.Iterator[FemtoLogCapture]:
    """Attach a capturing handler to ``logger_name`` for the block."""
    logger = get_logger(logger_name)
    previous_level = logger.level
    previous_propagate = logger.propagate

    logger.set_level(level)
    logger.set_propagate(False)
    handler = FemtoLogCapture()
    logger.add_handler(handler)
    try:
        yield handler
    finally:
        logger.remove_handler(handler)
        logger.set_level(previous_level)
        logger.set_propagate(previous_propagate)
