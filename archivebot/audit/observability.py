"""Structured log events for channel audit runs.

Every event is a single femtologging line of the form
``[event.type] key=value ...`` so log aggregators can parse it without a
dedicated schema. Failures carry an :class:`ErrorCategory` for alert routing.

Usage
-----
>>> event_logger = AuditEventLogger()
>>> event_logger.log_run_started(notification_channel_id="C0123")

"""

from __future__ import annotations

import enum
import typing as typ

from archivebot.logging import get_logger, log_debug, log_error, log_info, log_warning
from archivebot.slack.errors import (
    SlackAPIError,
    SlackConfigError,
    SlackErrorCode,
    SlackResponseShapeError,
    SlackTransportError,
)

if typ.TYPE_CHECKING:
    import datetime as dt

    from archivebot.slack.models import Channel

logger = get_logger(__name__)

_TRANSIENT_CODES: typ.Final = frozenset({SlackErrorCode.FATAL, SlackErrorCode.INTERNAL})
_AUTH_CODES: typ.Final = frozenset(
    {
        SlackErrorCode.INVALID_AUTH,
        SlackErrorCode.AUTH_TIMEOUT,
        SlackErrorCode.AUTH_VERIFICATION,
    }
)


class AuditEventType(enum.StrEnum):
    """Structured log event types for audit runs."""

    RUN_STARTED = "audit.run.started"
    RUN_COMPLETED = "audit.run.completed"
    RUN_FAILED = "audit.run.failed"
    PAGE_FAILED = "audit.page.failed"
    CHANNEL_JOINED = "audit.channel.joined"
    CHANNEL_JOIN_FAILED = "audit.channel.join_failed"
    HISTORY_FAILED = "audit.history.failed"
    REPORT_POSTED = "audit.report.posted"
    POST_FAILED = "audit.post.failed"


class ErrorCategory(enum.StrEnum):
    """Categories for error classification in alerts."""

    AUTHENTICATION = "authentication"
    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"
    CLIENT_ERROR = "client_error"
    SCHEMA_DRIFT = "schema_drift"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize an exception for alerting purposes."""
    if isinstance(exc, SlackAPIError):
        if exc.code in _AUTH_CODES:
            return ErrorCategory.AUTHENTICATION
        if exc.code is SlackErrorCode.RATE_LIMITED:
            return ErrorCategory.RATE_LIMITED
        if exc.code in _TRANSIENT_CODES:
            return ErrorCategory.TRANSIENT
        return ErrorCategory.CLIENT_ERROR
    if isinstance(exc, SlackTransportError | TimeoutError):
        return ErrorCategory.TRANSIENT
    if isinstance(exc, SlackResponseShapeError):
        return ErrorCategory.SCHEMA_DRIFT
    if isinstance(exc, SlackConfigError | ValueError):
        return ErrorCategory.CONFIGURATION
    return ErrorCategory.UNKNOWN


def _is_benign_history_error(error: BaseException) -> bool:
    return (
        isinstance(error, SlackAPIError)
        and error.code is SlackErrorCode.NOT_IN_CHANNEL
    )


class AuditEventLogger:
    """Emit structured audit events via femtologging.

    Successful steps log at INFO, per-channel degradations at WARNING and
    run-level failures at ERROR.
    """

    def log_run_started(self, *, notification_channel_id: str) -> None:
        """Log the start of an audit run."""
        log_info(
            logger,
            "[%s] notification_channel_id=%s",
            AuditEventType.RUN_STARTED,
            notification_channel_id,
        )

    def log_run_completed(
        self,
        *,
        channels_seen: int,
        reportable: int,
        posted: bool,
        duration: dt.timedelta,
    ) -> None:
        """Log successful run completion with counters."""
        log_info(
            logger,
            "[%s] channels_seen=%d reportable=%d posted=%s duration_seconds=%.3f",
            AuditEventType.RUN_COMPLETED,
            channels_seen,
            reportable,
            posted,
            duration.total_seconds(),
        )

    def log_run_failed(self, *, error: BaseException, duration: dt.timedelta) -> None:
        """Log an aborted run with error categorisation."""
        log_error(
            logger,
            "[%s] duration_seconds=%.3f error_type=%s error_category=%s "
            "error_message=%s",
            AuditEventType.RUN_FAILED,
            duration.total_seconds(),
            type(error).__name__,
            categorize_error(error),
            str(error),
            exc_info=error,
        )

    def log_page_failed(
        self,
        *,
        cursor: str,
        pages_fetched: int,
        channels_so_far: int,
        error: BaseException,
    ) -> None:
        """Log a failed ``conversations.list`` page."""
        log_warning(
            logger,
            "[%s] call=conversations.list cursor=%r pages_fetched=%d "
            "channels_so_far=%d error_category=%s error_message=%s",
            AuditEventType.PAGE_FAILED,
            cursor,
            pages_fetched,
            channels_so_far,
            categorize_error(error),
            str(error),
        )

    def log_channel_joined(self, channel: Channel) -> None:
        """Log a successful ``conversations.join``."""
        log_info(
            logger,
            "[%s] channel_id=%s channel_name=%s",
            AuditEventType.CHANNEL_JOINED,
            channel.id,
            channel.name,
        )

    def log_join_failed(self, channel: Channel, error: BaseException) -> None:
        """Log a join failure; membership falls back to the reported value."""
        log_warning(
            logger,
            "[%s] call=conversations.join channel_id=%s channel_name=%s "
            "error_category=%s error_message=%s",
            AuditEventType.CHANNEL_JOIN_FAILED,
            channel.id,
            channel.name,
            categorize_error(error),
            str(error),
        )

    def log_history_failed(self, channel: Channel, error: BaseException) -> None:
        """Log a history fetch failure; ``not_in_channel`` is expected."""
        emit = log_info if _is_benign_history_error(error) else log_warning
        emit(
            logger,
            "[%s] call=conversations.history channel_id=%s channel_name=%s "
            "error_category=%s error_message=%s",
            AuditEventType.HISTORY_FAILED,
            channel.id,
            channel.name,
            categorize_error(error),
            str(error),
        )

    def log_channel_skipped(self, channel: Channel, reason: str) -> None:
        """Log why a channel was not inspected."""
        log_debug(
            logger,
            "channel_id=%s channel_name=%s skipped=%s",
            channel.id,
            channel.name,
            reason,
        )

    def log_report_posted(self, *, channel_id: str, lines: int) -> None:
        """Log a posted notification."""
        log_info(
            logger,
            "[%s] channel_id=%s lines=%d",
            AuditEventType.REPORT_POSTED,
            channel_id,
            lines,
        )

    def log_post_failed(self, *, channel_id: str, error: BaseException) -> None:
        """Log a notification that could not be posted; it is not retried."""
        log_error(
            logger,
            "[%s] call=chat.postMessage channel_id=%s error_category=%s "
            "error_message=%s",
            AuditEventType.POST_FAILED,
            channel_id,
            categorize_error(error),
            str(error),
        )
