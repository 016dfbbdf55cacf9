"""Configuration for channel audit runs.

Usage
-----
Create a configuration with defaults:

>>> config = AuditConfig(notification_channel_id="C0123")
>>> config.stale_after_seconds
1209600

Or load from environment variables:

>>> import os
>>> os.environ["ARCHIVEBOT_NOTIFICATION_CHANNEL_ID"] = "C0123"
>>> os.environ["ARCHIVEBOT_STALE_AFTER_DAYS"] = "30"
>>> AuditConfig.from_env().stale_after_seconds
2592000

"""

from __future__ import annotations

import dataclasses as dc
import os
import typing as typ

_SECONDS_PER_DAY: typ.Final = 24 * 60 * 60
_MAX_PAGE_SIZE: typ.Final = 1000

DEFAULT_MESSAGE_HEADERS: typ.Final[tuple[str, ...]] = (
    "Hey, you've got some cleaning up to do!",
    "Hey boss, take a look at these, will ya?",
)
DEFAULT_SECONDARY_MESSAGE_HEADERS: typ.Final[tuple[str, ...]] = (
    "A few channels could use some attention.",
    "Channel housekeeping time!",
)


def _split(raw: str, separator: str) -> tuple[str, ...]:
    """Split a list-valued env var, dropping blank items."""
    return tuple(item.strip() for item in raw.split(separator) if item.strip())


@dc.dataclass(frozen=True, slots=True)
class AuditConfig:
    """Thresholds and destinations for one audit run.

    Attributes
    ----------
    notification_channel_id
        Channel that receives the report.
    ignore_prefixes
        Channel-name prefixes that exclude a channel from joins, history
        fetches and the report. Matching is case-sensitive.
    stale_after_seconds
        A channel is stale when its last relevant message is strictly older
        than this. Default is 14 days.
    small_channel_threshold
        Inclusive upper bound on the effective member count of a small
        channel. Default is 3.
    history_lookback
        Number of recent messages scanned for a relevant one. Default is 10.
    message_headers
        Header phrases; one is picked at random per report.
    max_concurrency
        Maximum number of channels inspected at once. Default is 8.
    page_size
        ``limit`` sent with each ``conversations.list`` call (1 to 1000).
    run_timeout_s
        Optional deadline for the whole run. When it expires in-flight
        inspections are cancelled and nothing is posted.
    secondary_channel_id
        Optional channel that receives a short pointer to the report.
    secondary_message_headers
        Header phrases for the pointer message.

    """

    notification_channel_id: str
    ignore_prefixes: tuple[str, ...] = ()
    stale_after_seconds: int = 14 * _SECONDS_PER_DAY
    small_channel_threshold: int = 3
    history_lookback: int = 10
    message_headers: tuple[str, ...] = DEFAULT_MESSAGE_HEADERS
    max_concurrency: int = 8
    page_size: int = _MAX_PAGE_SIZE
    run_timeout_s: float | None = None
    secondary_channel_id: str | None = None
    secondary_message_headers: tuple[str, ...] = DEFAULT_SECONDARY_MESSAGE_HEADERS

    def __post_init__(self) -> None:
        """Reject values the audit cannot run with."""
        if not self.notification_channel_id.strip():
            msg = "notification_channel_id must be non-empty"
            raise ValueError(msg)
        if not self.message_headers:
            msg = "message_headers must contain at least one phrase"
            raise ValueError(msg)
        if self.secondary_channel_id and not self.secondary_message_headers:
            msg = "secondary_message_headers must be set with secondary_channel_id"
            raise ValueError(msg)
        if self.history_lookback < 1 or self.max_concurrency < 1:
            msg = "history_lookback and max_concurrency must be positive"
            raise ValueError(msg)
        if not 1 <= self.page_size <= _MAX_PAGE_SIZE:
            msg = f"page_size must be between 1 and {_MAX_PAGE_SIZE}"
            raise ValueError(msg)

    @staticmethod
    def _parse_int(env_var: str, default: int, *, minimum: int = 1) -> int:
        """Read an integer env var no smaller than ``minimum``."""
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            msg = f"{env_var} must be an integer, got: {raw!r}"
            raise ValueError(msg) from exc
        if value < minimum:
            msg = f"{env_var} must be at least {minimum}, got: {value}"
            raise ValueError(msg)
        return value

    @staticmethod
    def _parse_timeout(env_var: str) -> float | None:
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return None
        try:
            value = float(raw)
        except ValueError as exc:
            msg = f"{env_var} must be a number of seconds, got: {raw!r}"
            raise ValueError(msg) from exc
        if value <= 0:
            msg = f"{env_var} must be positive, got: {value}"
            raise ValueError(msg)
        return value

    @classmethod
    def from_env(cls) -> AuditConfig:
        """Create configuration from environment variables.

        Reads the following environment variables:

        - ``ARCHIVEBOT_NOTIFICATION_CHANNEL_ID``: Required report destination.
        - ``ARCHIVEBOT_IGNORE_PREFIXES``: Comma-separated name prefixes.
        - ``ARCHIVEBOT_STALE_AFTER_DAYS``: Staleness threshold in days.
        - ``ARCHIVEBOT_SMALL_CHANNEL_THRESHOLD``: Small-channel member bound.
        - ``ARCHIVEBOT_HISTORY_LOOKBACK``: Messages scanned per channel.
        - ``ARCHIVEBOT_MESSAGE_HEADERS``: ``|``-separated header phrases.
        - ``ARCHIVEBOT_MAX_CONCURRENCY``: Concurrent channel inspections.
        - ``ARCHIVEBOT_PAGE_SIZE``: ``conversations.list`` page size.
        - ``ARCHIVEBOT_RUN_TIMEOUT_S``: Optional run deadline in seconds.
        - ``ARCHIVEBOT_SECONDARY_CHANNEL_ID``: Optional pointer destination.
        - ``ARCHIVEBOT_SECONDARY_MESSAGE_HEADERS``: ``|``-separated phrases.

        Returns
        -------
        AuditConfig
            Configuration instance with values from environment or defaults.

        Raises
        ------
        ValueError
            If the notification channel is missing or a numeric variable is
            not a valid integer.

        """
        channel_id = os.environ.get("ARCHIVEBOT_NOTIFICATION_CHANNEL_ID", "").strip()
        if not channel_id:
            msg = "ARCHIVEBOT_NOTIFICATION_CHANNEL_ID is required"
            raise ValueError(msg)

        headers = _split(os.environ.get("ARCHIVEBOT_MESSAGE_HEADERS", ""), "|")
        secondary_headers = _split(
            os.environ.get("ARCHIVEBOT_SECONDARY_MESSAGE_HEADERS", ""), "|"
        )
        secondary_channel_id = (
            os.environ.get("ARCHIVEBOT_SECONDARY_CHANNEL_ID", "").strip() or None
        )

        return cls(
            notification_channel_id=channel_id,
            ignore_prefixes=_split(
                os.environ.get("ARCHIVEBOT_IGNORE_PREFIXES", ""), ","
            ),
            stale_after_seconds=cls._parse_int("ARCHIVEBOT_STALE_AFTER_DAYS", 14)
            * _SECONDS_PER_DAY,
            small_channel_threshold=cls._parse_int(
                "ARCHIVEBOT_SMALL_CHANNEL_THRESHOLD", 3, minimum=0
            ),
            history_lookback=cls._parse_int("ARCHIVEBOT_HISTORY_LOOKBACK", 10),
            message_headers=headers or DEFAULT_MESSAGE_HEADERS,
            max_concurrency=cls._parse_int("ARCHIVEBOT_MAX_CONCURRENCY", 8),
            page_size=cls._parse_int("ARCHIVEBOT_PAGE_SIZE", _MAX_PAGE_SIZE),
            run_timeout_s=cls._parse_timeout("ARCHIVEBOT_RUN_TIMEOUT_S"),
            secondary_channel_id=secondary_channel_id,
            secondary_message_headers=secondary_headers
            or DEFAULT_SECONDARY_MESSAGE_HEADERS,
        )
