"""Per-channel membership handling and last-message lookup."""

from __future__ import annotations

import dataclasses
import typing as typ

from archivebot.slack.errors import SlackAPIError, SlackError

from .observability import AuditEventLogger

if typ.TYPE_CHECKING:
    from archivebot.slack.client import SlackWorkspaceClient
    from archivebot.slack.models import Channel, Message

    from .config import AuditConfig


def is_ignored_channel(name: str, prefixes: typ.Sequence[str]) -> bool:
    """Return True when ``name`` starts with any configured prefix."""
    return any(name.startswith(prefix) for prefix in prefixes)


def select_last_message(messages: typ.Sequence[Message]) -> Message | None:
    """Pick the message that represents a channel's latest activity.

    ``messages`` is ordered newest first. The newest relevant message with a
    timestamp wins; when none qualifies the newest message overall is
    returned so a channel with only housekeeping events still shows when it
    last changed. An empty history yields ``None``.
    """
    for message in messages:
        if message.is_relevant and message.timestamp is not None:
            return message
    return messages[0] if messages else None


@dataclasses.dataclass(frozen=True, slots=True)
class Inspection:
    """Outcome of inspecting one channel."""

    is_member: bool
    last_message: Message | None = None


class ActivityInspector:
    """Join channels where needed and fetch their latest activity."""

    def __init__(
        self,
        client: SlackWorkspaceClient,
        *,
        config: AuditConfig,
        event_logger: AuditEventLogger | None = None,
    ) -> None:
        """Bind the inspector to a Slack client and audit thresholds."""
        self._client = client
        self._config = config
        self._event_logger = event_logger or AuditEventLogger()

    async def inspect(self, channel: Channel) -> Inspection:
        """Return effective membership and the latest message of ``channel``.

        Raises
        ------
        SlackAPIError
            Only for fatal (authentication) failures; every other Slack
            failure degrades to "no data" for this channel.

        """
        if is_ignored_channel(channel.name, self._config.ignore_prefixes):
            self._event_logger.log_channel_skipped(channel, "ignored_prefix")
            return Inspection(is_member=channel.is_member)

        is_member = await self._ensure_member(channel)
        if not is_member:
            self._event_logger.log_channel_skipped(channel, "not_a_member")
            return Inspection(is_member=False)

        return Inspection(
            is_member=True,
            last_message=await self._last_message(channel),
        )

    async def _ensure_member(self, channel: Channel) -> bool:
        if channel.is_member or channel.is_private:
            return channel.is_member
        try:
            await self._client.join_channel(channel.id)
        except SlackError as exc:
            _reraise_if_fatal(exc)
            self._event_logger.log_join_failed(channel, exc)
            return channel.is_member
        self._event_logger.log_channel_joined(channel)
        return True

    async def _last_message(self, channel: Channel) -> Message | None:
        try:
            history = await self._client.get_recent_history(
                channel.id, limit=self._config.history_lookback
            )
        except SlackError as exc:
            _reraise_if_fatal(exc)
            self._event_logger.log_history_failed(channel, exc)
            return None
        return select_last_message(history)


def _reraise_if_fatal(exc: SlackError) -> None:
    if isinstance(exc, SlackAPIError) and exc.is_fatal:
        raise exc
