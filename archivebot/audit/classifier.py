"""Turn inspected channels into report verdicts."""

from __future__ import annotations

import dataclasses
import typing as typ

from .inspector import is_ignored_channel

if typ.TYPE_CHECKING:
    from archivebot.slack.models import Channel, Message

    from .config import AuditConfig


@dataclasses.dataclass(frozen=True, slots=True)
class ChannelVerdict:
    """Classification of a single channel for one run.

    Attributes
    ----------
    id
        Channel identifier.
    name
        Channel name at the time of the run.
    last_relevant_timestamp
        Epoch seconds of the selected message, or ``0`` when no message was
        found.
    last_message_relevant
        Whether the selected message counts as conversation. False when only
        housekeeping events were found.
    effective_member_count
        Reported member count, minus the bot when it is a member.
    is_stale
        Whether the last message is older than the staleness threshold.
        Channels without any message are never stale.
    is_small
        Whether the effective member count is at or below the threshold.
    is_ignored
        Whether the channel name matched an ignore prefix.
    is_private
        Whether the channel is private.

    """

    id: str
    name: str
    last_relevant_timestamp: int
    last_message_relevant: bool
    effective_member_count: int
    is_stale: bool
    is_small: bool
    is_ignored: bool
    is_private: bool

    @property
    def has_activity(self) -> bool:
        """Return True when a message timestamp was found."""
        return self.last_relevant_timestamp > 0

    @property
    def is_reportable(self) -> bool:
        """Return True when the channel belongs in the report."""
        return (self.is_stale or self.is_small) and not self.is_ignored


def classify(
    channel: Channel,
    is_member: bool,  # noqa: FBT001
    last_message: Message | None,
    config: AuditConfig,
    *,
    now: int,
) -> ChannelVerdict:
    """Classify ``channel`` from its membership and latest message.

    Parameters
    ----------
    channel
        Channel as listed by Slack.
    is_member
        Effective membership after any join attempt.
    last_message
        Message chosen by the activity inspector, if any.
    config
        Audit thresholds.
    now
        Current time in epoch seconds.

    Returns
    -------
    ChannelVerdict
        Immutable verdict for the report builder.

    """
    timestamp = 0
    relevant = False
    if last_message is not None:
        timestamp = last_message.timestamp or 0
        relevant = last_message.is_relevant

    member_count = channel.member_count - 1 if is_member else channel.member_count
    is_stale = timestamp > 0 and (now - timestamp) > config.stale_after_seconds

    return ChannelVerdict(
        id=channel.id,
        name=channel.name,
        last_relevant_timestamp=timestamp,
        last_message_relevant=relevant,
        effective_member_count=member_count,
        is_stale=is_stale,
        is_small=member_count <= config.small_channel_threshold,
        is_ignored=is_ignored_channel(channel.name, config.ignore_prefixes),
        is_private=channel.is_private,
    )
