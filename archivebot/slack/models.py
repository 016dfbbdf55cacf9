"""Typed Slack entities used by the channel audit."""

from __future__ import annotations

import typing as typ

import msgspec

from .errors import SlackResponseShapeError
from .normalize import (
    coerce_bool,
    coerce_count,
    coerce_timestamp,
    optional_str,
    require_str,
)

# Message subtypes that record housekeeping rather than conversation.
IGNORED_SUBTYPES: typ.Final[frozenset[str]] = frozenset(
    {
        "bot_add",
        "bot_remove",
        "bot_message",
        "message_deleted",
        "message_changed",
        "channel_join",
        "channel_leave",
        "group_join",
        "group_leave",
        "channel_topic",
        "channel_purpose",
        "channel_name",
        "group_topic",
        "group_purpose",
        "group_name",
        "channel_archive",
        "channel_unarchive",
        "group_archive",
        "group_unarchive",
        "pinned_item",
        "unpinned_item",
        "channel_posting_permissions",
    }
)


class Channel(msgspec.Struct, kw_only=True, frozen=True):
    """A conversation listed by ``conversations.list``.

    Attributes
    ----------
    id
        Stable channel identifier (``C...``).
    name
        Current channel name, without the leading ``#``.
    member_count
        Member count reported by Slack (``num_members``).
    is_member
        Whether the bot user is a member.
    is_private
        Whether the channel is private.
    is_archived
        Whether the channel is archived.

    """

    id: str
    name: str = ""
    member_count: int = 0
    is_member: bool = False
    is_private: bool = False
    is_archived: bool = False


class Message(msgspec.Struct, kw_only=True, frozen=True):
    """A single event from ``conversations.history``."""

    event_type: str = ""
    subtype: str | None = None
    timestamp: int | None = None
    text: str | None = None
    user: str | None = None

    @property
    def is_relevant(self) -> bool:
        """Return True for plain messages that count as channel activity."""
        return self.event_type == "message" and self.subtype not in IGNORED_SUBTYPES


class ChannelPage(msgspec.Struct, kw_only=True, frozen=True):
    """One page of ``conversations.list`` results."""

    channels: tuple[Channel, ...] = ()
    next_cursor: str = ""


class AuthIdentity(msgspec.Struct, kw_only=True, frozen=True):
    """Identity of the token owner as reported by ``auth.test``."""

    user_id: str
    user: str | None = None
    team: str | None = None
    team_id: str | None = None
    bot_id: str | None = None


def _require_mapping(raw: object, *, record: str) -> typ.Mapping[str, object]:
    if not isinstance(raw, dict):
        raise SlackResponseShapeError.missing(record)
    return typ.cast("typ.Mapping[str, object]", raw)


def parse_channel(raw: object) -> Channel:
    """Build a :class:`Channel` from a raw conversation object.

    Raises
    ------
    SlackResponseShapeError
        If ``id`` is missing or a field cannot be normalised.

    """
    data = _require_mapping(raw, record="channel")
    return Channel(
        id=require_str(data, "id", record="channel"),
        name=optional_str(data, "name") or "",
        member_count=coerce_count(data.get("num_members"), field="channel.num_members"),
        is_member=coerce_bool(data.get("is_member")),
        is_private=coerce_bool(data.get("is_private")),
        is_archived=coerce_bool(data.get("is_archived")),
    )


def parse_message(raw: object) -> Message:
    """Build a :class:`Message` from a raw history event.

    Raises
    ------
    MalformedTimestampError
        If ``ts`` is present but unparseable.

    """
    data = _require_mapping(raw, record="message")
    return Message(
        event_type=optional_str(data, "type") or "",
        subtype=optional_str(data, "subtype"),
        timestamp=coerce_timestamp(data.get("ts"), field="message.ts"),
        text=optional_str(data, "text"),
        user=optional_str(data, "user"),
    )


def parse_next_cursor(payload: typ.Mapping[str, object]) -> str:
    """Return ``response_metadata.next_cursor`` or ``""`` when absent."""
    metadata = payload.get("response_metadata")
    if not isinstance(metadata, dict):
        return ""
    cursor = metadata.get("next_cursor")
    return cursor.strip() if isinstance(cursor, str) else ""


def parse_auth_identity(payload: typ.Mapping[str, object]) -> AuthIdentity:
    """Build an :class:`AuthIdentity` from an ``auth.test`` payload."""
    return AuthIdentity(
        user_id=require_str(payload, "user_id", record="auth"),
        user=optional_str(payload, "user"),
        team=optional_str(payload, "team"),
        team_id=optional_str(payload, "team_id"),
        bot_id=optional_str(payload, "bot_id"),
    )
