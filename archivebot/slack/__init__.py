"""Slack Web API client, response models and error taxonomy."""

from __future__ import annotations

from .client import SlackClientConfig, SlackWebClient, SlackWorkspaceClient
from .errors import (
    MalformedTimestampError,
    SlackAPIError,
    SlackConfigError,
    SlackError,
    SlackErrorCode,
    SlackResponseShapeError,
    SlackTransportError,
)
from .models import IGNORED_SUBTYPES, AuthIdentity, Channel, ChannelPage, Message

__all__ = [
    "IGNORED_SUBTYPES",
    "AuthIdentity",
    "Channel",
    "ChannelPage",
    "MalformedTimestampError",
    "Message",
    "SlackAPIError",
    "SlackClientConfig",
    "SlackConfigError",
    "SlackError",
    "SlackErrorCode",
    "SlackResponseShapeError",
    "SlackTransportError",
    "SlackWebClient",
    "SlackWorkspaceClient",
]
