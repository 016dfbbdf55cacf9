"""Slack Web API client used by the channel audit."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import os
import typing as typ

import httpx
import msgspec

from archivebot.logging import get_logger, log_warning

from .errors import (
    SlackAPIError,
    SlackConfigError,
    SlackResponseShapeError,
    SlackTransportError,
)
from .models import (
    AuthIdentity,
    Channel,
    ChannelPage,
    Message,
    parse_auth_identity,
    parse_channel,
    parse_message,
    parse_next_cursor,
)
from .normalize import coerce_bool

logger = get_logger(__name__)

_HTTP_ERROR_STATUS_THRESHOLD = 400
_CHANNEL_TYPES = "public_channel,private_channel"


class SlackWorkspaceClient(typ.Protocol):
    """The Slack calls the audit depends on."""

    async def auth_test(self) -> AuthIdentity:
        """Return the identity behind the configured token."""
        ...

    async def list_channels_page(self, cursor: str, *, limit: int) -> ChannelPage:
        """Return one page of non-archived public and private channels."""
        ...

    async def get_recent_history(
        self, channel_id: str, *, limit: int
    ) -> list[Message]:
        """Return up to ``limit`` messages, newest first."""
        ...

    async def join_channel(self, channel_id: str) -> None:
        """Join a public channel."""
        ...

    async def post_message(self, channel_id: str, text: str) -> None:
        """Post ``text`` (Slack mrkdwn) to a channel."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class SlackClientConfig:
    """Configuration for the Slack Web API client."""

    token: str
    base_url: str = "https://slack.com/api"
    timeout_s: float = 20.0
    user_agent: str = "archivebot/0.1"

    @classmethod
    def from_env(cls) -> SlackClientConfig:
        """Build configuration using the ``SLACK_BOT_TOKEN`` env var."""
        token = os.environ.get("SLACK_BOT_TOKEN", "").strip()
        if not token:
            raise SlackConfigError.missing_token()
        return cls(token=token)


def parse_envelope(payload_raw: object, *, method: str) -> dict[str, typ.Any]:
    """Unwrap a Slack response envelope.

    Parameters
    ----------
    payload_raw
        Decoded JSON body.
    method
        Web API method name, used in error messages.

    Returns
    -------
    dict[str, Any]
        The payload itself when ``ok`` is truthy.

    Raises
    ------
    SlackResponseShapeError
        If the body is not a JSON object.
    SlackAPIError
        If ``ok`` is false; the ``error`` code is classified against
        :class:`~archivebot.slack.errors.SlackErrorCode`.

    """
    if not isinstance(payload_raw, dict):
        raise SlackResponseShapeError.missing(f"{method}.response")
    payload = typ.cast("dict[str, typ.Any]", payload_raw)
    if coerce_bool(payload.get("ok")):
        return payload
    error = payload.get("error")
    raw_code = error if isinstance(error, str) else ""
    raise SlackAPIError.from_code(raw_code, method=method)


def _parse_records[T](
    payload: dict[str, typ.Any],
    key: str,
    parser: cabc.Callable[[object], T],
    *,
    method: str,
) -> list[T]:
    """Parse a list of records, dropping the ones that fail to normalise."""
    raw_records = payload.get(key)
    if raw_records is None:
        return []
    if not isinstance(raw_records, list):
        raise SlackResponseShapeError.missing(f"{method}.{key}")

    records: list[T] = []
    for index, raw in enumerate(raw_records):
        try:
            records.append(parser(raw))
        except SlackResponseShapeError as exc:
            log_warning(
                logger,
                "Dropping %s record %d from %s: %s",
                key,
                index,
                method,
                exc,
            )
    return records


class SlackWebClient:
    """httpx implementation of :class:`SlackWorkspaceClient`."""

    def __init__(
        self,
        config: SlackClientConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise SlackConfigError.empty_token()

        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={
                "Authorization": f"Bearer {config.token}",
                "User-Agent": config.user_agent,
                "Accept": "application/json",
            },
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def auth_test(self) -> AuthIdentity:
        """Verify the token and return the bot identity."""
        payload = await self._call("auth.test", {})
        return parse_auth_identity(payload)

    async def list_channels_page(self, cursor: str, *, limit: int) -> ChannelPage:
        """Fetch one ``conversations.list`` page."""
        params = {
            "exclude_archived": "true",
            "types": _CHANNEL_TYPES,
            "limit": str(limit),
        }
        if cursor:
            params["cursor"] = cursor
        payload = await self._call("conversations.list", params)
        channels: list[Channel] = _parse_records(
            payload, "channels", parse_channel, method="conversations.list"
        )
        return ChannelPage(
            channels=tuple(channels),
            next_cursor=parse_next_cursor(payload),
        )

    async def get_recent_history(
        self, channel_id: str, *, limit: int
    ) -> list[Message]:
        """Fetch the most recent messages of a channel, newest first."""
        payload = await self._call(
            "conversations.history",
            {"channel": channel_id, "limit": str(limit)},
        )
        return _parse_records(
            payload, "messages", parse_message, method="conversations.history"
        )

    async def join_channel(self, channel_id: str) -> None:
        """Join a public channel."""
        await self._call("conversations.join", {"channel": channel_id})

    async def post_message(self, channel_id: str, text: str) -> None:
        """Post a mrkdwn message to a channel."""
        await self._call(
            "chat.postMessage",
            {"channel": channel_id, "text": text, "mrkdwn": "true"},
        )

    async def _call(self, method: str, params: dict[str, str]) -> dict[str, typ.Any]:
        """POST a form-encoded Web API call and return the unwrapped payload."""
        url = f"{self._config.base_url.rstrip('/')}/{method}"
        try:
            response = await self._client.post(url, data=params)
        except httpx.HTTPError as exc:
            raise SlackTransportError.request_failed(method, str(exc)) from exc
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise SlackAPIError.http_error(response.status_code, method=method)
        try:
            payload_raw = msgspec.json.decode(response.content)
        except msgspec.DecodeError as exc:
            raise SlackResponseShapeError.undecodable(method, str(exc)) from exc
        return parse_envelope(payload_raw, method=method)
