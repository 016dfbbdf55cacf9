"""Paginated enumeration of the workspace channel list."""

from __future__ import annotations

import typing as typ

from archivebot.logging import get_logger, log_debug, log_warning
from archivebot.slack.errors import SlackAPIError, SlackError

from .errors import AuditAbortedError
from .observability import AuditEventLogger

if typ.TYPE_CHECKING:
    from archivebot.slack.client import SlackWorkspaceClient
    from archivebot.slack.models import Channel

logger = get_logger(__name__)


class ChannelEnumerator:
    """Collect every non-archived public and private channel.

    A failed page ends enumeration for the run. When at least one page was
    already fetched the channels gathered so far are returned, so a run that
    loses its tail page still reports on most of the workspace. A failure on
    the first page, or a rejected token on any page, raises
    :class:`AuditAbortedError` instead.
    """

    def __init__(
        self,
        client: SlackWorkspaceClient,
        *,
        page_size: int = 1000,
        event_logger: AuditEventLogger | None = None,
    ) -> None:
        """Bind the enumerator to a Slack client."""
        self._client = client
        self._page_size = page_size
        self._event_logger = event_logger or AuditEventLogger()

    async def list_channels(self) -> list[Channel]:
        """Return all channels, de-duplicated by id (last sighting wins)."""
        channels: dict[str, Channel] = {}
        cursor = ""
        seen_cursors: set[str] = set()
        pages_fetched = 0

        while True:
            try:
                page = await self._client.list_channels_page(
                    cursor, limit=self._page_size
                )
            except SlackError as exc:
                self._on_page_failure(
                    exc,
                    cursor=cursor,
                    pages_fetched=pages_fetched,
                    channels_so_far=len(channels),
                )
                break

            pages_fetched += 1
            for channel in page.channels:
                if channel.is_archived:
                    channels.pop(channel.id, None)
                    continue
                channels[channel.id] = channel

            next_cursor = page.next_cursor
            if not next_cursor:
                break
            if next_cursor in seen_cursors:
                log_warning(
                    logger,
                    "conversations.list repeated cursor %r after %d pages; stopping",
                    next_cursor,
                    pages_fetched,
                )
                break
            seen_cursors.add(next_cursor)
            cursor = next_cursor

        log_debug(
            logger,
            "%d channels found across %d pages",
            len(channels),
            pages_fetched,
        )
        return list(channels.values())

    def _on_page_failure(
        self,
        exc: SlackError,
        *,
        cursor: str,
        pages_fetched: int,
        channels_so_far: int,
    ) -> None:
        if isinstance(exc, SlackAPIError) and exc.is_fatal:
            raise AuditAbortedError.authentication_failed(exc) from exc
        if pages_fetched == 0:
            raise AuditAbortedError.enumeration_failed(exc) from exc
        self._event_logger.log_page_failed(
            cursor=cursor,
            pages_fetched=pages_fetched,
            channels_so_far=channels_so_far,
            error=exc,
        )
