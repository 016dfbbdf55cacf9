"""Orchestration of a single channel audit run.

A run verifies the bot token, enumerates channels, inspects and classifies
them through a bounded worker pool, then posts one report. Nothing is posted
when the run aborts.

Usage
-----
>>> service = AuditService(client, AuditConfig.from_env())
>>> result = await service.run()
>>> result.posted
True

"""

from __future__ import annotations

import asyncio
import dataclasses
import datetime as dt
import random
import time
import typing as typ

from archivebot.logging import get_logger, log_debug, log_info
from archivebot.slack.errors import SlackAPIError, SlackError

from .classifier import ChannelVerdict, classify
from .enumerator import ChannelEnumerator
from .errors import AuditAbortedError
from .inspector import ActivityInspector
from .observability import AuditEventLogger
from .report import build_report, build_secondary_report

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from archivebot.slack.client import SlackWorkspaceClient
    from archivebot.slack.models import Channel

    from .config import AuditConfig
    from .report import HeaderChooser

logger = get_logger(__name__)


def _epoch_seconds() -> int:
    return int(time.time())


@dataclasses.dataclass(frozen=True, slots=True)
class AuditResult:
    """Outcome of a completed audit run.

    Attributes
    ----------
    verdicts
        One verdict per enumerated channel, in enumeration order.
    report
        Rendered report text; empty when nothing was reportable.
    posted
        Whether the report reached the notification channel.

    """

    verdicts: tuple[ChannelVerdict, ...]
    report: str
    posted: bool

    @property
    def reportable(self) -> tuple[ChannelVerdict, ...]:
        """Return the verdicts that appear in the report."""
        return tuple(v for v in self.verdicts if v.is_reportable)


class _InspectionSkippedError(Exception):
    """Raised by inspections that start after the token was rejected."""


def _first_fatal_error(
    failures: BaseExceptionGroup[BaseException],
) -> SlackAPIError | None:
    """Return the first rejected-token error in a failed inspection batch.

    The inspector already degrades recoverable Slack failures, so a batch
    without a fatal error failed on a defect and is re-raised unchanged.
    """
    fatal, _ = failures.split(
        lambda exc: isinstance(exc, SlackAPIError) and exc.is_fatal
    )
    if fatal is None:
        return None
    first = fatal.exceptions[0]
    return first if isinstance(first, SlackAPIError) else None


class AuditService:
    """Run one audit of the workspace channel list."""

    def __init__(  # noqa: PLR0913
        self,
        client: SlackWorkspaceClient,
        config: AuditConfig,
        *,
        event_logger: AuditEventLogger | None = None,
        choose: HeaderChooser = random.choice,
        clock: cabc.Callable[[], int] = _epoch_seconds,
    ) -> None:
        """Wire the service to a Slack client.

        Parameters
        ----------
        client
            Slack collaborator used for every upstream call.
        config
            Thresholds and destinations for the run.
        event_logger
            Structured event sink; a default logger is created when omitted.
        choose
            Header selector passed to the report builder.
        clock
            Returns the current time in epoch seconds.

        """
        self._client = client
        self._config = config
        self._event_logger = event_logger or AuditEventLogger()
        self._choose = choose
        self._clock = clock
        self._enumerator = ChannelEnumerator(
            client, page_size=config.page_size, event_logger=self._event_logger
        )
        self._inspector = ActivityInspector(
            client, config=config, event_logger=self._event_logger
        )

    async def run(self, *, dry_run: bool = False) -> AuditResult:
        """Audit the workspace and post the report.

        Parameters
        ----------
        dry_run
            Build the report without posting anything.

        Returns
        -------
        AuditResult
            Verdicts, the rendered report and whether it was posted.

        Raises
        ------
        AuditAbortedError
            If the token is rejected, the first channel page fails or the
            run deadline expires.

        """
        started = time.monotonic()
        self._event_logger.log_run_started(
            notification_channel_id=self._config.notification_channel_id
        )
        try:
            verdicts = await self._collect_verdicts()
        except Exception as exc:
            self._event_logger.log_run_failed(
                error=exc, duration=_elapsed_since(started)
            )
            raise

        report = build_report(verdicts, self._config, choose=self._choose)
        posted = False
        if not report:
            log_info(logger, "No reportable channels; nothing to post")
        elif dry_run:
            log_info(
                logger,
                "Dry run; report for %s not posted",
                self._config.notification_channel_id,
            )
        else:
            posted = await self._post_report(report)

        result = AuditResult(verdicts=tuple(verdicts), report=report, posted=posted)
        self._event_logger.log_run_completed(
            channels_seen=len(result.verdicts),
            reportable=len(result.reportable),
            posted=posted,
            duration=_elapsed_since(started),
        )
        return result

    async def _collect_verdicts(self) -> list[ChannelVerdict]:
        deadline = asyncio.timeout(self._config.run_timeout_s)
        try:
            async with deadline:
                await self._verify_token()
                channels = await self._enumerator.list_channels()
                return await self._inspect_all(channels)
        except TimeoutError as exc:
            if self._config.run_timeout_s is not None and deadline.expired():
                raise AuditAbortedError.deadline_exceeded(
                    self._config.run_timeout_s
                ) from exc
            raise

    async def _verify_token(self) -> None:
        try:
            identity = await self._client.auth_test()
        except SlackError as exc:
            raise AuditAbortedError.authentication_failed(exc) from exc
        log_debug(
            logger,
            "Authenticated as %s (%s) in team %s",
            identity.user,
            identity.user_id,
            identity.team,
        )

    async def _inspect_all(self, channels: list[Channel]) -> list[ChannelVerdict]:
        semaphore = asyncio.Semaphore(self._config.max_concurrency)
        token_rejected = asyncio.Event()
        now = self._clock()

        async def bounded_verdict(channel: Channel) -> ChannelVerdict:
            async with semaphore:
                if token_rejected.is_set():
                    raise _InspectionSkippedError(channel.id)
                try:
                    inspection = await self._inspector.inspect(channel)
                except SlackAPIError as exc:
                    if exc.is_fatal:
                        token_rejected.set()
                    raise
            return classify(
                channel,
                inspection.is_member,
                inspection.last_message,
                self._config,
                now=now,
            )

        # The first failure cancels every pending inspection.
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [
                    group.create_task(bounded_verdict(channel)) for channel in channels
                ]
        except BaseExceptionGroup as failures:
            fatal = _first_fatal_error(failures)
            if fatal is None:
                raise
            raise AuditAbortedError.authentication_failed(fatal) from fatal
        return [task.result() for task in tasks]

    async def _post_report(self, report: str) -> bool:
        channel_id = self._config.notification_channel_id
        if not await self._post(channel_id, report, lines=report.count("\n") - 1):
            return False

        secondary_id = self._config.secondary_channel_id
        if secondary_id:
            pointer = build_secondary_report(self._config, choose=self._choose)
            await self._post(secondary_id, pointer, lines=1)
        return True

    async def _post(self, channel_id: str, text: str, *, lines: int) -> bool:
        try:
            await self._client.post_message(channel_id, text)
        except SlackError as exc:
            self._event_logger.log_post_failed(channel_id=channel_id, error=exc)
            return False
        self._event_logger.log_report_posted(channel_id=channel_id, lines=lines)
        return True


def _elapsed_since(started: float) -> dt.timedelta:
    return dt.timedelta(seconds=time.monotonic() - started)
