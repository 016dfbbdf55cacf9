"""archivebot batch entrypoint.

Runs one channel audit against the Slack workspace behind
``SLACK_BOT_TOKEN`` and posts the report to
``ARCHIVEBOT_NOTIFICATION_CHANNEL_ID``. Intended to be scheduled (cron,
Kubernetes CronJob) rather than kept running.

Configuration is driven by environment variables; see
:meth:`archivebot.audit.AuditConfig.from_env` for the audit options and
``ARCHIVEBOT_LOG_LEVEL`` (default ``INFO``) for verbosity.

Run the audit directly with ``python -m archivebot.runtime`` or the
``archivebot`` console script.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import typing as typ

from archivebot.audit import AuditAbortedError, AuditConfig, AuditService
from archivebot.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_exception,
    log_info,
    log_warning,
)
from archivebot.slack import SlackClientConfig, SlackConfigError, SlackWebClient

if typ.TYPE_CHECKING:
    import httpx

    from archivebot.audit import AuditResult

__all__ = ["main", "run_audit"]

logger = get_logger(__name__)


async def run_audit(
    audit_config: AuditConfig,
    client_config: SlackClientConfig,
    *,
    dry_run: bool = False,
    http_client: httpx.AsyncClient | None = None,
) -> AuditResult:
    """Run one audit with a Web API client that is closed afterwards.

    Parameters
    ----------
    audit_config
        Audit thresholds and destinations.
    client_config
        Slack Web API settings.
    dry_run
        Build the report without posting it.
    http_client
        Optional preconfigured HTTP client, mainly for tests.

    Returns
    -------
    AuditResult
        Outcome of the run.

    """
    client = SlackWebClient(client_config, http_client=http_client)
    try:
        return await AuditService(client, audit_config).run(dry_run=dry_run)
    finally:
        await client.aclose()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="archivebot",
        description="Report stale and small Slack channels.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the report instead of posting it",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: ARCHIVEBOT_LOG_LEVEL or INFO)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run a single audit from the command line.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 when the run completed, 1 when configuration is invalid,
        the run aborted or it failed unexpectedly.

    """
    args = _build_parser().parse_args(argv)

    log_level_str = args.log_level or os.environ.get("ARCHIVEBOT_LOG_LEVEL", "INFO")
    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid log level %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    try:
        audit_config = AuditConfig.from_env()
        client_config = SlackClientConfig.from_env()
    except (SlackConfigError, ValueError) as exc:
        # Configuration errors need no traceback
        log_error(logger, "Invalid configuration: %s", exc)
        return 1

    log_info(
        logger,
        "Starting archivebot audit (dry_run=%s, log_level=%s)",
        args.dry_run,
        normalized_level,
    )
    try:
        result = asyncio.run(
            run_audit(audit_config, client_config, dry_run=args.dry_run)
        )
    except AuditAbortedError as exc:
        log_error(logger, "Audit aborted: %s", exc)
        return 1
    except Exception as exc:  # noqa: BLE001
        log_exception(logger, "Audit failed unexpectedly", exc)
        return 1

    if args.dry_run:
        print(result.report or "No reportable channels.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
