"""Channel audit workflow: enumerate, inspect, classify and report.

Public API
----------
AuditConfig
    Thresholds and destinations for one run, loadable from the environment.
AuditService
    Orchestrates a full run and posts the report.
AuditResult
    Verdicts, report text and post outcome of a completed run.
AuditAbortedError
    Raised when a run stops without posting.
ChannelVerdict
    Per-channel classification consumed by the report builder.
build_report
    Pure function rendering verdicts as a Slack message.

Example:
>>> from archivebot.audit import AuditConfig, AuditService
>>> from archivebot.slack import SlackClientConfig, SlackWebClient
>>>
>>> client = SlackWebClient(SlackClientConfig.from_env())
>>> result = await AuditService(client, AuditConfig.from_env()).run()

"""

from archivebot.audit.classifier import ChannelVerdict, classify
from archivebot.audit.config import AuditConfig
from archivebot.audit.enumerator import ChannelEnumerator
from archivebot.audit.errors import AuditAbortedError
from archivebot.audit.inspector import (
    ActivityInspector,
    Inspection,
    is_ignored_channel,
    select_last_message,
)
from archivebot.audit.observability import (
    AuditEventLogger,
    AuditEventType,
    ErrorCategory,
    categorize_error,
)
from archivebot.audit.report import (
    build_report,
    build_secondary_report,
    format_slack_date,
)
from archivebot.audit.service import AuditResult, AuditService

__all__ = [
    "ActivityInspector",
    "AuditAbortedError",
    "AuditConfig",
    "AuditEventLogger",
    "AuditEventType",
    "AuditResult",
    "AuditService",
    "ChannelEnumerator",
    "ChannelVerdict",
    "ErrorCategory",
    "Inspection",
    "build_report",
    "build_secondary_report",
    "categorize_error",
    "classify",
    "format_slack_date",
    "is_ignored_channel",
    "select_last_message",
]
