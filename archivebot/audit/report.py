"""Slack mrkdwn rendering of audit verdicts.

Usage
-----
>>> text = build_report(verdicts, config, choose=lambda headers: headers[0])
>>> if text:
...     await client.post_message(config.notification_channel_id, text)

"""

from __future__ import annotations

import collections.abc as cabc
import datetime as dt
import random
import typing as typ

if typ.TYPE_CHECKING:
    from .classifier import ChannelVerdict
    from .config import AuditConfig

type HeaderChooser = cabc.Callable[[cabc.Sequence[str]], str]

_PRIVATE_CLAUSE = "The channel is private, so I can't read the latest message."
_NO_MESSAGES_CLAUSE = "No recent messages."


def format_slack_date(timestamp: int) -> str:
    """Return a Slack date token that falls back to a UTC date.

    Examples
    --------
    >>> format_slack_date(1690000000)
    '<!date^1690000000^{date_short}|Jul 22, 2023 UTC>'

    """
    moment = dt.datetime.fromtimestamp(timestamp, tz=dt.UTC)
    fallback = moment.strftime("%b %d, %Y UTC")
    return f"<!date^{timestamp}^{{date_short}}|{fallback}>"


def _emphasise(text: str, *, when: bool) -> str:
    return f"_{text}_" if when else text


def _activity_clause(verdict: ChannelVerdict) -> str:
    """Describe the latest activity of a reportable channel."""
    if not verdict.has_activity:
        return _PRIVATE_CLAUSE if verdict.is_private else _NO_MESSAGES_CLAUSE

    date = format_slack_date(verdict.last_relevant_timestamp)
    if not verdict.last_message_relevant:
        clause = f"The last event was on {date}, but there are no recent messages."
    else:
        clause = f"The last message was on {date}."
    return _emphasise(clause, when=verdict.is_stale)


def render_verdict_line(verdict: ChannelVerdict) -> str:
    """Render one bullet line for a reportable channel."""
    members = str(verdict.effective_member_count)
    if verdict.is_small:
        members = f"*{members}*"
    return f"* <#{verdict.id}> has {members} members. {_activity_clause(verdict)}"


def build_report(
    verdicts: cabc.Iterable[ChannelVerdict],
    config: AuditConfig,
    *,
    choose: HeaderChooser = random.choice,
) -> str:
    """Render reportable verdicts as a single Slack message.

    Parameters
    ----------
    verdicts
        Verdicts in the order they should appear.
    config
        Audit configuration supplying the header phrases.
    choose
        Picks one header phrase. Defaults to a uniform random choice; tests
        pass a fixed selector.

    Returns
    -------
    str
        The message text, or ``""`` when no channel is reportable. Callers
        must not post an empty report.

    """
    lines = [render_verdict_line(v) for v in verdicts if v.is_reportable]
    if not lines:
        return ""
    header = choose(config.message_headers)
    return "\n".join([header, *lines]) + "\n"


def build_secondary_report(
    config: AuditConfig,
    *,
    choose: HeaderChooser = random.choice,
) -> str:
    """Render the short pointer posted to the secondary channel."""
    header = choose(config.secondary_message_headers)
    return f"{header} See <#{config.notification_channel_id}> for details."
