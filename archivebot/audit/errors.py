"""Errors that abort a whole audit run."""

from __future__ import annotations


class AuditAbortedError(RuntimeError):
    """Raised when a run must stop without posting anything."""

    @classmethod
    def enumeration_failed(cls, cause: BaseException) -> AuditAbortedError:
        """Return an error for a failed first ``conversations.list`` page."""
        return cls(f"Unable to list channels: {cause}")

    @classmethod
    def authentication_failed(cls, cause: BaseException) -> AuditAbortedError:
        """Return an error for a rejected bot token."""
        return cls(f"Slack rejected the bot token: {cause}")

    @classmethod
    def deadline_exceeded(cls, timeout_s: float) -> AuditAbortedError:
        """Return an error for a run that outlived its deadline."""
        return cls(f"Audit run exceeded its {timeout_s:g}s deadline")
