"""Slack Web API errors and the named error-code taxonomy.

Slack reports failures inside a ``{"ok": false, "error": "<code>"}``
envelope. The codes the audit cares about are collected in
:class:`SlackErrorCode`; each member carries the operator-facing description
that is written to the logs. Unrecognised codes map to
:attr:`SlackErrorCode.UNKNOWN` and keep the raw code on the exception.
"""

from __future__ import annotations

import enum
import typing as typ

_HTTP_RATE_LIMITED = 429


class SlackErrorCode(enum.StrEnum):
    """Named ``error`` codes returned by the Slack Web API."""

    INVALID_AUTH = "invalid_auth"
    ACCESS_DENIED = "access_denied"
    AUTH_TIMEOUT = "auth_timeout_error"
    AUTH_VERIFICATION = "auth_verification_error"
    CHANNEL_NOT_FOUND = "channel_not_found"
    NOT_IN_CHANNEL = "not_in_channel"
    IS_ARCHIVED = "is_archived"
    INVALID_SCOPES = "invalid_scopes"
    COMMENT_REQUIRED = "comment_required"
    RATE_LIMITED = "ratelimited"
    INVALID_CURSOR = "invalid_cursor"
    INVALID_LIMIT = "invalid_limit"
    INVALID_TYPE = "invalid_types"
    FATAL = "fatal_error"
    INTERNAL = "internal_error"
    UNKNOWN = "unknown"

    @property
    def description(self) -> str:
        """Return the human-readable description used in operator logs."""
        return _DESCRIPTIONS.get(self, "")

    @classmethod
    def from_code(cls, code: str) -> SlackErrorCode:
        """Classify a raw ``error`` string, falling back to ``UNKNOWN``."""
        alias = _ALIASES.get(code)
        if alias is not None:
            return alias
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN


_ALIASES: typ.Final[dict[str, SlackErrorCode]] = {
    "rate_limited": SlackErrorCode.RATE_LIMITED,
}

_DESCRIPTIONS: typ.Final[dict[SlackErrorCode, str]] = {
    SlackErrorCode.INVALID_AUTH: "Invalid authentication token.",
    SlackErrorCode.ACCESS_DENIED: (
        "You don't have permissions to create Slack-hosted apps or access the "
        "specified resource."
    ),
    SlackErrorCode.AUTH_TIMEOUT: (
        "Couldn't receive authorization in the time allowed."
    ),
    SlackErrorCode.AUTH_VERIFICATION: "Couldn't verify your authorization.",
    SlackErrorCode.CHANNEL_NOT_FOUND: "Couldn't find the specified Slack channel.",
    SlackErrorCode.NOT_IN_CHANNEL: (
        "Cannot post user messages to a channel they are not in."
    ),
    SlackErrorCode.IS_ARCHIVED: "Channel has been archived.",
    SlackErrorCode.INVALID_SCOPES: "Some of the provided scopes do not exist.",
    SlackErrorCode.COMMENT_REQUIRED: (
        "Your App Manager is requesting a reason to approve installation of "
        "this app."
    ),
    SlackErrorCode.RATE_LIMITED: (
        "Too many calls in succession to create endpoint during a short "
        "period of time."
    ),
    SlackErrorCode.INVALID_CURSOR: (
        "Value passed for `cursor` was not valid or is no longer valid."
    ),
    SlackErrorCode.INVALID_LIMIT: "Value passed for `limit` is not understood.",
    SlackErrorCode.INVALID_TYPE: (
        "Value passed for `type` could not be used based on the method's "
        "capabilities or the permission scopes granted to the used token."
    ),
    SlackErrorCode.FATAL: (
        "The server could not complete your operation(s) without encountering "
        "a catastrophic error."
    ),
    SlackErrorCode.INTERNAL: (
        "The server could not complete your operation(s) without encountering "
        "an error, likely due to a transient issue with Slack."
    ),
}


class SlackError(Exception):
    """Base class for every failure raised by the Slack layer."""


class SlackAPIError(SlackError):
    """Raised when Slack answers with ``ok: false`` or an HTTP error status.

    Attributes
    ----------
    code
        Classified error code.
    raw_code
        The ``error`` string exactly as Slack sent it.
    method
        Web API method that failed, when known.
    status_code
        HTTP status code for transport-level rejections.

    """

    def __init__(
        self,
        code: SlackErrorCode,
        *,
        raw_code: str,
        method: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """Build the message from the code description or the raw code."""
        self.code = code
        self.raw_code = raw_code
        self.method = method
        self.status_code = status_code
        detail = code.description or raw_code or "unknown error"
        prefix = f"{method}: " if method else ""
        super().__init__(f"{prefix}{detail}")

    @property
    def is_fatal(self) -> bool:
        """Return True when every later call would fail the same way."""
        return self.code is SlackErrorCode.INVALID_AUTH

    @classmethod
    def from_code(cls, raw_code: str, *, method: str | None = None) -> SlackAPIError:
        """Return an error for an ``ok: false`` envelope."""
        return cls(SlackErrorCode.from_code(raw_code), raw_code=raw_code, method=method)

    @classmethod
    def http_error(cls, status_code: int, *, method: str) -> SlackAPIError:
        """Return an error for non-2xx HTTP responses."""
        if status_code == _HTTP_RATE_LIMITED:
            return cls(
                SlackErrorCode.RATE_LIMITED,
                raw_code="ratelimited",
                method=method,
                status_code=status_code,
            )
        return cls(
            SlackErrorCode.UNKNOWN,
            raw_code=f"http_{status_code}",
            method=method,
            status_code=status_code,
        )


class SlackTransportError(SlackError):
    """Raised when the Slack API could not be reached at all."""

    @classmethod
    def request_failed(cls, method: str, detail: str) -> SlackTransportError:
        """Return an error for network, DNS, TLS or timeout failures."""
        return cls(f"{method}: request failed: {detail}")


class SlackResponseShapeError(SlackError):
    """Raised when a Slack payload does not match the expected shape."""

    @classmethod
    def missing(cls, field: str) -> SlackResponseShapeError:
        """Return an error for a missing or mistyped field."""
        return cls(f"Slack response missing expected field: {field}")

    @classmethod
    def undecodable(cls, method: str, detail: str) -> SlackResponseShapeError:
        """Return an error for a body that is not valid JSON."""
        return cls(f"{method}: response body is not valid JSON: {detail}")


class MalformedTimestampError(SlackResponseShapeError):
    """Raised when a present timestamp value cannot be normalised."""

    @classmethod
    def for_value(cls, field: str, value: object) -> MalformedTimestampError:
        """Return an error naming the field and the offending value."""
        return cls(f"expected a timestamp for {field} but got: {value!r}")


class SlackConfigError(SlackError):
    """Raised when Slack client configuration is invalid."""

    @classmethod
    def missing_token(cls) -> SlackConfigError:
        """Return an error when no bot token is configured."""
        return cls("SLACK_BOT_TOKEN is required for the Slack Web API")

    @classmethod
    def empty_token(cls) -> SlackConfigError:
        """Return an error when the provided token is blank."""
        return cls("Slack bot token must be non-empty")
