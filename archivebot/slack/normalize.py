"""Total normalisers for the loosely typed values Slack returns.

Slack is inconsistent about scalar encodings: booleans arrive as JSON
booleans, numbers or strings, and timestamps as numbers, integer strings or
decimal strings such as ``"1690000000.4321"``. Each helper here accepts every
encoding seen in practice and either returns a normalised Python value or
raises a tagged error. None of them substitute a default for a value that is
present but unparseable.
"""

from __future__ import annotations

import math
import re
import typing as typ

from .errors import MalformedTimestampError, SlackResponseShapeError

_FALSE_STRINGS: typ.Final = frozenset({"", "0", "false", "FALSE"})
_INTEGER_TEXT: typ.Final = re.compile(r"[+-]?\d+")


def coerce_bool(value: object) -> bool:
    """Normalise a Slack boolean.

    ``None``, ``False``, numeric zero and the exact strings ``""``, ``"0"``,
    ``"false"`` and ``"FALSE"`` are false. Strings are compared verbatim, so
    ``"False"`` or ``" 0 "`` are true; every other value is judged by Python
    truthiness.

    Examples
    --------
    >>> coerce_bool("FALSE"), coerce_bool("1"), coerce_bool(None)
    (False, True, False)

    """
    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, int | float):
        return value != 0
    if isinstance(value, str):
        return value not in _FALSE_STRINGS
    return bool(value)


def _timestamp_from_text(text: str, *, field: str) -> int:
    head = text.split(".", 1)[0]
    if not _INTEGER_TEXT.fullmatch(head):
        raise MalformedTimestampError.for_value(field, text)
    return int(head)


def coerce_timestamp(value: object, *, field: str = "ts") -> int | None:
    """Normalise a Slack timestamp to whole seconds since the epoch.

    Parameters
    ----------
    value
        Raw value from the payload. ``None`` means the timestamp is absent,
        which is not an error.
    field
        Field name used in the error message.

    Returns
    -------
    int | None
        Seconds since the epoch, truncated toward the integer part, or
        ``None`` when the value is absent.

    Raises
    ------
    MalformedTimestampError
        If the value is present but is not a number, an integer string or a
        decimal string.

    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise MalformedTimestampError.for_value(field, value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise MalformedTimestampError.for_value(field, value)
        return math.trunc(value)
    if isinstance(value, str):
        return _timestamp_from_text(value, field=field)
    raise MalformedTimestampError.for_value(field, value)


def coerce_count(value: object, *, field: str) -> int:
    """Normalise a non-negative count; an absent count is zero."""
    if value is None:
        return 0
    if isinstance(value, bool):
        raise SlackResponseShapeError.missing(field)
    if isinstance(value, float) and math.isfinite(value):
        value = math.trunc(value)
    elif isinstance(value, str) and _INTEGER_TEXT.fullmatch(value.strip()):
        value = int(value.strip())
    if not isinstance(value, int) or value < 0:
        raise SlackResponseShapeError.missing(field)
    return value


def require_str(raw: typ.Mapping[str, object], key: str, *, record: str) -> str:
    """Return a non-empty string field or raise a shape error."""
    value = raw.get(key)
    if not isinstance(value, str) or not value:
        raise SlackResponseShapeError.missing(f"{record}.{key}")
    return value


def optional_str(raw: typ.Mapping[str, object], key: str) -> str | None:
    """Return a string field, treating any other type as absent."""
    value = raw.get(key)
    return value if isinstance(value, str) else None
