"""Loose value coercion used when comparing form values with rule literals.

Rule authors write literals as text in the builder, while form values arrive as
strings, numbers, booleans or lists. Comparisons therefore go through the
permissive conversions below: ``True`` matches ``"true"`` and ``5`` matches
``"5"``. None of these helpers raise.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, time, timezone
from typing import Any, Optional

_DECIMAL_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)
_RADIX_RE = re.compile(r"0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+")
_INFINITY = {"Infinity": math.inf, "+Infinity": math.inf, "-Infinity": -math.inf}


def is_blank(value: Any) -> bool:
    """Return ``True`` for unanswered values (``None`` or an empty string)."""

    return value is None or value == ""


def to_text(value: Any) -> str:
    """Convert ``value`` to the string form used in comparisons."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, tuple)):
        return ",".join(to_text(item) for item in value)
    return str(value)


def to_number(value: Any) -> float:
    """Convert ``value`` to a float, returning NaN when it is not numeric.

    Empty strings count as zero. Booleans compare as ``"true"``/``"false"`` and
    are not numbers. ``None`` is an unanswered field and stays NaN so ordering
    comparisons against it are always false.
    """

    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return math.nan

    text = value.strip()
    if not text:
        return 0.0
    if _DECIMAL_RE.fullmatch(text):
        return float(text)
    if text in _INFINITY:
        return _INFINITY[text]
    if _RADIX_RE.fullmatch(text):
        return float(int(text, 0))
    return math.nan


def parse_date(value: Any) -> Optional[datetime]:
    """Parse ``value`` into an aware datetime, or ``None`` if it is not a date.

    Date-only values are midnight UTC; datetimes without an offset are read as
    local time.
    """

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
        if "T" not in text and " " not in text and len(text) <= 10:
            return parsed.replace(tzinfo=timezone.utc)
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.astimezone()
    return parsed


__all__ = ["is_blank", "parse_date", "to_number", "to_text"]
