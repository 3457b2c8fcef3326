"""Format validation for element values.

Validation is independent of required-ness: an empty value always passes here
and is left to the required check. ``custom`` rules only describe a check for
generated documentation and are never enforced.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Pattern, Tuple, Union

from process_engine.coercion import is_blank, parse_date, to_text
from process_engine.model import coerce_element

VALIDATION_TYPES: Tuple[str, ...] = (
    "none",
    "email",
    "phone_uk",
    "nino_uk",
    "date_future",
    "date_past",
    "custom",
)
INFORMATIONAL_TYPES: Tuple[str, ...] = ("custom",)

VALIDATION_PATTERNS: Dict[str, Pattern[str]] = {
    "email": re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$"),
    "phone_uk": re.compile(r"^(\+44|0)\d{9,10}$", re.ASCII),
    "nino_uk": re.compile(
        r"^[A-CEGHJ-PR-TW-Z]{1}[A-CEGHJ-NPR-TW-Z]{1}[0-9]{6}[A-D]{1}$", re.IGNORECASE
    ),
}

# HMRC publishes QQ123456C as the specimen number; QQ is otherwise never issued.
NINO_SPECIMEN_PATTERN = re.compile(r"^QQ[0-9]{6}[A-D]$", re.IGNORECASE)

# Types whose input is compared with whitespace removed.
_STRIP_WHITESPACE = {"phone_uk", "nino_uk"}

PATTERN_MESSAGES: Dict[str, str] = {
    "email": "Invalid email format",
    "phone_uk": "Invalid UK phone number",
    "nino_uk": "Invalid National Insurance Number",
}
INVALID_DATE_MESSAGE = "Invalid date"
FUTURE_DATE_MESSAGE = "Date must be in the future"
PAST_DATE_MESSAGE = "Date must be in the past"


@dataclass(frozen=True)
class EnforcedResult:
    """Outcome of a rule that is checked at runtime; ``error`` is ``None`` on success."""

    rule_type: str
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class InformationalResult:
    """A rule that documents an expectation but is not checked at runtime."""

    rule_type: str
    description: str = ""

    @property
    def passed(self) -> bool:
        return True


ValidationResult = Union[EnforcedResult, InformationalResult]


def validation_regex_string(rule_type: str) -> Optional[str]:
    """Return the pattern source behind ``rule_type`` for documentation exports."""

    pattern = VALIDATION_PATTERNS.get(rule_type)
    if pattern is None:
        return None
    flags = "i" if pattern.flags & re.IGNORECASE else ""
    return f"/{pattern.pattern}/{flags}"


def _check_pattern(rule_type: str, text: str) -> Optional[str]:
    if rule_type in _STRIP_WHITESPACE:
        text = re.sub(r"\s", "", text)
    if VALIDATION_PATTERNS[rule_type].fullmatch(text):
        return None
    if rule_type == "nino_uk" and NINO_SPECIMEN_PATTERN.fullmatch(text):
        return None
    return PATTERN_MESSAGES[rule_type]


def _check_date(rule_type: str, text: str) -> Optional[str]:
    moment = parse_date(text)
    if moment is None:
        return INVALID_DATE_MESSAGE
    now = datetime.now(timezone.utc)
    if rule_type == "date_future":
        return None if moment > now else FUTURE_DATE_MESSAGE
    return None if moment < now else PAST_DATE_MESSAGE


def check_value(element: Any, value: Any) -> ValidationResult:
    """Return the typed validation outcome for ``value`` under ``element``'s rule."""

    definition = coerce_element(element)
    rule = definition.validation
    if rule is None or rule.type == "none":
        return EnforcedResult("none")
    if rule.type in INFORMATIONAL_TYPES:
        return InformationalResult(rule.type, rule.custom_description or "")
    if is_blank(value):
        return EnforcedResult(rule.type)

    text = to_text(value)
    if rule.type in VALIDATION_PATTERNS:
        return EnforcedResult(rule.type, _check_pattern(rule.type, text))
    if rule.type in {"date_future", "date_past"}:
        return EnforcedResult(rule.type, _check_date(rule.type, text))
    return EnforcedResult(rule.type)


def validate_value(element: Any, value: Any) -> Optional[str]:
    """Return an error message for ``value``, or ``None`` when it is acceptable."""

    result = check_value(element, value)
    if isinstance(result, EnforcedResult):
        return result.error
    return None


__all__ = [
    "EnforcedResult",
    "INFORMATIONAL_TYPES",
    "InformationalResult",
    "VALIDATION_PATTERNS",
    "VALIDATION_TYPES",
    "ValidationResult",
    "check_value",
    "validate_value",
    "validation_regex_string",
]
