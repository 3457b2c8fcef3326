"""Evaluate conditional logic against the current form state.

Everything here is a pure function of a process definition and a read-only
``form_state`` mapping (element id -> value). Nothing is cached between calls
and nothing raises: a missing field reads as ``None`` and an unusable value
makes the comparison false.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any, Iterator, List, Optional

from process_engine.coercion import is_blank, parse_date, to_number, to_text
from process_engine.defaults import MAX_LOGIC_DEPTH
from process_engine.model import (
    Condition,
    LogicGroup,
    ProcessDefinition,
    coerce_condition,
    coerce_element,
    coerce_group,
    coerce_section,
)

logger = logging.getLogger(__name__)

FormState = Mapping[str, Any]


def _eval_list_condition(operator: str, items: List[Any], expected: Any) -> bool:
    """Evaluate ``operator`` against a multi-value answer."""

    target = to_text(expected).strip()
    texts = [to_text(item) for item in items]

    if operator == "contains":
        return target in texts
    if operator == "isEmpty":
        return not items
    if operator == "isNotEmpty":
        return bool(items)
    if operator == "equals":
        return len(texts) == 1 and texts[0] == target
    if operator == "notEquals":
        return target not in texts
    return False


def _eval_date_window(value: Any, days: Any, *, past: bool) -> bool:
    """Return whether ``value`` falls within ``days`` before or after now."""

    moment = parse_date(value)
    window = to_number(days)
    if moment is None or math.isnan(window) or window < 0:
        return False

    now = datetime.now(timezone.utc)
    try:
        span = timedelta(days=window)
        lower, upper = (now - span, now) if past else (now, now + span)
    except OverflowError:
        return moment <= now if past else moment >= now
    return lower <= moment <= upper


def evaluate_condition(condition: Any, form_state: FormState) -> bool:
    """Evaluate a single condition against the current answers."""

    clause = coerce_condition(condition)
    operator = clause.operator
    expected = clause.value
    value = form_state.get(clause.target_element_id) if isinstance(form_state, Mapping) else None

    if isinstance(value, (list, tuple)):
        return _eval_list_condition(operator, list(value), expected)

    if operator == "equals":
        return to_text(value).strip() == to_text(expected).strip()
    if operator == "notEquals":
        return to_text(value).strip() != to_text(expected).strip()
    if operator == "contains":
        return to_text(expected).strip() in to_text(value).strip()
    if operator == "greaterThan":
        return to_number(value) > to_number(expected)
    if operator == "lessThan":
        return to_number(value) < to_number(expected)
    if operator == "isEmpty":
        return is_blank(value)
    if operator == "isNotEmpty":
        return not is_blank(value)
    if operator == "dateInLast":
        return _eval_date_window(value, expected, past=True)
    if operator == "dateInNext":
        return _eval_date_window(value, expected, past=False)

    logger.debug("Unsupported condition operator %r on %r", operator, clause.target_element_id)
    return False


def _eval_group(group: LogicGroup, form_state: FormState, depth: int) -> bool:
    if group.truncated or depth > MAX_LOGIC_DEPTH:
        logger.warning("Logic group %r exceeds the maximum depth of %d", group.id, MAX_LOGIC_DEPTH)
        return False
    if group.is_empty:
        return True

    results = [evaluate_condition(condition, form_state) for condition in group.conditions]
    results.extend(_eval_group(subgroup, form_state, depth + 1) for subgroup in group.groups)

    if group.operator == "AND":
        return all(results)
    return any(results)


def evaluate_logic_group(group: Any, form_state: FormState) -> bool:
    """Evaluate a rule tree; an absent or empty group is always satisfied."""

    rule = coerce_group(group)
    if rule is None:
        return True
    return _eval_group(rule, form_state, 1)


def is_element_visible(element: Any, form_state: FormState) -> bool:
    """Determine whether an element should be displayed."""

    definition = coerce_element(element)
    if definition.hidden:
        return False
    if definition.visibility is None:
        return True
    return evaluate_logic_group(definition.visibility, form_state)


def is_section_visible(section: Any, form_state: FormState) -> bool:
    """Determine whether a section should be displayed.

    Child elements are not hidden along with the section; callers skip them.
    """

    definition = coerce_section(section)
    if definition.hidden:
        return False
    if definition.visibility is None:
        return True
    return evaluate_logic_group(definition.visibility, form_state)


def is_element_required(element: Any, form_state: FormState) -> bool:
    """Return ``True`` if the element must be answered in the current state."""

    definition = coerce_element(element)
    if definition.required:
        return True
    if definition.required_logic is None:
        return False
    return evaluate_logic_group(definition.required_logic, form_state)


def iter_conditions(group: Optional[LogicGroup]) -> Iterator[Condition]:
    """Yield every condition in ``group`` depth first."""

    if group is None:
        return
    yield from group.conditions
    for subgroup in group.groups:
        yield from iter_conditions(subgroup)


def referenced_element_ids(group: Optional[LogicGroup]) -> List[str]:
    """Return the distinct element ids referenced by ``group`` in first-seen order."""

    seen: List[str] = []
    for condition in iter_conditions(group):
        if condition.target_element_id not in seen:
            seen.append(condition.target_element_id)
    return seen


def dangling_references(process: ProcessDefinition) -> List[tuple[str, str]]:
    """Return ``(owner id, missing target id)`` pairs for conditions on unknown fields."""

    known = {element.id for element in process.iter_elements()}
    owners: List[tuple[str, Optional[LogicGroup]]] = []
    for stage in process.stages:
        owners.extend((stage.id, rule.logic) for rule in stage.skill_logic)
        for section in stage.sections:
            owners.append((section.id, section.visibility))
            for element in section.elements:
                owners.append((element.id, element.visibility))
                owners.append((element.id, element.required_logic))

    missing: List[tuple[str, str]] = []
    for owner_id, group in owners:
        for target in referenced_element_ids(group):
            if target not in known and (owner_id, target) not in missing:
                missing.append((owner_id, target))
    return missing


__all__ = [
    "FormState",
    "dangling_references",
    "evaluate_condition",
    "evaluate_logic_group",
    "is_element_required",
    "is_element_visible",
    "is_section_visible",
    "iter_conditions",
    "referenced_element_ids",
]
