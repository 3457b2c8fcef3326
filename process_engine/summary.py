"""Human-readable summaries of the rules attached to a process.

These helpers read the static definition only; they never evaluate logic.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from process_engine.defaults import ALWAYS_LABEL, UNKNOWN_FIELD_LABEL, VALUELESS_OPERATORS
from process_engine.logic import iter_conditions
from process_engine.model import (
    Condition,
    LogicGroup,
    ProcessDefinition,
    StageDefinition,
    coerce_condition,
    coerce_group,
)
from process_engine.validation import validation_regex_string

OPERATOR_SYMBOLS: Dict[str, str] = {
    "equals": "=",
    "notEquals": "!=",
    "greaterThan": ">",
    "lessThan": "<",
    "contains": "contains",
    "isEmpty": "is empty",
    "isNotEmpty": "is populated",
    "dateInLast": "in last (days)",
    "dateInNext": "in next (days)",
}
RETURN_COLUMN = "Return"
INVENTORY_COLUMNS = (
    "Stage",
    "Section",
    "Field Label",
    "Type",
    "Mandatory",
    "Visibility",
    "Validation",
    "Pattern",
)


def _operator_text(condition: Condition, quote: str = "'") -> str:
    """Return the operator phrase with its operand, e.g. ``= 'Married'``."""

    symbol = OPERATOR_SYMBOLS.get(condition.operator, condition.operator)
    if condition.operator in VALUELESS_OPERATORS:
        return symbol
    return f"{symbol} {quote}{condition.value}{quote}"


def describe_condition(condition: Any, labels: Mapping[str, str]) -> str:
    """Return ``condition`` as text such as ``Marital Status = 'Married'``."""

    clause = coerce_condition(condition)
    label = labels.get(clause.target_element_id, UNKNOWN_FIELD_LABEL)
    return f"{label} {_operator_text(clause)}"


def format_logic_summary(group: Any, labels: Mapping[str, str]) -> str:
    """Return a one-line summary of ``group``; absent or empty groups read ``Always``."""

    rule = coerce_group(group)
    if rule is None or rule.is_empty:
        return ALWAYS_LABEL

    parts = [describe_condition(condition, labels) for condition in rule.conditions]
    for subgroup in rule.groups:
        text = format_logic_summary(subgroup, labels)
        if text != ALWAYS_LABEL:
            parts.append(f"({text})")

    if not parts:
        return ALWAYS_LABEL
    return f" {rule.operator} ".join(parts)


def _mandatory_label(required: bool, required_logic: Optional[LogicGroup]) -> str:
    if required:
        return "Yes"
    if required_logic is not None and not required_logic.is_empty:
        return "Conditional"
    return "No"


def skill_decision_table(stage: StageDefinition, process: ProcessDefinition) -> pd.DataFrame:
    """Flatten a stage's skill rules into a decision table.

    One column per field referenced by any rule plus a ``Return`` column with
    the skill. Several conditions on the same field are joined with ``AND``.
    """

    if not stage.skill_logic:
        return pd.DataFrame(columns=[RETURN_COLUMN])

    labels = process.element_labels()
    field_ids: List[str] = []
    for rule in stage.skill_logic:
        for condition in iter_conditions(rule.logic):
            if condition.target_element_id not in field_ids:
                field_ids.append(condition.target_element_id)

    rows: List[Dict[str, str]] = []
    for rule in stage.skill_logic:
        inputs: Dict[str, str] = {}
        for condition in iter_conditions(rule.logic):
            text = _operator_text(condition, quote='"')
            key = condition.target_element_id
            inputs[key] = f"{inputs[key]} AND {text}" if key in inputs else text
        row = {field_id: inputs.get(field_id, "") for field_id in field_ids}
        row[RETURN_COLUMN] = rule.required_skill
        rows.append(row)

    frame = pd.DataFrame(rows, columns=[*field_ids, RETURN_COLUMN])
    # Two ids can share a label; keep the id visible in that case.
    headers = [labels.get(field_id, UNKNOWN_FIELD_LABEL) for field_id in field_ids]
    frame.columns = [
        header if headers.count(header) == 1 else f"{header} ({field_id})"
        for header, field_id in zip(headers, field_ids)
    ] + [RETURN_COLUMN]
    return frame


def decision_table_tsv(frame: pd.DataFrame) -> str:
    """Return ``frame`` as tab separated text ready to paste into a spreadsheet."""

    return frame.to_csv(sep="\t", index=False, lineterminator="\n").rstrip("\n")


def element_inventory(process: ProcessDefinition) -> pd.DataFrame:
    """Return one row per element describing its rules for documentation exports."""

    labels = process.element_labels()
    records: List[Dict[str, Any]] = []
    for stage in process.stages:
        for section in stage.sections:
            for element in section.elements:
                rule = element.validation
                rule_type = rule.type if rule is not None and rule.type != "none" else ""
                if rule_type == "custom" and rule is not None and rule.custom_description:
                    rule_text = f"custom: {rule.custom_description}"
                else:
                    rule_text = rule_type or "-"
                records.append(
                    {
                        "Stage": stage.title,
                        "Section": section.title,
                        "Field Label": element.label,
                        "Type": element.type,
                        "Mandatory": _mandatory_label(element.required, element.required_logic),
                        "Visibility": "Hidden"
                        if element.hidden
                        else format_logic_summary(element.visibility, labels),
                        "Validation": rule_text,
                        "Pattern": validation_regex_string(rule_type) or "",
                    }
                )
    return pd.DataFrame(records, columns=list(INVENTORY_COLUMNS))


__all__ = [
    "OPERATOR_SYMBOLS",
    "decision_table_tsv",
    "describe_condition",
    "element_inventory",
    "format_logic_summary",
    "skill_decision_table",
]
