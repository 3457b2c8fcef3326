"""Stage navigation gate and operational skill routing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from process_engine.defaults import REQUIRED_FIELD_MESSAGE, SKILL_MATCH_REASON
from process_engine.logic import (
    FormState,
    evaluate_logic_group,
    is_element_required,
    is_element_visible,
    is_section_visible,
)
from process_engine.model import (
    ElementDefinition,
    ProcessDefinition,
    SectionDefinition,
    coerce_section,
    coerce_stage,
)
from process_engine.validation import validate_value

# Element types that display content and never hold an answer.
VALUELESS_ELEMENT_TYPES = {"static"}


@dataclass(frozen=True)
class StageAdvance:
    """Result of trying to leave a stage."""

    stage_index: int
    errors: Dict[str, str] = field(default_factory=dict)
    completed: bool = False

    @property
    def blocked(self) -> bool:
        return bool(self.errors)


@dataclass(frozen=True)
class SkillResolution:
    """Skill required to work a stage and why it was chosen."""

    skill: str
    reason: str = ""


def is_missing_answer(value: Any) -> bool:
    """Return ``True`` when ``value`` does not satisfy a required element."""

    if value is None or value == "":
        return True
    return isinstance(value, (list, tuple)) and not value


def visible_sections(stage: Any, form_state: FormState) -> List[SectionDefinition]:
    return [section for section in coerce_stage(stage).sections if is_section_visible(section, form_state)]


def visible_elements(section: Any, form_state: FormState) -> List[ElementDefinition]:
    return [element for element in coerce_section(section).elements if is_element_visible(element, form_state)]


def collect_stage_errors(stage: Any, form_state: FormState) -> Dict[str, str]:
    """Return ``element id -> message`` for every problem blocking ``stage``.

    Only visible elements inside visible sections are checked. A format error
    replaces the required message for the same element.
    """

    errors: Dict[str, str] = {}
    for section in visible_sections(stage, form_state):
        for element in visible_elements(section, form_state):
            if element.type in VALUELESS_ELEMENT_TYPES:
                continue
            value = form_state.get(element.id)
            if is_missing_answer(value):
                if is_element_required(element, form_state):
                    errors[element.id] = REQUIRED_FIELD_MESSAGE
                continue
            message = validate_value(element, value)
            if message:
                errors[element.id] = message
    return errors


def advance_stage(process: ProcessDefinition, stage_index: int, form_state: FormState) -> StageAdvance:
    """Try to move past ``stage_index``.

    Stays on the stage with the collected errors when anything blocks it,
    otherwise moves to the next stage or reports completion on the last one.
    """

    if not process.stages:
        return StageAdvance(stage_index=0, completed=True)

    index = min(max(stage_index, 0), len(process.stages) - 1)
    errors = collect_stage_errors(process.stages[index], form_state)
    if errors:
        return StageAdvance(stage_index=index, errors=errors)
    if index < len(process.stages) - 1:
        return StageAdvance(stage_index=index + 1)
    return StageAdvance(stage_index=index, completed=True)


def resolve_stage_skill(stage: Any, form_state: FormState) -> Optional[SkillResolution]:
    """Return the skill needed for ``stage``; the first matching rule wins."""

    definition = coerce_stage(stage)
    for rule in definition.skill_logic:
        if rule.required_skill and evaluate_logic_group(rule.logic, form_state):
            return SkillResolution(rule.required_skill, SKILL_MATCH_REASON)
    if definition.default_skill:
        return SkillResolution(definition.default_skill)
    return None


__all__ = [
    "SkillResolution",
    "StageAdvance",
    "advance_stage",
    "collect_stage_errors",
    "is_missing_answer",
    "resolve_stage_skill",
    "visible_elements",
    "visible_sections",
]
