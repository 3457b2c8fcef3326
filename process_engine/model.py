"""Typed view of a process definition (stages, sections, elements and rules).

Process JSON is produced by hand, by AI generation or by import, so parsing is
forgiving: fields with the wrong shape fall back to empty defaults instead of
failing. Keys follow the camelCase names used in the JSON files.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from process_engine.defaults import MAX_LOGIC_DEPTH

LEGACY_VISIBILITY_KEY = "visibilityConditions"
LEGACY_REQUIRED_KEY = "requiredConditions"


def _ensure_mapping(value: Any) -> Dict[str, Any]:
    """Return ``value`` if it is a mapping, otherwise an empty dict."""

    return dict(value) if isinstance(value, Mapping) else {}


def _ensure_list(value: Any) -> List[Any]:
    """Return ``value`` if it is a list or tuple, otherwise an empty list."""

    return list(value) if isinstance(value, (list, tuple)) else []


def _clean_text(value: Any) -> str:
    """Return ``value`` converted to a trimmed string."""

    if isinstance(value, str):
        return value.strip()
    if value is None:
        return ""
    return str(value).strip()


def _optional_text(value: Any) -> Optional[str]:
    text = _clean_text(value)
    return text or None


def generate_id(label: str) -> str:
    """Return a camelCase identifier derived from ``label``.

    >>> generate_id("Spouse Name")
    'spouseName'
    """

    lowered = str(label or "").lower()
    camel = re.sub(r"[^a-zA-Z0-9]+(.)", lambda match: match.group(1).upper(), lowered)
    return re.sub(r"[^a-zA-Z0-9]", "", camel)


@dataclass(frozen=True)
class Condition:
    """A single comparison between a field's current value and a literal."""

    target_element_id: str
    operator: str = "equals"
    value: Any = ""
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Condition":
        data = _ensure_mapping(payload)
        value = data.get("value")
        return cls(
            target_element_id=_clean_text(data.get("targetElementId")),
            operator=_clean_text(data.get("operator")) or "equals",
            value="" if value is None else value,
            id=_optional_text(data.get("id")),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "targetElementId": self.target_element_id,
            "operator": self.operator,
            "value": self.value,
        }
        if self.id:
            payload["id"] = self.id
        return payload


@dataclass(frozen=True)
class LogicGroup:
    """A recursive AND/OR combination of conditions and nested groups."""

    id: str = ""
    operator: str = "AND"
    conditions: Tuple[Condition, ...] = ()
    groups: Tuple["LogicGroup", ...] = ()
    # Set when parsing stopped at MAX_LOGIC_DEPTH; such a group never matches.
    truncated: bool = False

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], depth: int = 1) -> "LogicGroup":
        data = _ensure_mapping(payload)
        operator = _clean_text(data.get("operator")).upper() or "AND"
        group_id = _clean_text(data.get("id"))
        if depth > MAX_LOGIC_DEPTH:
            return cls(id=group_id, operator=operator, truncated=True)
        return cls(
            id=group_id,
            operator=operator,
            conditions=tuple(
                Condition.from_dict(item)
                for item in _ensure_list(data.get("conditions"))
                if isinstance(item, Mapping)
            ),
            groups=tuple(
                cls.from_dict(item, depth + 1)
                for item in _ensure_list(data.get("groups"))
                if isinstance(item, Mapping)
            ),
        )

    @classmethod
    def from_conditions(cls, group_id: str, conditions: Any) -> "LogicGroup":
        """Build an ``AND`` group from a legacy flat list of conditions."""

        return cls(
            id=group_id,
            operator="AND",
            conditions=tuple(
                Condition.from_dict(item)
                for item in _ensure_list(conditions)
                if isinstance(item, Mapping)
            ),
        )

    @property
    def is_empty(self) -> bool:
        return not self.conditions and not self.groups

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "operator": self.operator,
            "conditions": [condition.to_dict() for condition in self.conditions],
        }
        if self.groups:
            payload["groups"] = [group.to_dict() for group in self.groups]
        return payload


@dataclass(frozen=True)
class ValidationRule:
    """Format rule attached to an element; ``custom`` is documentation only."""

    type: str = "none"
    custom_description: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ValidationRule":
        data = _ensure_mapping(payload)
        return cls(
            type=_clean_text(data.get("type")) or "none",
            custom_description=_optional_text(data.get("customDescription")),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"type": self.type}
        if self.custom_description:
            payload["customDescription"] = self.custom_description
        return payload


def _logic_attachment(
    data: Mapping[str, Any], key: str, legacy_key: str, group_id: str
) -> Optional[LogicGroup]:
    """Return the group stored under ``key``, falling back to the legacy list."""

    group = data.get(key)
    if isinstance(group, Mapping):
        return LogicGroup.from_dict(group)
    legacy = _ensure_list(data.get(legacy_key))
    if legacy:
        return LogicGroup.from_conditions(group_id, legacy)
    return None


@dataclass(frozen=True)
class ElementDefinition:
    """A form control together with its visibility, required and format rules."""

    id: str
    label: str = ""
    type: str = "text"
    options: Tuple[str, ...] = ()
    description: Optional[str] = None
    default_value: Any = None
    columns: Tuple[Dict[str, Any], ...] = ()
    hidden: bool = False
    visibility: Optional[LogicGroup] = None
    required: bool = False
    required_logic: Optional[LogicGroup] = None
    validation: Optional[ValidationRule] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ElementDefinition":
        data = _ensure_mapping(payload)
        label = _clean_text(data.get("label"))
        element_id = _clean_text(data.get("id")) or generate_id(label)
        validation = data.get("validation")
        return cls(
            id=element_id,
            label=label or element_id,
            type=_clean_text(data.get("type")) or "text",
            options=tuple(str(option) for option in _ensure_list(data.get("options"))),
            description=_optional_text(data.get("description")),
            default_value=data.get("defaultValue"),
            columns=tuple(
                dict(column) for column in _ensure_list(data.get("columns")) if isinstance(column, Mapping)
            ),
            hidden=bool(data.get("hidden")),
            visibility=_logic_attachment(
                data, "visibility", LEGACY_VISIBILITY_KEY, f"{element_id}_visibility"
            ),
            required=bool(data.get("required")),
            required_logic=_logic_attachment(
                data, "requiredLogic", LEGACY_REQUIRED_KEY, f"{element_id}_required"
            ),
            validation=ValidationRule.from_dict(validation) if isinstance(validation, Mapping) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"id": self.id, "label": self.label, "type": self.type}
        if self.options:
            payload["options"] = list(self.options)
        if self.description:
            payload["description"] = self.description
        if self.default_value is not None:
            payload["defaultValue"] = self.default_value
        if self.columns:
            payload["columns"] = [dict(column) for column in self.columns]
        if self.hidden:
            payload["hidden"] = True
        if self.visibility is not None:
            payload["visibility"] = self.visibility.to_dict()
        if self.required:
            payload["required"] = True
        if self.required_logic is not None:
            payload["requiredLogic"] = self.required_logic.to_dict()
        if self.validation is not None:
            payload["validation"] = self.validation.to_dict()
        return payload


@dataclass(frozen=True)
class SectionDefinition:
    """A titled group of elements with its own visibility rule."""

    id: str
    title: str = ""
    description: Optional[str] = None
    layout: str = "1col"
    variant: str = "standard"
    elements: Tuple[ElementDefinition, ...] = ()
    hidden: bool = False
    visibility: Optional[LogicGroup] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "SectionDefinition":
        data = _ensure_mapping(payload)
        title = _clean_text(data.get("title"))
        section_id = _clean_text(data.get("id")) or generate_id(title)
        return cls(
            id=section_id,
            title=title or section_id,
            description=_optional_text(data.get("description")),
            layout=_clean_text(data.get("layout")) or "1col",
            variant=_clean_text(data.get("variant")) or "standard",
            elements=tuple(
                ElementDefinition.from_dict(item)
                for item in _ensure_list(data.get("elements"))
                if isinstance(item, Mapping)
            ),
            hidden=bool(data.get("hidden")),
            visibility=_logic_attachment(
                data, "visibility", LEGACY_VISIBILITY_KEY, f"{section_id}_visibility"
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "layout": self.layout,
            "elements": [element.to_dict() for element in self.elements],
        }
        if self.description:
            payload["description"] = self.description
        if self.variant != "standard":
            payload["variant"] = self.variant
        if self.hidden:
            payload["hidden"] = True
        if self.visibility is not None:
            payload["visibility"] = self.visibility.to_dict()
        return payload


@dataclass(frozen=True)
class SkillRule:
    """Routes a stage to ``required_skill`` when ``logic`` holds."""

    logic: LogicGroup
    required_skill: str

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "SkillRule":
        data = _ensure_mapping(payload)
        return cls(
            logic=LogicGroup.from_dict(_ensure_mapping(data.get("logic"))),
            required_skill=_clean_text(data.get("requiredSkill")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"logic": self.logic.to_dict(), "requiredSkill": self.required_skill}


@dataclass(frozen=True)
class StageDefinition:
    """One navigable step of a process."""

    id: str
    title: str = ""
    sections: Tuple[SectionDefinition, ...] = ()
    default_skill: Optional[str] = None
    skill_logic: Tuple[SkillRule, ...] = ()

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "StageDefinition":
        data = _ensure_mapping(payload)
        title = _clean_text(data.get("title"))
        return cls(
            id=_clean_text(data.get("id")) or generate_id(title),
            title=title,
            sections=tuple(
                SectionDefinition.from_dict(item)
                for item in _ensure_list(data.get("sections"))
                if isinstance(item, Mapping)
            ),
            default_skill=_optional_text(data.get("defaultSkill")),
            skill_logic=tuple(
                SkillRule.from_dict(item)
                for item in _ensure_list(data.get("skillLogic"))
                if isinstance(item, Mapping)
            ),
        )

    def iter_elements(self) -> Iterator[ElementDefinition]:
        for section in self.sections:
            yield from section.elements

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "sections": [section.to_dict() for section in self.sections],
        }
        if self.default_skill:
            payload["defaultSkill"] = self.default_skill
        if self.skill_logic:
            payload["skillLogic"] = [rule.to_dict() for rule in self.skill_logic]
        return payload


@dataclass(frozen=True)
class ProcessDefinition:
    """The full stage -> section -> element tree of a process."""

    id: str
    name: str = ""
    description: str = ""
    stages: Tuple[StageDefinition, ...] = ()

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ProcessDefinition":
        data = _ensure_mapping(payload)
        name = _clean_text(data.get("name"))
        return cls(
            id=_clean_text(data.get("id")) or generate_id(name) or "process",
            name=name or "Untitled process",
            description=_clean_text(data.get("description")),
            stages=tuple(
                StageDefinition.from_dict(item)
                for item in _ensure_list(data.get("stages"))
                if isinstance(item, Mapping)
            ),
        )

    def iter_elements(self) -> Iterator[ElementDefinition]:
        for stage in self.stages:
            yield from stage.iter_elements()

    def find_element(self, element_id: str) -> Optional[ElementDefinition]:
        return next((element for element in self.iter_elements() if element.id == element_id), None)

    def element_labels(self) -> Dict[str, str]:
        """Return ``element id -> label`` for every element in the process."""

        return {element.id: element.label for element in self.iter_elements()}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "stages": [stage.to_dict() for stage in self.stages],
        }


def parse_process(payload: Mapping[str, Any]) -> ProcessDefinition:
    """Return a :class:`ProcessDefinition` built from raw process JSON."""

    return ProcessDefinition.from_dict(payload)


def coerce_condition(value: Any) -> Condition:
    if isinstance(value, Condition):
        return value
    return Condition.from_dict(_ensure_mapping(value))


def coerce_group(value: Any) -> Optional[LogicGroup]:
    """Return ``value`` as a group; ``None`` and non-mappings mean no group."""

    if value is None or isinstance(value, LogicGroup):
        return value
    if isinstance(value, Mapping):
        return LogicGroup.from_dict(value)
    return None


def coerce_element(value: Any) -> ElementDefinition:
    if isinstance(value, ElementDefinition):
        return value
    return ElementDefinition.from_dict(_ensure_mapping(value))


def coerce_section(value: Any) -> SectionDefinition:
    if isinstance(value, SectionDefinition):
        return value
    return SectionDefinition.from_dict(_ensure_mapping(value))


def coerce_stage(value: Any) -> StageDefinition:
    if isinstance(value, StageDefinition):
        return value
    return StageDefinition.from_dict(_ensure_mapping(value))


__all__ = [
    "Condition",
    "ElementDefinition",
    "LogicGroup",
    "ProcessDefinition",
    "SectionDefinition",
    "SkillRule",
    "StageDefinition",
    "ValidationRule",
    "coerce_condition",
    "coerce_element",
    "coerce_group",
    "coerce_section",
    "coerce_stage",
    "generate_id",
    "parse_process",
]
