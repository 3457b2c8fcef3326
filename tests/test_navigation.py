"""Tests for the stage navigation gate and skill routing."""

from __future__ import annotations

from typing import Any, Dict

import pytest

from process_engine.defaults import REQUIRED_FIELD_MESSAGE, SKILL_MATCH_REASON
from process_engine.model import parse_process
from process_engine.navigation import (
    SkillResolution,
    advance_stage,
    collect_stage_errors,
    is_missing_answer,
    resolve_stage_skill,
    visible_elements,
    visible_sections,
)

MARRIED = {"targetElementId": "maritalStatus", "operator": "equals", "value": "Married"}

PROCESS = parse_process(
    {
        "id": "proc",
        "name": "Demo",
        "stages": [
            {
                "id": "details",
                "title": "Details",
                "defaultSkill": "Member Services",
                "skillLogic": [
                    {
                        "requiredSkill": "Bereavement Team",
                        "logic": {
                            "id": "widowed",
                            "operator": "AND",
                            "conditions": [
                                {"targetElementId": "maritalStatus", "operator": "equals", "value": "Widowed"}
                            ],
                        },
                    }
                ],
                "sections": [
                    {
                        "id": "personal",
                        "title": "Personal",
                        "elements": [
                            {"id": "intro", "label": "Intro", "type": "static", "required": True},
                            {"id": "maritalStatus", "label": "Marital Status", "type": "select", "required": True},
                            {
                                "id": "spouseName",
                                "label": "Spouse Name",
                                "visibility": {"id": "v", "operator": "AND", "conditions": [MARRIED]},
                                "requiredLogic": {"id": "r", "operator": "AND", "conditions": [MARRIED]},
                            },
                            {"id": "email", "label": "Email", "validation": {"type": "email"}},
                            {"id": "secret", "label": "Secret", "hidden": True, "required": True},
                        ],
                    },
                    {
                        "id": "spouse",
                        "title": "Spouse details",
                        "visibility": {"id": "sv", "operator": "AND", "conditions": [MARRIED]},
                        "elements": [{"id": "spouseDob", "label": "Spouse DOB", "required": True}],
                    },
                ],
            },
            {
                "id": "review",
                "title": "Review",
                "sections": [
                    {
                        "id": "confirm",
                        "title": "Confirm",
                        "elements": [{"id": "nino", "label": "NINO", "required": True, "validation": {"type": "nino_uk"}}],
                    }
                ],
            },
        ],
    }
)
DETAILS, REVIEW = PROCESS.stages


@pytest.mark.parametrize(
    "value,missing",
    [(None, True), ("", True), ([], True), ("x", False), (0, False), (False, False), (["a"], False)],
)
def test_is_missing_answer(value: Any, missing: bool) -> None:
    assert is_missing_answer(value) is missing


def test_visible_sections_and_elements_follow_logic() -> None:
    single: Dict[str, Any] = {"maritalStatus": "Single"}
    married: Dict[str, Any] = {"maritalStatus": "Married"}

    assert [section.id for section in visible_sections(DETAILS, single)] == ["personal"]
    assert [section.id for section in visible_sections(DETAILS, married)] == ["personal", "spouse"]
    assert [element.id for element in visible_elements(DETAILS.sections[0], single)] == [
        "intro",
        "maritalStatus",
        "email",
    ]


def test_required_errors_only_for_visible_elements() -> None:
    errors = collect_stage_errors(DETAILS, {"maritalStatus": "Single"})
    assert errors == {}

    errors = collect_stage_errors(DETAILS, {})
    assert errors == {"maritalStatus": REQUIRED_FIELD_MESSAGE}


def test_hidden_section_children_are_not_checked_until_shown() -> None:
    errors = collect_stage_errors(DETAILS, {"maritalStatus": "Married"})

    assert errors == {
        "spouseName": REQUIRED_FIELD_MESSAGE,
        "spouseDob": REQUIRED_FIELD_MESSAGE,
    }


def test_format_error_reported_for_optional_field() -> None:
    errors = collect_stage_errors(DETAILS, {"maritalStatus": "Single", "email": "nope"})
    assert errors == {"email": "Invalid email format"}


def test_format_error_replaces_required_message() -> None:
    errors = collect_stage_errors(REVIEW, {"nino": "INVALID123"})
    assert errors == {"nino": "Invalid National Insurance Number"}


def test_advance_stage_blocks_then_moves_then_completes() -> None:
    blocked = advance_stage(PROCESS, 0, {})
    assert blocked.blocked
    assert blocked.stage_index == 0
    assert not blocked.completed

    moved = advance_stage(PROCESS, 0, {"maritalStatus": "Single"})
    assert not moved.blocked
    assert moved.stage_index == 1

    finished = advance_stage(PROCESS, 1, {"maritalStatus": "Single", "nino": "AB123456C"})
    assert finished.completed
    assert finished.stage_index == 1


def test_advance_stage_clamps_index_and_handles_empty_process() -> None:
    assert advance_stage(PROCESS, 7, {"nino": "AB123456C"}).completed
    assert advance_stage(parse_process({"id": "empty"}), 0, {}).completed


def test_resolve_stage_skill() -> None:
    assert resolve_stage_skill(DETAILS, {"maritalStatus": "Widowed"}) == SkillResolution(
        "Bereavement Team", SKILL_MATCH_REASON
    )
    assert resolve_stage_skill(DETAILS, {"maritalStatus": "Single"}) == SkillResolution("Member Services")
    assert resolve_stage_skill(REVIEW, {}) is None


def test_first_matching_skill_rule_wins() -> None:
    always = {"id": "always", "operator": "AND", "conditions": []}
    stage = {
        "id": "s",
        "skillLogic": [
            {"requiredSkill": "First", "logic": always},
            {"requiredSkill": "Second", "logic": always},
        ],
    }
    resolution = resolve_stage_skill(stage, {})
    assert resolution is not None
    assert resolution.skill == "First"


@pytest.mark.parametrize("value", [None, "", []])
def test_missing_answer_reports_required_not_format(value: Any) -> None:
    stage = {
        "id": "contact",
        "sections": [
            {
                "id": "details",
                "elements": [{"id": "email", "label": "Email", "required": True, "validation": {"type": "email"}}],
            }
        ],
    }
    assert collect_stage_errors(stage, {"email": value}) == {"email": REQUIRED_FIELD_MESSAGE}
