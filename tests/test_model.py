"""Tests for parsing process definitions into the typed model."""

from __future__ import annotations

import importlib
import json
from pathlib import Path

import pytest

from process_engine.defaults import MAX_LOGIC_DEPTH

REPO_ROOT = Path(__file__).resolve().parents[1]
SAMPLE_PROCESS = REPO_ROOT / "processes" / "pension_transfer" / "process.json"

model = importlib.import_module("process_engine.model")


@pytest.mark.parametrize(
    "label,expected",
    [
        ("Spouse Name", "spouseName"),
        ("Transfer Value (£)", "transferValue"),
        ("member id", "memberId"),
        ("", ""),
    ],
)
def test_generate_id(label: str, expected: str) -> None:
    assert model.generate_id(label) == expected


def test_sample_process_parses() -> None:
    with SAMPLE_PROCESS.open("r", encoding="utf-8") as handle:
        process = model.parse_process(json.load(handle))

    assert process.name == "Pension Transfer Request"
    assert [stage.id for stage in process.stages] == ["stg_details", "stg_transfer", "stg_review"]
    assert process.element_labels()["spouseName"] == "Spouse Name"

    transfer = process.stages[1]
    assert transfer.default_skill == "Transfers Team"
    assert transfer.skill_logic[0].required_skill == "Senior Transfers Specialist"
    assert transfer.skill_logic[0].logic.operator == "OR"
    assert len(transfer.skill_logic[0].logic.groups) == 1


def test_legacy_visibility_conditions_become_and_group() -> None:
    element = model.ElementDefinition.from_dict(
        {
            "id": "advisorName",
            "visibilityConditions": [
                {"targetElementId": "hasAdvice", "operator": "equals", "value": "Yes"},
                {"targetElementId": "schemeName", "operator": "isNotEmpty"},
            ],
            "requiredConditions": [{"targetElementId": "hasAdvice", "operator": "equals", "value": "Yes"}],
        }
    )

    assert element.visibility is not None
    assert element.visibility.operator == "AND"
    assert element.visibility.id == "advisorName_visibility"
    assert [c.target_element_id for c in element.visibility.conditions] == ["hasAdvice", "schemeName"]
    assert element.visibility.conditions[1].value == ""
    assert element.required_logic is not None
    assert element.required_logic.id == "advisorName_required"


def test_explicit_group_wins_over_legacy_list() -> None:
    element = model.ElementDefinition.from_dict(
        {
            "id": "advisorName",
            "visibility": {"id": "explicit", "operator": "OR", "conditions": []},
            "visibilityConditions": [{"targetElementId": "hasAdvice", "operator": "equals", "value": "Yes"}],
        }
    )

    assert element.visibility is not None
    assert element.visibility.id == "explicit"
    assert element.visibility.is_empty


def test_malformed_fields_fall_back_to_defaults() -> None:
    process = model.parse_process(
        {
            "name": "Broken",
            "stages": [
                "not a stage",
                {
                    "title": "Only Stage",
                    "sections": {"not": "a list"},
                    "skillLogic": [{"requiredSkill": "Ops"}],
                },
            ],
        }
    )

    assert process.id == "broken"
    assert len(process.stages) == 1
    stage = process.stages[0]
    assert stage.id == "onlyStage"
    assert stage.sections == ()
    assert stage.skill_logic[0].logic.is_empty


def test_element_defaults_and_label_fallback() -> None:
    element = model.ElementDefinition.from_dict({"label": "Spouse Name", "options": ["A", 2]})

    assert element.id == "spouseName"
    assert element.type == "text"
    assert element.options == ("A", "2")
    assert element.visibility is None
    assert element.required_logic is None
    assert element.validation is None
    assert not element.hidden and not element.required


def test_element_to_dict_uses_json_keys() -> None:
    payload = {
        "id": "spouseName",
        "label": "Spouse Name",
        "type": "text",
        "required": True,
        "requiredLogic": {
            "id": "g",
            "operator": "AND",
            "conditions": [{"targetElementId": "maritalStatus", "operator": "equals", "value": "Married"}],
        },
        "validation": {"type": "custom", "customDescription": "Full legal name"},
    }

    assert model.ElementDefinition.from_dict(payload).to_dict() == payload


def test_coerce_helpers_accept_models_and_mappings() -> None:
    condition = model.Condition("a", "equals", "b")

    assert model.coerce_condition(condition) is condition
    assert model.coerce_condition({"targetElementId": "a", "value": "b"}) == condition
    assert model.coerce_group(None) is None
    assert model.coerce_group("nonsense") is None
    assert model.coerce_section({"title": "Intro"}).id == "intro"


def test_logic_group_parsing_stops_at_depth_limit() -> None:
    payload = {"id": "leaf", "operator": "AND", "conditions": [{"targetElementId": "a", "value": "b"}]}
    for level in range(2000):
        payload = {"id": f"level{level}", "operator": "or", "groups": [payload]}

    group = model.LogicGroup.from_dict(payload)
    depth = 1
    while group.groups:
        group = group.groups[0]
        depth += 1

    assert depth == MAX_LOGIC_DEPTH + 1
    assert group.truncated
    assert group.operator == "OR"
