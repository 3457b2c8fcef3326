"""Conditional logic engine for stage/section/element process definitions."""

from .logic import (  # noqa: F401
    evaluate_condition,
    evaluate_logic_group,
    is_element_required,
    is_element_visible,
    is_section_visible,
)
from .model import (  # noqa: F401
    Condition,
    ElementDefinition,
    LogicGroup,
    ProcessDefinition,
    SectionDefinition,
    StageDefinition,
    parse_process,
)
from .validation import validate_value  # noqa: F401
