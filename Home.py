"""Streamlit page that runs a process definition as a multi-stage form."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from html import escape as html_escape
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st

from process_engine.coercion import parse_date
from process_engine.defaults import PROCESSES_ROOT
from process_engine.logic import is_element_required, is_element_visible
from process_engine.model import ElementDefinition, ProcessDefinition, SectionDefinition
from process_engine.navigation import (
    advance_stage,
    resolve_stage_skill,
    visible_elements,
    visible_sections,
)
from process_engine.process_store import load_local_processes
from process_engine.ui_theme import apply_app_theme, field_error, page_header, skill_badge
from process_engine.validation import validate_value

SELECTED_PROCESS_STATE_KEY = "preview_selected_process"
ANSWERS_STATE_KEY = "preview_answers"
STAGE_STATE_KEY = "preview_stage_index"
ERRORS_STATE_KEY = "preview_errors"
UNSELECTED_LABEL = "— Select an option —"


def _secrets_dict(name: str) -> Dict[str, Any]:
    """Return a mapping stored under ``name`` in Streamlit secrets."""

    try:
        value = st.secrets.get(name, {})  # type: ignore[arg-type]
    except FileNotFoundError:
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    return {}


def processes_directory() -> Path:
    """Return the configured directory holding ``<key>/process.json`` files."""

    configured = _secrets_dict("process").get("directory")
    if isinstance(configured, str) and configured.strip():
        return Path(configured.strip())
    return PROCESSES_ROOT


@st.cache_data(ttl=60, show_spinner=False)
def load_processes(directory: str) -> Dict[str, ProcessDefinition]:
    """Load every process definition found under ``directory``."""

    return load_local_processes(Path(directory))


def _widget_key(process_key: str, element: ElementDefinition) -> str:
    return f"{process_key}_element_{element.id}"


def render_element(
    process_key: str,
    element: ElementDefinition,
    answers: Dict[str, Any],
    errors: Dict[str, str],
) -> None:
    """Render one element and write its current value back into ``answers``."""

    widget_key = _widget_key(process_key, element)
    if not is_element_visible(element, answers):
        if widget_key in st.session_state:
            st.session_state.pop(widget_key)
        return

    required = is_element_required(element, answers)
    label = f"{element.label} *" if required else element.label
    current = answers.get(element.id, element.default_value)

    if element.type == "static":
        st.markdown(f"**{element.label}**")
        if element.description:
            st.caption(element.description)
        return

    if element.type in {"select", "radio"}:
        options = list(element.options)
        if not options:
            st.warning(f"Element '{element.id}' has no options configured.")
            return
        choices = [UNSELECTED_LABEL, *options]
        index = choices.index(current) if current in options else 0
        if element.type == "radio":
            selection = st.radio(label, choices, index=index, key=widget_key, help=element.description)
        else:
            selection = st.selectbox(label, choices, index=index, key=widget_key, help=element.description)
        if selection == UNSELECTED_LABEL:
            answers.pop(element.id, None)
        else:
            answers[element.id] = selection
    elif element.type == "checkbox":
        if element.options:
            default_selection = [value for value in current if value in element.options] if isinstance(current, list) else []
            answers[element.id] = st.multiselect(
                label, list(element.options), default=default_selection, key=widget_key, help=element.description
            )
        else:
            answers[element.id] = st.checkbox(label, value=bool(current), key=widget_key, help=element.description)
    elif element.type in {"number", "currency"}:
        text = st.text_input(
            label,
            value="" if current is None else str(current),
            key=widget_key,
            help=element.description,
            placeholder="£" if element.type == "currency" else None,
        )
        answers[element.id] = text
    elif element.type == "date":
        parsed = parse_date(current)
        picked: Optional[date] = st.date_input(
            label, value=parsed.date() if parsed else None, key=widget_key, help=element.description
        )
        if picked is None:
            answers.pop(element.id, None)
        else:
            answers[element.id] = picked.isoformat()
    elif element.type == "textarea":
        answers[element.id] = st.text_area(
            label, value="" if current is None else str(current), key=widget_key, help=element.description
        )
    elif element.type == "repeater":
        columns = [str(column.get("label") or column.get("id") or "") for column in element.columns]
        rows = current if isinstance(current, list) else []
        frame = pd.DataFrame(rows, columns=columns or None)
        edited = st.data_editor(frame, num_rows="dynamic", key=widget_key)
        answers[element.id] = edited.dropna(how="all").to_dict(orient="records")
    else:
        answers[element.id] = st.text_input(
            label, value="" if current is None else str(current), key=widget_key, help=element.description
        )

    message = errors.get(element.id) or validate_value(element, answers.get(element.id))
    if message:
        field_error(message)


def render_section(
    process_key: str,
    section: SectionDefinition,
    answers: Dict[str, Any],
    errors: Dict[str, str],
) -> None:
    """Render a visible section and its visible elements."""

    st.markdown(f"<h3 class='section-card__title'>{html_escape(section.title)}</h3>", unsafe_allow_html=True)
    if section.description:
        st.caption(section.description)
    elements = visible_elements(section, answers)
    layout_columns = {"2col": 2, "3col": 3}.get(section.layout, 1)
    if layout_columns == 1:
        for element in elements:
            render_element(process_key, element, answers, errors)
        return
    columns = st.columns(layout_columns)
    for index, element in enumerate(elements):
        with columns[index % layout_columns]:
            render_element(process_key, element, answers, errors)


def _select_process(processes: Dict[str, ProcessDefinition]) -> str:
    keys = list(processes.keys())
    selected = st.session_state.get(SELECTED_PROCESS_STATE_KEY)
    if selected not in processes:
        selected = keys[0]
    if len(keys) > 1:
        selected = st.sidebar.selectbox(
            "Process",
            options=keys,
            index=keys.index(selected),
            format_func=lambda key: processes[key].name or key,
        )
    if st.session_state.get(SELECTED_PROCESS_STATE_KEY) != selected:
        st.session_state[STAGE_STATE_KEY] = 0
        st.session_state[ERRORS_STATE_KEY] = {}
    st.session_state[SELECTED_PROCESS_STATE_KEY] = selected
    return selected


def main() -> None:
    """Render the process preview."""

    apply_app_theme(page_title="Process preview", page_icon="🧩")
    header_placeholder = st.empty()

    directory = processes_directory()
    processes = load_processes(str(directory))
    if not processes:
        page_header("Process preview", "No process definitions found.", icon="🧩", container=header_placeholder)
        st.error(f"No process definitions found. Add {directory}/<name>/process.json to continue.")
        return

    process_key = _select_process(processes)
    process = processes[process_key]
    page_header(process.name, process.description or None, icon="🧩", container=header_placeholder)
    if not process.stages:
        st.info("This process has no stages yet.")
        return

    answers_state: Dict[str, Dict[str, Any]] = st.session_state.setdefault(ANSWERS_STATE_KEY, {})
    answers = answers_state.setdefault(process_key, {})
    errors: Dict[str, str] = st.session_state.setdefault(ERRORS_STATE_KEY, {})
    stage_index = min(st.session_state.get(STAGE_STATE_KEY, 0), len(process.stages) - 1)
    stage = process.stages[stage_index]

    st.markdown(
        f"<p class='stage-progress'>Stage {stage_index + 1} of {len(process.stages)}</p>",
        unsafe_allow_html=True,
    )
    st.subheader(stage.title)

    skill = resolve_stage_skill(stage, answers)
    if skill is not None:
        skill_badge(skill.skill, skill.reason)

    if errors:
        st.error("Please fix the highlighted fields before continuing.")

    sections: List[SectionDefinition] = visible_sections(stage, answers)
    for section in sections:
        render_section(process_key, section, answers, errors)

    answers_state[process_key] = answers
    st.session_state[ANSWERS_STATE_KEY] = answers_state

    back_col, next_col = st.columns(2)
    if back_col.button("Back", disabled=stage_index == 0):
        st.session_state[STAGE_STATE_KEY] = stage_index - 1
        st.session_state[ERRORS_STATE_KEY] = {}
        st.rerun()
    if next_col.button("Next" if stage_index < len(process.stages) - 1 else "Complete"):
        result = advance_stage(process, stage_index, answers)
        st.session_state[ERRORS_STATE_KEY] = result.errors
        if result.blocked:
            st.rerun()
        elif result.completed:
            st.success("Process completed!")
        else:
            st.session_state[STAGE_STATE_KEY] = result.stage_index
            st.rerun()

    with st.expander("Debug: current form state", expanded=False):
        st.json(answers)


if __name__ == "__main__":
    main()
