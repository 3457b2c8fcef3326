"""Streamlit page listing the rules attached to a process definition."""

from __future__ import annotations

from typing import Dict

import streamlit as st

from Home import SELECTED_PROCESS_STATE_KEY, load_processes, processes_directory
from process_engine.defaults import DEFAULT_PROCESS_VERSION
from process_engine.logic import dangling_references
from process_engine.model import ProcessDefinition
from process_engine.summary import (
    decision_table_tsv,
    element_inventory,
    format_logic_summary,
    skill_decision_table,
)
from process_engine.ui_theme import apply_app_theme, page_header


def _render_skill_tables(process: ProcessDefinition) -> None:
    """Show one decision table per stage that routes on skills."""

    st.markdown("#### Operational skills")
    labels = process.element_labels()
    shown = False
    for stage in process.stages:
        if not stage.skill_logic and not stage.default_skill:
            continue
        shown = True
        st.markdown(f"**{stage.title}** · default skill: {stage.default_skill or '—'}")
        frame = skill_decision_table(stage, process)
        if frame.empty:
            continue
        st.dataframe(frame, hide_index=True, use_container_width=True)
        for rule in stage.skill_logic:
            st.caption(f"{rule.required_skill}: {format_logic_summary(rule.logic, labels)}")
        st.download_button(
            "Download decision table (TSV)",
            data=decision_table_tsv(frame),
            file_name=f"{stage.id}_decision_table.tsv",
            mime="text/tab-separated-values",
            key=f"download_{stage.id}",
        )
    if not shown:
        st.info("No stage in this process routes work by skill.")


def main() -> None:
    """Render the rule inventory page."""

    apply_app_theme(page_title="Process rules", page_icon="📐")
    processes: Dict[str, ProcessDefinition] = load_processes(str(processes_directory()))
    if not processes:
        page_header("Process rules", "No process definitions found.", icon="📐")
        return

    selected = st.session_state.get(SELECTED_PROCESS_STATE_KEY)
    if selected not in processes:
        selected = next(iter(processes))
    process = processes[selected]
    page_header(
        f"{process.name} rules",
        f"Version {DEFAULT_PROCESS_VERSION} · {len(process.stages)} stages",
        icon="📐",
    )

    for owner_id, target_id in dangling_references(process):
        st.warning(f"Rule on '{owner_id}' refers to unknown field '{target_id}'.")

    st.markdown("#### Fields")
    st.dataframe(element_inventory(process), hide_index=True, use_container_width=True)
    _render_skill_tables(process)


if __name__ == "__main__":
    main()
