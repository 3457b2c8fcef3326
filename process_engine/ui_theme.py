"""Shared visual identity for the Streamlit process preview pages."""

from __future__ import annotations

from html import escape as html_escape
from typing import Any, Optional

import streamlit as st


_THEME_CSS = """
<style>
:root {
    --app-accent: #006A4D;
    --app-accent-soft: #E3F2EC;
    --app-surface: rgba(255, 255, 255, 0.94);
    --app-shadow: 0 18px 40px rgba(15, 23, 42, 0.08);
    --app-text: #1F2933;
    --app-muted: #52606D;
    --app-error: #DC2626;
}

html, body {
    font-family: "Inter", "Segoe UI", system-ui, -apple-system, sans-serif;
    color: var(--app-text);
}

.app-header {
    display: flex;
    align-items: center;
    gap: 1.5rem;
    padding: 1.5rem 2rem;
    background: var(--app-surface);
    border-radius: 1.5rem;
    border: 1px solid rgba(0, 106, 77, 0.18);
    box-shadow: var(--app-shadow);
    margin-bottom: 2rem;
}

.app-header__icon {
    font-size: 2.5rem;
    line-height: 1;
}

.app-header__title {
    margin: 0;
    font-size: 2rem;
    font-weight: 700;
}

.app-header__subtitle {
    margin: 0.25rem 0 0 0;
    color: var(--app-muted);
}

.stage-progress {
    font-size: 0.8rem;
    font-weight: 600;
    letter-spacing: 0.08em;
    text-transform: uppercase;
    color: var(--app-accent);
}

.section-card__title {
    margin: 1.5rem 0 0.5rem 0;
    padding-bottom: 0.35rem;
    border-bottom: 1px solid rgba(0, 106, 77, 0.15);
    color: var(--app-accent);
}

.field-error {
    margin: -0.5rem 0 0.75rem 0;
    font-size: 0.85rem;
    color: var(--app-error);
}

.skill-badge {
    display: inline-flex;
    gap: 0.5rem;
    padding: 0.4rem 0.9rem;
    border-radius: 999px;
    background: var(--app-accent-soft);
    color: var(--app-accent);
    font-weight: 600;
}
</style>
"""


def apply_app_theme(page_title: str, page_icon: Optional[str] = None) -> None:
    """Set up consistent page configuration and inject the shared CSS theme."""

    st.set_page_config(
        page_title=page_title,
        page_icon=page_icon,
        layout="wide",
        initial_sidebar_state="expanded",
    )
    st.markdown(_THEME_CSS, unsafe_allow_html=True)


def page_header(
    title: str,
    subtitle: Optional[str] = None,
    icon: Optional[str] = None,
    *,
    container: Optional[Any] = None,
) -> None:
    """Render a hero-style header with a title, subtitle, and optional icon."""

    icon_markup = f"<span class='app-header__icon'>{icon}</span>" if icon else ""
    subtitle_markup = (
        f"<p class='app-header__subtitle'>{html_escape(subtitle)}</p>" if subtitle else ""
    )
    target = container.markdown if container is not None else st.markdown
    target(
        f"""
        <div class="app-header">
            {icon_markup}
            <div>
                <h1 class="app-header__title">{html_escape(title)}</h1>
                {subtitle_markup}
            </div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def field_error(message: str, *, container: Optional[Any] = None) -> None:
    """Render an inline validation message below a field."""

    target = container.markdown if container is not None else st.markdown
    target(f"<p class='field-error'>{html_escape(message)}</p>", unsafe_allow_html=True)


def skill_badge(skill: str, reason: str = "") -> None:
    """Render the operational skill needed for the current stage."""

    detail = f" · {html_escape(reason)}" if reason else ""
    st.markdown(
        f"<span class='skill-badge'>🧭 Required skill: {html_escape(skill)}{detail}</span>",
        unsafe_allow_html=True,
    )
