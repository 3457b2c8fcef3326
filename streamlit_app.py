"""Streamlit entrypoint for the process preview app."""

import logging
from importlib import import_module

import streamlit as st

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def main() -> None:
    """Run the preview page, reporting a broken install instead of crashing."""

    try:
        home_module = import_module("Home")
    except ModuleNotFoundError:
        st.error("Process preview page (Home.py) not found.")
        return

    run = getattr(home_module, "main", None)
    if not callable(run):
        st.error("Process preview page is missing a main() function.")
        return

    run()


if __name__ == "__main__":
    main()
