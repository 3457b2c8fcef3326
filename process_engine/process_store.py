"""Helpers for working with process definition files on disk."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from process_engine.defaults import LEGACY_PROCESS_PATH, PROCESS_FILENAME, PROCESSES_ROOT
from process_engine.model import ProcessDefinition, parse_process

logger = logging.getLogger(__name__)


def discover_processes(root: Optional[Path] = None) -> Dict[str, Path]:
    """Return a mapping of ``process_key -> path`` for local process files."""

    base = Path(root) if root is not None else PROCESSES_ROOT
    processes: Dict[str, Path] = {}
    if base.exists():
        for entry in sorted(base.iterdir()):
            if not entry.is_dir():
                continue
            process_path = entry / PROCESS_FILENAME
            if process_path.exists():
                processes[entry.name] = process_path
    if not processes and root is None and LEGACY_PROCESS_PATH.exists():
        processes["default"] = LEGACY_PROCESS_PATH
    return processes


def load_process_file(path: Path) -> ProcessDefinition:
    """Read and parse a single process JSON file.

    Raises ``ValueError`` if the file is not a JSON object; I/O errors propagate.
    """

    with Path(path).open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"Process file {path} must contain a JSON object.")
    return parse_process(payload)


def load_local_processes(root: Optional[Path] = None) -> Dict[str, ProcessDefinition]:
    """Load every discoverable process, skipping files that cannot be parsed."""

    processes: Dict[str, ProcessDefinition] = {}
    for process_key, path in discover_processes(root).items():
        try:
            processes[process_key] = load_process_file(path)
        except (OSError, ValueError) as exc:
            logger.warning("Skipping process file %s: %s", path, exc)
    return processes


def process_choices(processes: Dict[str, ProcessDefinition]) -> List[tuple[str, str]]:
    """Return ``(key, name)`` pairs for selection widgets."""

    return [(key, process.name or key) for key, process in processes.items()]


__all__ = [
    "discover_processes",
    "load_local_processes",
    "load_process_file",
    "process_choices",
]
