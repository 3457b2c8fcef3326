"""Default values shared between the logic engine and the preview app."""

from __future__ import annotations

from pathlib import Path
from typing import Tuple

PROCESS_FILENAME = "process.json"
PROCESSES_ROOT = Path("processes")
LEGACY_PROCESS_PATH = Path("process.json")

VALUELESS_OPERATORS: Tuple[str, ...] = ("isEmpty", "isNotEmpty")

# Logic trees are authored by hand and stay shallow; anything deeper is malformed.
MAX_LOGIC_DEPTH = 32

REQUIRED_FIELD_MESSAGE = "This field is required"
SKILL_MATCH_REASON = "Logic match found"
ALWAYS_LABEL = "Always"
UNKNOWN_FIELD_LABEL = "Unknown Field"
DEFAULT_PROCESS_VERSION = "1.0.0-draft"
