"""Tests for discovering and loading process definition files."""

from __future__ import annotations

import importlib
import json
import logging
from pathlib import Path
from typing import Any

import pytest

process_store = importlib.import_module("process_engine.process_store")


def _write_process(directory: Path, payload: Any) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "process.json"
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle)
    return path


def test_discover_processes_returns_sorted_directories(tmp_path: Path) -> None:
    _write_process(tmp_path / "onboarding", {"id": "b", "name": "Onboarding"})
    _write_process(tmp_path / "claims", {"id": "a", "name": "Claims"})
    (tmp_path / "empty").mkdir()
    (tmp_path / "stray.json").write_text("{}", encoding="utf-8")

    discovered = process_store.discover_processes(tmp_path)

    assert list(discovered) == ["claims", "onboarding"]
    assert discovered["claims"] == tmp_path / "claims" / "process.json"


def test_discover_processes_handles_missing_root(tmp_path: Path) -> None:
    assert process_store.discover_processes(tmp_path / "nowhere") == {}


def test_load_process_file_rejects_non_object(tmp_path: Path) -> None:
    path = _write_process(tmp_path / "broken", ["not", "an", "object"])

    with pytest.raises(ValueError):
        process_store.load_process_file(path)


def test_load_local_processes_skips_invalid_files(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    _write_process(tmp_path / "good", {"id": "good", "name": "Good process", "stages": []})
    bad_dir = tmp_path / "bad"
    bad_dir.mkdir()
    (bad_dir / "process.json").write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="process_engine.process_store"):
        processes = process_store.load_local_processes(tmp_path)

    assert list(processes) == ["good"]
    assert processes["good"].name == "Good process"
    assert "Skipping process file" in caplog.text
    assert process_store.process_choices(processes) == [("good", "Good process")]


def test_bundled_sample_process_loads() -> None:
    root = Path(__file__).resolve().parents[1] / "processes"
    processes = process_store.load_local_processes(root)

    assert "pension_transfer" in processes
    assert processes["pension_transfer"].find_element("advisorName") is not None
