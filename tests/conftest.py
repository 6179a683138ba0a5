"""Shared fixtures for grader tests."""

import sys
from pathlib import Path
from typing import Callable

import pytest

from cer_grader.config_loader import GraderConfig, GraderSettings, resolve_settings


GROUND_TRUTH = "THE QUICK BROWN FOX"
IMAGE_URL = "http://example.edu/scans/IMG_0275.JPG"


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keeps student imports and CI variables from leaking between tests."""
    monkeypatch.setattr(sys, "path", list(sys.path))
    monkeypatch.delitem(sys.modules, "transcription", raising=False)
    for name in ("GITHUB_OUTPUT", "GITHUB_STEP_SUMMARY", "LLM_API_KEY", "TARGET_IMAGE_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def grader_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Sets the variables the workflow provides."""
    env = {"LLM_API_KEY": "test-key", "TARGET_IMAGE_URL": IMAGE_URL}
    for name, value in env.items():
        monkeypatch.setenv(name, value)
    return env


@pytest.fixture
def write_submission(tmp_path: Path) -> Callable[..., Path]:
    """Writes a student transcription.py (and ground truth) into tmp_path."""

    def _write(source: str, ground_truth: str | None = GROUND_TRUTH) -> Path:
        (tmp_path / "transcription.py").write_text(source, encoding="utf-8")
        if ground_truth is not None:
            (tmp_path / "ground_truth.txt").write_text(ground_truth, encoding="utf-8")
        return tmp_path

    return _write


@pytest.fixture
def settings(tmp_path: Path) -> GraderSettings:
    """Settings pointing at tmp_path, resolved from a fake environment."""
    return resolve_settings(
        GraderConfig(submission_dir=tmp_path),
        environ={"LLM_API_KEY": "test-key", "TARGET_IMAGE_URL": IMAGE_URL},
    )
