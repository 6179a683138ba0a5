"""Behavior tests for the command line: exit codes and emitted outputs."""

import json
from pathlib import Path
from typing import Callable

import pytest

import main as cli

GOOD_SUBMISSION = "def get_transcription(image_url):\n    return 'THE QUICK BROWN FOX'\n"


@pytest.fixture(autouse=True)
def _run_in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Runs each command from tmp_path without reading a local .env file."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)


def test_exact_transcription_scores_100(
    grader_env: dict[str, str],
    write_submission: Callable[..., Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    submission = write_submission(GOOD_SUBMISSION)

    assert cli.main(["evaluate"]) == 0

    out = capsys.readouterr().out
    assert "error_rate=0.0000" in out
    assert "error_rate_percent=0.00" in out
    assert "score=100.00" in out
    assert "candidate_preview=THE QUICK BROWN FOX" in out
    saved = json.loads((submission / "evaluation_result.json").read_text(encoding="utf-8"))
    assert saved["status"] == "success"
    assert saved["score"] == 100.0


def test_empty_transcription_scores_floor(
    grader_env: dict[str, str],
    write_submission: Callable[..., Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    write_submission("def get_transcription(image_url):\n    return ''\n")

    assert cli.main(["evaluate"]) == 0

    out = capsys.readouterr().out
    assert "Student script returned an empty transcription" in out
    assert "error_rate=1.0000" in out
    assert "score=5.00" in out


def test_crashing_student_code_scores_zero_but_reports(
    grader_env: dict[str, str],
    write_submission: Callable[..., Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    write_submission("def get_transcription(image_url):\n    raise ConnectionError('no network')\n")

    assert cli.main(["evaluate"]) == 0

    out = capsys.readouterr().out
    assert "error_rate=1.0000" in out
    assert "error_rate_percent=100.00" in out
    assert "score=0.00" in out
    assert "candidate_preview=N/A" in out


def test_missing_ground_truth_exits_without_score(
    grader_env: dict[str, str],
    write_submission: Callable[..., Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    submission = write_submission(GOOD_SUBMISSION, ground_truth=None)

    assert cli.main(["evaluate"]) == 1

    out = capsys.readouterr().out
    assert "ERROR: Ground truth file" in out
    assert "score=" not in out
    assert not (submission / "evaluation_result.json").exists()


@pytest.mark.parametrize("missing", ["LLM_API_KEY", "TARGET_IMAGE_URL"])
def test_missing_environment_variable_exits_before_invocation(
    missing: str,
    grader_env: dict[str, str],
    write_submission: Callable[..., Path],
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    submission = write_submission(
        "from pathlib import Path\n"
        "def get_transcription(image_url):\n"
        "    Path(__file__).with_name('called.txt').write_text('yes')\n"
        "    return 'THE QUICK BROWN FOX'\n"
    )
    monkeypatch.delenv(missing)

    assert cli.main(["evaluate"]) == 1

    out = capsys.readouterr().out
    assert f"Environment variable {missing} is not set" in out
    assert "score=" not in out
    assert not (submission / "called.txt").exists()


def test_missing_entry_point_exits_nonzero(
    grader_env: dict[str, str],
    write_submission: Callable[..., Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    write_submission("def transcribe(url):\n    return ''\n")

    assert cli.main(["evaluate"]) == 1
    assert "Function 'get_transcription' not found" in capsys.readouterr().out


def test_wrong_return_type_exits_nonzero(
    grader_env: dict[str, str],
    write_submission: Callable[..., Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    write_submission("def get_transcription(image_url):\n    return 42\n")

    assert cli.main(["evaluate"]) == 1
    assert "did not return a string" in capsys.readouterr().out


def test_explicit_missing_config_is_fatal(grader_env: dict[str, str], capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["evaluate", "--config=other.yml"]) == 1
    assert "Configuration file not found" in capsys.readouterr().out


def test_word_tokenization_from_command_line(
    grader_env: dict[str, str],
    write_submission: Callable[..., Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    write_submission("def get_transcription(image_url):\n    return 'THE QUICK BROWN DOG'\n")

    assert cli.main(["evaluate", "--tokenization=word"]) == 0

    out = capsys.readouterr().out
    assert "error_rate=0.2500" in out
    assert "score=75.00" in out


def test_summary_after_successful_evaluation(
    grader_env: dict[str, str],
    write_submission: Callable[..., Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    write_submission(GOOD_SUBMISSION)
    cli.main(["evaluate"])
    capsys.readouterr()

    assert cli.main(["summary"]) == 0

    out = capsys.readouterr().out
    assert "--- Evaluation Summary ---" in out
    assert "Score: 100.00 / 100.0" in out


def test_summary_after_aborted_evaluation_reports_zero(
    grader_env: dict[str, str],
    write_submission: Callable[..., Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    submission = write_submission(GOOD_SUBMISSION)
    cli.main(["evaluate"])
    assert (submission / "evaluation_result.json").exists()

    # A later run that aborts must not leave the earlier result behind
    (submission / "ground_truth.txt").unlink()
    assert cli.main(["evaluate"]) == 1
    capsys.readouterr()

    assert cli.main(["summary"]) == 0
    out = capsys.readouterr().out
    assert "Evaluation failed before a score could be computed." in out
    assert "Score: 0 / 100.0" in out


@pytest.mark.parametrize(
    ("error_rate", "expected"),
    [("0", "100.00"), ("0.25", "75.00"), ("0.5", "50.00"), ("0.725", "27.50"), ("0.99", "5.00")],
)
def test_score_command(error_rate: str, expected: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["score", error_rate]) == 0
    assert capsys.readouterr().out.strip() == expected


def test_score_command_rejects_non_numbers(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["score", "lots"]) == 1
    assert "is not a number" in capsys.readouterr().out


def test_student_exit_call_scores_zero_but_reports(
    grader_env: dict[str, str],
    write_submission: Callable[..., Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    submission = write_submission(
        "import sys\n"
        "def get_transcription(image_url):\n"
        "    sys.exit(3)\n"
    )

    assert cli.main(["evaluate"]) == 0

    out = capsys.readouterr().out
    assert "score=0.00" in out
    assert "candidate_preview=N/A" in out
    assert (submission / "evaluation_result.json").exists()


def test_summary_after_failed_presence_check(
    grader_env: dict[str, str], capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli.main(["summary", "--check-outcome=failure"]) == 0

    out = capsys.readouterr().out
    assert "Required file 'transcription.py' or function 'get_transcription' definition missing." in out
    assert "Score: 0 / 100.0" in out
