"""
Reporting of evaluation results.

Emits the result as ``key=value`` lines for the CI summary step, saves
and reloads it as JSON, and renders the human-readable summary.
"""

import os
import sys
from decimal import Decimal
from pathlib import Path
from typing import TextIO

from .config import (
    GITHUB_OUTPUT_ENV_VAR,
    GITHUB_STEP_SUMMARY_ENV_VAR,
    MAX_SCORE,
    NOT_AVAILABLE,
    STUDENT_MODULE,
    TARGET_FUNCTION,
)
from .models import EvaluationResult, EvaluationStatus


OUTPUT_FIELDS: list[str] = ["error_rate", "error_rate_percent", "score", "candidate_preview"]


def format_outputs(result: EvaluationResult) -> dict[str, str]:
    """
    Format the result fields emitted for the summary step.

    The percentage is derived from the already rounded error rate so the
    two fields always agree.

    Args:
        result: EvaluationResult to format.

    Returns:
        Mapping of the four output names to their formatted values.
    """
    error_rate = f"{result.error_rate:.4f}"
    error_rate_percent = Decimal(error_rate) * 100

    return {
        "error_rate": error_rate,
        "error_rate_percent": f"{error_rate_percent:.2f}",
        "score": f"{result.score:.2f}",
        "candidate_preview": result.candidate_preview or NOT_AVAILABLE,
    }


def emit_outputs(
    result: EvaluationResult,
    stream: TextIO | None = None,
    github_output: Path | None = None,
) -> dict[str, str]:
    """
    Print the output fields as ``key=value`` lines.

    When ``github_output`` is given (by default the file named by
    ``GITHUB_OUTPUT``), the same lines are appended there so later
    workflow steps can read them as step outputs.

    Args:
        result: EvaluationResult to emit.
        stream: Where to print. Defaults to stdout.
        github_output: Step output file to append to.

    Returns:
        The emitted fields.
    """
    stream = stream or sys.stdout
    if github_output is None and os.environ.get(GITHUB_OUTPUT_ENV_VAR):
        github_output = Path(os.environ[GITHUB_OUTPUT_ENV_VAR])

    outputs = format_outputs(result)
    lines = [f"{name}={outputs[name]}" for name in OUTPUT_FIELDS]

    print(f"Calculated Score: {outputs['score']} / {MAX_SCORE} Extra Credit Points", file=stream)
    for line in lines:
        print(line, file=stream)

    if github_output is not None:
        with open(github_output, "a", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")

    return outputs


def save_result(result: EvaluationResult, result_path: Path) -> None:
    """
    Save the evaluation result as JSON.

    Args:
        result: EvaluationResult to save.
        result_path: Destination file.
    """
    result_path.parent.mkdir(parents=True, exist_ok=True)
    with open(result_path, "w", encoding="utf-8") as f:
        f.write(result.model_dump_json(indent=2))
    print(f"Saved evaluation result to {result_path}")


def load_result(result_path: Path) -> EvaluationResult | None:
    """
    Load a previously saved evaluation result.

    Returns:
        The EvaluationResult, or None if the file does not exist.
    """
    if not result_path.exists():
        return None
    return EvaluationResult.model_validate_json(result_path.read_text(encoding="utf-8"))


def render_summary(
    result: EvaluationResult | None,
    target_image_url: str | None = None,
    submission_checked: bool = True,
    student_module: str = STUDENT_MODULE,
    target_function: str = TARGET_FUNCTION,
) -> str:
    """
    Render the end-of-job summary.

    Args:
        result: The saved evaluation result, or None if the evaluation
            aborted before producing one.
        target_image_url: Image URL to show when there is no result.
        submission_checked: False when the workflow's file/function
            presence check failed, which explains a missing result.
        student_module: Module name named in the missing-file message.
        target_function: Function name named in the missing-file message.

    Returns:
        Multi-line summary text.
    """
    url = result.target_image_url if result else target_image_url
    lines = [
        "--- Evaluation Summary ---",
        f"Target Image URL: {url or NOT_AVAILABLE}",
    ]

    if result is None and not submission_checked:
        lines.extend([
            f"Evaluation failed: Required file '{student_module}.py' or function "
            f"'{target_function}' definition missing.",
            f"Score: 0 / {MAX_SCORE}",
        ])
    elif result is None:
        lines.extend([
            "Evaluation failed before a score could be computed.",
            f"Score: 0 / {MAX_SCORE}",
            "(Check the logs of the evaluation step above for specific errors)",
        ])
    else:
        outputs = format_outputs(result)
        lines.append(f"Evaluation Status: {result.status.value}")
        if result.status in (EvaluationStatus.EXECUTION_FAILED, EvaluationStatus.METRIC_FAILED):
            lines.append("Evaluation failed during script execution or error rate calculation.")
        lines.extend([
            f"{result.tokenization.value.capitalize()} Error Rate: "
            f"{outputs['error_rate']} ({outputs['error_rate_percent']}%)",
            f"Score: {outputs['score']} / {MAX_SCORE}",
            f"Student Transcription Preview: {outputs['candidate_preview']}",
        ])

    lines.append("-------------------------")
    return "\n".join(lines)


def publish_summary(summary: str, step_summary: Path | None = None) -> None:
    """
    Print the summary and append it to the GitHub job summary if available.

    Args:
        summary: Text from ``render_summary``.
        step_summary: Job summary file. Defaults to ``GITHUB_STEP_SUMMARY``.
    """
    print(summary)

    if step_summary is None and os.environ.get(GITHUB_STEP_SUMMARY_ENV_VAR):
        step_summary = Path(os.environ[GITHUB_STEP_SUMMARY_ENV_VAR])
    if step_summary is not None:
        with open(step_summary, "a", encoding="utf-8") as f:
            f.write("```\n" + summary + "\n```\n")
