"""
Error-rate metric and evaluation of the student's transcription.

The edit distance is computed by jiwer. The unit (characters or words)
is a single policy for the whole run, chosen in the grader settings.
"""

import re
import traceback

import jiwer

from .config import FAILURE_SCORE, PREVIEW_LENGTH, WORST_ERROR_RATE
from .config_loader import GraderSettings
from .models import EvaluationResult, EvaluationStatus, InvocationResult, TokenizationPolicy
from .scoring import calculate_score


def remove_punctuation_from_text(text: str) -> str:
    """Remove punctuation from text while preserving spaces."""
    return re.sub(r"[^\w\s]", "", text)


def preprocess_text(
    text: str, remove_punctuation: bool = False, make_lowercase: bool = False
) -> str:
    """Preprocess text by removing punctuation and/or converting to lowercase."""
    if make_lowercase:
        text = text.lower()
    if remove_punctuation:
        text = remove_punctuation_from_text(text)
    return text


def compute_error_rate(
    reference: str,
    candidate: str,
    tokenization: TokenizationPolicy = TokenizationPolicy.CHARACTER,
    remove_punctuation: bool = False,
    make_lowercase: bool = False,
) -> float:
    """
    Compute the edit-distance error rate of ``candidate`` against ``reference``.

    Args:
        reference: Ground-truth text (must be non-empty).
        candidate: Text to score.
        tokenization: Whether distance is counted in characters or words.
        remove_punctuation: Strip punctuation from both texts first.
        make_lowercase: Lowercase both texts first.

    Returns:
        Minimum number of insertions, deletions and substitutions divided
        by the reference length. Can exceed 1.0 when the candidate has
        many insertions.
    """
    if remove_punctuation or make_lowercase:
        reference = preprocess_text(reference, remove_punctuation, make_lowercase)
        candidate = preprocess_text(candidate, remove_punctuation, make_lowercase)

    if tokenization == TokenizationPolicy.WORD:
        return float(jiwer.wer(reference=reference, hypothesis=candidate))
    return float(jiwer.cer(reference=reference, hypothesis=candidate))


def make_preview(transcription: str) -> str:
    """First ``PREVIEW_LENGTH`` characters of a transcription, on one line."""
    flattened = " ".join(transcription.split())
    if len(flattened) > PREVIEW_LENGTH:
        return flattened[:PREVIEW_LENGTH] + "..."
    return flattened


def evaluate_transcription(
    ground_truth: str,
    invocation: InvocationResult,
    settings: GraderSettings,
) -> EvaluationResult:
    """
    Turn the student's invocation outcome into a scored result.

    - No transcription (the call failed): error rate 1.0, score 0.
    - Empty transcription: error rate 1.0, scored normally (5 points).
    - Metric computation fails: error rate 1.0, score 0.
    - Otherwise the computed rate, clamped to 1.0, and its score.

    Args:
        ground_truth: Reference transcript.
        invocation: Outcome of calling the student function.
        settings: Resolved grader settings (metric policy, URL).

    Returns:
        EvaluationResult for reporting.
    """
    print("\n--- Evaluation ---")
    common = {
        "target_image_url": settings.target_image_url,
        "tokenization": settings.tokenization,
    }
    transcription = invocation.transcription

    if transcription is None:
        print("Evaluation skipped due to script execution error.")
        return EvaluationResult(
            status=EvaluationStatus.EXECUTION_FAILED,
            error_rate=WORST_ERROR_RATE,
            score=FAILURE_SCORE,
            candidate_preview=None,
            **common,
        )

    if not transcription:
        print("WARNING: Student script returned an empty transcription.")
        return EvaluationResult(
            status=EvaluationStatus.EMPTY_TRANSCRIPTION,
            error_rate=WORST_ERROR_RATE,
            score=calculate_score(WORST_ERROR_RATE),
            candidate_preview=transcription,
            **common,
        )

    preview = make_preview(transcription)
    try:
        error_rate = compute_error_rate(
            ground_truth,
            transcription,
            tokenization=settings.tokenization,
            remove_punctuation=settings.remove_punctuation,
            make_lowercase=settings.make_lowercase,
        )
    except Exception as e:
        print(f"ERROR: Could not calculate error rate. Error: {e}")
        traceback.print_exc()
        return EvaluationResult(
            status=EvaluationStatus.METRIC_FAILED,
            error_rate=WORST_ERROR_RATE,
            score=FAILURE_SCORE,
            candidate_preview=preview,
            **common,
        )

    label = "Character" if settings.tokenization == TokenizationPolicy.CHARACTER else "Word"
    print(f"{label} Error Rate: {error_rate:.4f} ({error_rate * 100:.2f}%)")

    return EvaluationResult(
        status=EvaluationStatus.SUCCESS,
        error_rate=min(max(error_rate, 0.0), WORST_ERROR_RATE),
        score=calculate_score(error_rate),
        candidate_preview=preview,
        **common,
    )
