"""
Ground-truth transcript loader.
"""

from pathlib import Path

from .errors import GroundTruthError


def load_ground_truth(ground_truth_path: Path) -> str:
    """
    Read the reference transcript the submission is graded against.

    Args:
        ground_truth_path: Path to the UTF-8 ground-truth text file.

    Returns:
        The transcript with surrounding whitespace stripped.

    Raises:
        GroundTruthError: If the file is missing, unreadable or empty.
    """
    if not ground_truth_path.is_file():
        raise GroundTruthError(
            f"Ground truth file '{ground_truth_path}' not found. "
            "Please ensure the instructor has added this file to the template repository."
        )

    try:
        ground_truth = ground_truth_path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        raise GroundTruthError(f"Failed to read ground truth file '{ground_truth_path}': {e}") from e

    if not ground_truth:
        raise GroundTruthError(f"Ground truth file '{ground_truth_path}' is empty.")

    return ground_truth
