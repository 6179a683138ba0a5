"""
Configuration constants for the CER Grader.
"""

from pathlib import Path


# Student submission contract
STUDENT_MODULE: str = "transcription"
TARGET_FUNCTION: str = "get_transcription"
TARGET_ARGUMENT: str = "image_url"

# Environment variables
API_KEY_ENV_VAR: str = "LLM_API_KEY"
URL_ENV_VAR: str = "TARGET_IMAGE_URL"
GITHUB_OUTPUT_ENV_VAR: str = "GITHUB_OUTPUT"
GITHUB_STEP_SUMMARY_ENV_VAR: str = "GITHUB_STEP_SUMMARY"

# File names
GROUND_TRUTH_FILENAME: str = "ground_truth.txt"
RESULT_FILENAME: str = "evaluation_result.json"
DEFAULT_CONFIG_FILENAME: str = "grader_config.yml"

# Metric configuration
# "character" -> CER, "word" -> WER
DEFAULT_TOKENIZATION: str = "character"

# Scoring: (error_rate, points) anchors, linear in between
SCORE_ANCHORS: list[tuple[float, float]] = [
    (0.00, 100.0),
    (0.50, 50.0),
    (0.95, 5.0),
]
SCORE_FLOOR: float = 5.0
MAX_SCORE: float = 100.0
FAILURE_SCORE: float = 0.0
WORST_ERROR_RATE: float = 1.0

# Reporting
PREVIEW_LENGTH: int = 100
NOT_AVAILABLE: str = "N/A"

# Default paths (can be overridden via CLI)
DEFAULT_SUBMISSION_DIR: Path = Path(".")
