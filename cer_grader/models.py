"""
Pydantic models for the CER Grader.

Defines structured data types for the student invocation outcome and
the final evaluation result.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TokenizationPolicy(str, Enum):
    """Unit used by the edit-distance metric."""

    CHARACTER = "character"
    WORD = "word"


class EvaluationStatus(str, Enum):
    """How the evaluation of a submission ended."""

    SUCCESS = "success"
    EMPTY_TRANSCRIPTION = "empty_transcription"
    EXECUTION_FAILED = "execution_failed"
    METRIC_FAILED = "metric_failed"


class InvocationResult(BaseModel):
    """
    Outcome of calling the student's transcription function.

    A ``transcription`` of ``None`` means the function did not produce
    a result (it raised or timed out). An empty string is a valid,
    if degenerate, result.

    Attributes:
        transcription: Stripped text returned by the function, or None.
        error: Description of the failure, if any.
        timed_out: Whether the call exceeded the configured ceiling.
        duration_seconds: Wall-clock time spent in the call.
    """

    model_config = ConfigDict(frozen=True)

    transcription: str | None = Field(default=None, description="Stripped transcription text")
    error: str | None = Field(default=None, description="Failure description")
    timed_out: bool = Field(default=False, description="Whether the call timed out")
    duration_seconds: float = Field(default=0.0, ge=0, description="Call duration")

    @property
    def succeeded(self) -> bool:
        return self.transcription is not None


class EvaluationResult(BaseModel):
    """
    Final result of grading one submission.

    Attributes:
        status: How the evaluation ended.
        error_rate: Error rate in [0, 1] (1.0 on any failure).
        score: Extra-credit points in [0, 100].
        candidate_preview: Start of the student's transcription, or None.
        target_image_url: Image the transcription was requested for.
        tokenization: Unit the error rate was measured in.
        timestamp: When the evaluation finished.
    """

    model_config = ConfigDict(frozen=True)

    status: EvaluationStatus = Field(..., description="How the evaluation ended")
    error_rate: float = Field(..., ge=0, le=1, description="Error rate between 0 and 1")
    score: float = Field(..., ge=0, le=100, description="Extra-credit points")
    candidate_preview: str | None = Field(default=None, description="Transcription preview")
    target_image_url: str = Field(default="", description="Evaluated image URL")
    tokenization: TokenizationPolicy = Field(
        default=TokenizationPolicy.CHARACTER, description="Metric tokenization"
    )
    timestamp: str = Field(
        default_factory=lambda: datetime.now().isoformat(), description="Completion time"
    )
