"""
The grading pipeline: ground truth -> student call -> metric -> score.
"""

from .config_loader import GraderSettings
from .ground_truth import load_ground_truth
from .metrics import evaluate_transcription
from .models import EvaluationResult
from .student_runner import StudentRunner


def run_evaluation(settings: GraderSettings) -> EvaluationResult:
    """
    Run the complete evaluation for one submission.

    Args:
        settings: Resolved grader settings.

    Returns:
        EvaluationResult for the submission.

    Raises:
        GroundTruthError: If the ground truth cannot be loaded.
        IntegrationError: If the student module or function is unusable.
    """
    print(f"--- Loading Ground Truth from {settings.ground_truth_path} ---")
    ground_truth = load_ground_truth(settings.ground_truth_path)
    print("Ground truth loaded successfully.")
    print(f"Target Image URL for evaluation: {settings.target_image_url}")

    runner = StudentRunner(
        submission_dir=settings.submission_dir,
        module_name=settings.student_module,
        function_name=settings.target_function,
        timeout_seconds=settings.invocation_timeout_seconds,
    )

    print(f"--- Importing {settings.target_function} from {settings.student_module}.py ---")
    transcription_func = runner.load_entry_point()

    invocation = runner.invoke(transcription_func, settings.target_image_url)
    if settings.verbose and invocation.error:
        print(f"  Invocation error: {invocation.error}")

    return evaluate_transcription(ground_truth, invocation, settings)
