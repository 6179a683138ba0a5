"""
CER Grader: Transcription extra-credit grading for CI

Usage:
  main.py evaluate [--config=PATH] [--submission-dir=DIR] [--ground-truth=PATH]
                   [--tokenization=MODE] [--timeout=SECONDS] [--result=PATH] [--verbose]
  main.py summary [--config=PATH] [--result=PATH] [--check-outcome=OUTCOME]
  main.py score [--] <error_rate>
  main.py (-h | --help)

Options:
  --config=PATH         Path to YAML configuration file [default: grader_config.yml].
  --submission-dir=DIR  Directory containing transcription.py.
  --ground-truth=PATH   Path to the ground-truth transcript.
  --tokenization=MODE   Error rate unit: character or word.
  --timeout=SECONDS     Ceiling for the student's transcription call.
  --result=PATH         Where the evaluation result JSON is written/read.
  --check-outcome=OUTCOME  Outcome of the workflow's file/function check step.
  --verbose             Print tracebacks for fatal errors.
  -h --help             Show this screen.
"""

import os
import sys
import traceback
from pathlib import Path

from docopt import docopt
from dotenv import load_dotenv

from cer_grader.config import DEFAULT_CONFIG_FILENAME, DEFAULT_SUBMISSION_DIR, RESULT_FILENAME, URL_ENV_VAR
from cer_grader.config_loader import GraderConfig, load_config, resolve_settings
from cer_grader.errors import ConfigurationError, GraderError
from cer_grader.pipeline import run_evaluation
from cer_grader.reporter import emit_outputs, load_result, publish_summary, render_summary, save_result
from cer_grader.scoring import calculate_score


def read_config(config_path: Path) -> GraderConfig:
    """
    Load the YAML config, falling back to defaults when the default file is absent.

    Raises:
        ConfigurationError: If an explicitly named file is missing or invalid.
    """
    if not config_path.exists() and config_path.name == DEFAULT_CONFIG_FILENAME:
        return GraderConfig()
    config = load_config(config_path)
    print(f"Loaded configuration from {config_path}")
    return config


def result_path_for(config: GraderConfig, arguments: dict) -> Path:
    """Where the evaluation result JSON lives for this config and command line."""
    if arguments["--result"]:
        return Path(arguments["--result"])
    if config.result_path:
        return config.result_path
    submission_dir = arguments.get("--submission-dir") or config.submission_dir or DEFAULT_SUBMISSION_DIR
    return Path(submission_dir) / RESULT_FILENAME


def evaluate(arguments: dict) -> int:
    """
    Run the evaluation and emit its outputs.

    Returns:
        Exit code (0 when a score was produced, 1 on a fatal error).
    """
    load_dotenv()
    verbose = bool(arguments["--verbose"])

    try:
        config = read_config(Path(arguments["--config"]))
        verbose = verbose or config.verbose

        # A stale result must not be summarized if this run aborts
        result_path = result_path_for(config, arguments)
        result_path.unlink(missing_ok=True)

        timeout = arguments["--timeout"]
        try:
            timeout = float(timeout) if timeout is not None else None
        except ValueError as e:
            raise ConfigurationError(f"Invalid --timeout value: {arguments['--timeout']}") from e

        settings = resolve_settings(
            config,
            submission_dir=arguments["--submission-dir"],
            ground_truth_path=arguments["--ground-truth"],
            tokenization=arguments["--tokenization"],
            invocation_timeout_seconds=timeout,
            result_path=result_path,
            verbose=verbose or None,
        )

        result = run_evaluation(settings)
    except GraderError as e:
        print(f"ERROR: {e}")
        if verbose:
            traceback.print_exc()
        return 1

    emit_outputs(result)
    save_result(result, settings.result_path)
    return 0


def summary(arguments: dict) -> int:
    """
    Print the evaluation summary, whether or not the evaluation succeeded.

    Returns:
        Exit code (1 only if the configuration is unusable).
    """
    load_dotenv()
    try:
        config = read_config(Path(arguments["--config"]))
    except ConfigurationError as e:
        print(f"ERROR: {e}")
        return 1

    result_path = result_path_for(config, arguments)

    try:
        result = load_result(result_path)
    except ValueError as e:
        print(f"Warning: Could not read evaluation result {result_path}: {e}")
        result = None

    target_image_url = os.environ.get(URL_ENV_VAR) or config.target_image_url
    check_outcome = arguments["--check-outcome"]
    publish_summary(render_summary(
        result,
        target_image_url,
        submission_checked=not check_outcome or check_outcome == "success",
        student_module=config.student_module,
        target_function=config.target_function,
    ))
    return 0


def score(arguments: dict) -> int:
    """
    Print the score for a single error rate.

    Returns:
        Exit code (1 if the error rate is not a number).
    """
    try:
        error_rate = float(arguments["<error_rate>"])
    except ValueError:
        print(f"Error: '{arguments['<error_rate>']}' is not a number")
        return 1

    print(f"{calculate_score(error_rate):.2f}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """
    Main CLI entrypoint.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    arguments = docopt(__doc__, argv=argv)

    if arguments["evaluate"]:
        return evaluate(arguments)
    if arguments["summary"]:
        return summary(arguments)
    return score(arguments)


if __name__ == "__main__":
    sys.exit(main())
