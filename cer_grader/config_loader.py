"""
Configuration loader for the CER Grader.

Handles parsing and validation of the optional YAML configuration file
and resolves it, together with the environment, into the settings the
grading pipeline runs with.
"""

import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import (
    API_KEY_ENV_VAR,
    DEFAULT_SUBMISSION_DIR,
    DEFAULT_TOKENIZATION,
    GROUND_TRUTH_FILENAME,
    RESULT_FILENAME,
    STUDENT_MODULE,
    TARGET_FUNCTION,
    URL_ENV_VAR,
)
from .errors import ConfigurationError
from .models import TokenizationPolicy


class GraderConfig(BaseModel):
    """
    Configuration model for the grader, as read from YAML.

    Every field is optional; unset fields fall back to the defaults in
    ``config.py`` when settings are resolved.
    """
    submission_dir: Optional[Path] = Field(None, description="Directory containing the student's transcription.py")
    ground_truth_path: Optional[Path] = Field(None, description="Path to the ground-truth transcript")
    result_path: Optional[Path] = Field(None, description="Where to save the evaluation result JSON")
    target_image_url: Optional[str] = Field(None, description="Fallback image URL when TARGET_IMAGE_URL is unset")

    student_module: str = Field(STUDENT_MODULE, description="Module name of the student submission")
    target_function: str = Field(TARGET_FUNCTION, description="Function to call in the student module")

    # Metric policy
    tokenization: TokenizationPolicy = Field(
        TokenizationPolicy(DEFAULT_TOKENIZATION), description="Edit-distance unit: character or word"
    )
    make_lowercase: bool = Field(False, description="Lowercase both texts before comparing")
    remove_punctuation: bool = Field(False, description="Strip punctuation from both texts before comparing")

    invocation_timeout_seconds: Optional[float] = Field(
        None, gt=0, description="Ceiling for the student call (None = no ceiling)"
    )
    verbose: bool = Field(False, description="Enable verbose output")


class GraderSettings(BaseModel):
    """
    Fully resolved settings for one grading run.

    Built once at start-up by ``resolve_settings`` and passed to the
    pipeline; nothing downstream reads the environment directly.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(..., repr=False, description="Credential handed to the student code")
    target_image_url: str = Field(..., description="Image the student must transcribe")
    submission_dir: Path = Field(..., description="Directory containing the student module")
    ground_truth_path: Path = Field(..., description="Path to the ground-truth transcript")
    result_path: Path = Field(..., description="Where to save the evaluation result JSON")
    student_module: str = Field(STUDENT_MODULE, description="Module name of the student submission")
    target_function: str = Field(TARGET_FUNCTION, description="Function to call in the student module")
    tokenization: TokenizationPolicy = Field(TokenizationPolicy.CHARACTER, description="Edit-distance unit")
    make_lowercase: bool = Field(False, description="Lowercase both texts before comparing")
    remove_punctuation: bool = Field(False, description="Strip punctuation before comparing")
    invocation_timeout_seconds: Optional[float] = Field(None, gt=0, description="Student call ceiling")
    verbose: bool = Field(False, description="Enable verbose output")


def load_config(config_path: Path) -> GraderConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        GraderConfig object with loaded values.

    Raises:
        ConfigurationError: If the file doesn't exist, is invalid YAML,
            or holds invalid values.
    """
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not config_data:
        return GraderConfig()

    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")

    # Resolve relative paths relative to the config file location
    config_dir = config_path.parent
    for path_field in ["submission_dir", "ground_truth_path", "result_path"]:
        if path_field in config_data and config_data[path_field]:
            path = Path(config_data[path_field])
            if not path.is_absolute():
                config_data[path_field] = config_dir / path

    try:
        return GraderConfig(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e


def _require_env(environ: Mapping[str, str], name: str, fallback: str | None = None) -> str:
    value = (environ.get(name) or fallback or "").strip()
    if not value:
        raise ConfigurationError(f"Environment variable {name} is not set.")
    return value


def resolve_settings(
    config: GraderConfig,
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> GraderSettings:
    """
    Resolve the grading settings from config, environment and CLI overrides.

    CLI overrides win over the YAML config; ``None`` overrides are ignored.
    ``TARGET_IMAGE_URL`` wins over ``target_image_url`` from the config.

    Args:
        config: Parsed YAML configuration (or defaults).
        environ: Environment mapping. Defaults to ``os.environ``.
        **overrides: Values from the command line.

    Returns:
        Frozen GraderSettings.

    Raises:
        ConfigurationError: If the credential or target URL is missing,
            or an override is invalid.
    """
    if environ is None:
        environ = os.environ

    values = config.model_dump()
    values.update({key: value for key, value in overrides.items() if value is not None})

    target_image_url = _require_env(environ, URL_ENV_VAR, fallback=values.pop("target_image_url"))
    api_key = _require_env(environ, API_KEY_ENV_VAR)

    submission_dir = Path(values.pop("submission_dir") or DEFAULT_SUBMISSION_DIR)
    ground_truth_path = values.pop("ground_truth_path") or submission_dir / GROUND_TRUTH_FILENAME
    result_path = values.pop("result_path") or submission_dir / RESULT_FILENAME

    try:
        return GraderSettings(
            api_key=api_key,
            target_image_url=target_image_url,
            submission_dir=submission_dir,
            ground_truth_path=Path(ground_truth_path),
            result_path=Path(result_path),
            **values,
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid grader settings: {e}") from e
