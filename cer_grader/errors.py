"""
Exceptions raised by the CER Grader.

Configuration and integration errors are fatal: they abort the run
before any score is produced. Failures inside the student's function
are not exceptions at this level, see ``InvocationResult``.
"""


class GraderError(Exception):
    """Base class for all fatal grading errors."""


class ConfigurationError(GraderError):
    """The grading environment is misconfigured (missing variables, bad config)."""


class GroundTruthError(ConfigurationError):
    """The ground-truth transcript is missing, unreadable or empty."""


class IntegrationError(GraderError):
    """The student submission does not honor the function contract."""


class StudentModuleError(IntegrationError):
    """The student module could not be imported."""


class EntryPointError(IntegrationError):
    """The target function is missing from the student module."""


class ReturnTypeError(IntegrationError):
    """The target function returned something other than a string."""
