"""
Runner for the student's transcription function.

Imports the student module from the submission directory and calls its
entry point, turning any crash inside the student code into an
``InvocationResult`` instead of letting it abort the grading run.
"""

import importlib
import sys
import threading
import time
import traceback
from pathlib import Path
from typing import Any, Callable

from .config import STUDENT_MODULE, TARGET_ARGUMENT, TARGET_FUNCTION
from .errors import EntryPointError, ReturnTypeError, StudentModuleError
from .models import InvocationResult


TranscriptionFunction = Callable[..., Any]


class InvocationTimeout(Exception):
    """The student function outlived the configured ceiling."""


_NO_VALUE = object()


class StudentRunner:
    """
    Runs the student's transcription function in-process.

    Module import problems and contract violations are raised as
    ``IntegrationError`` subclasses; exceptions raised while the
    function runs are captured in the returned ``InvocationResult``.
    """

    def __init__(
        self,
        submission_dir: Path,
        module_name: str = STUDENT_MODULE,
        function_name: str = TARGET_FUNCTION,
        timeout_seconds: float | None = None,
    ) -> None:
        """
        Initialize the student runner.

        Args:
            submission_dir: Directory containing the student module.
            module_name: Module to import (filename without .py).
            function_name: Function to call inside the module.
            timeout_seconds: Optional ceiling for a single call.
        """
        self.submission_dir = submission_dir
        self.module_name = module_name
        self.function_name = function_name
        self.timeout_seconds = timeout_seconds

    def load_entry_point(self) -> TranscriptionFunction:
        """
        Import the student module and return its transcription function.

        Returns:
            The callable named ``function_name``.

        Raises:
            StudentModuleError: If the module cannot be imported.
            EntryPointError: If the function is missing or not callable.
        """
        submission_path = str(self.submission_dir.resolve())
        if submission_path not in sys.path:
            sys.path.insert(0, submission_path)

        # A module with the same name may be cached from an earlier import
        sys.modules.pop(self.module_name, None)
        importlib.invalidate_caches()

        try:
            module = importlib.import_module(self.module_name)
        except Exception as e:
            raise StudentModuleError(
                f"Could not import {self.module_name}.py. Check for syntax errors. ({type(e).__name__}: {e})"
            ) from e

        if not hasattr(module, self.function_name):
            raise EntryPointError(f"Function '{self.function_name}' not found in {self.module_name}.py.")

        func = getattr(module, self.function_name)
        if not callable(func):
            raise EntryPointError(f"'{self.function_name}' in {self.module_name}.py is not a function.")

        return func

    def invoke(self, func: TranscriptionFunction, image_url: str) -> InvocationResult:
        """
        Call the transcription function with the target image URL.

        Args:
            func: The student's transcription function.
            image_url: URL passed as the ``image_url`` keyword argument.

        Returns:
            InvocationResult with the stripped transcription, or with
            ``transcription=None`` if the function raised or timed out.

        Raises:
            ReturnTypeError: If the function returned a non-string value.
        """
        print(f"--- Executing {self.module_name}.{self.function_name}({TARGET_ARGUMENT}='{image_url}') ---")
        start = time.monotonic()

        try:
            transcription = self._call(func, image_url)
        except InvocationTimeout:
            duration = time.monotonic() - start
            print(f"ERROR: '{self.function_name}' did not finish within {self.timeout_seconds} seconds.")
            return InvocationResult(
                error=f"Timed out after {self.timeout_seconds} seconds",
                timed_out=True,
                duration_seconds=duration,
            )
        except (Exception, SystemExit) as e:
            # SystemExit from student code must not end the grading run
            duration = time.monotonic() - start
            print(f"ERROR: An error occurred while running the student script '{self.module_name}.py'.")
            print("--- Error Traceback ---")
            traceback.print_exc()
            print("--- End Traceback ---")
            return InvocationResult(
                error=f"{type(e).__name__}: {e}",
                duration_seconds=duration,
            )

        duration = time.monotonic() - start

        if not isinstance(transcription, str):
            raise ReturnTypeError(
                f"The '{self.function_name}' function did not return a string. "
                f"Returned type: {type(transcription)}"
            )

        print(f"Student script executed successfully in {duration:.1f}s.")
        return InvocationResult(transcription=transcription.strip(), duration_seconds=duration)

    def _call(self, func: TranscriptionFunction, image_url: str) -> Any:
        """
        Call ``func`` directly, or on a daemon thread when a timeout is set.

        Raises:
            InvocationTimeout: If the call outlives ``timeout_seconds``.
        """
        kwargs = {TARGET_ARGUMENT: image_url}
        if self.timeout_seconds is None:
            return func(**kwargs)

        outcome: dict[str, Any] = {}

        def target() -> None:
            try:
                outcome["value"] = func(**kwargs)
            except (Exception, SystemExit) as e:
                outcome["error"] = e

        # Daemon so an abandoned call cannot keep the process alive
        worker = threading.Thread(target=target, name="student-transcription", daemon=True)
        worker.start()
        worker.join(self.timeout_seconds)

        if worker.is_alive():
            raise InvocationTimeout(f"{self.function_name} timed out")
        if "error" in outcome:
            raise outcome["error"]
        value = outcome.get("value", _NO_VALUE)
        if value is _NO_VALUE:
            raise RuntimeError(f"{self.function_name} finished without returning a value")
        return value
