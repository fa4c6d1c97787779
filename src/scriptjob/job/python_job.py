"""
Python job: runs one guest script and reports its outcome as a JobResult.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from scriptjob.api.host_api import install_host_api
from scriptjob.errors import HostApiInstallError
from scriptjob.job import contract
from scriptjob.job.descriptor import JobDescriptor, JobOptions
from scriptjob.job.reporter import ProgressListener, ProgressReporter, derive_description
from scriptjob.job.result import JobResult
from scriptjob.runtime import translator
from scriptjob.runtime.interpreter import GuestInterpreter, scoped_interpreter
from scriptjob.settings import Settings, get_settings
from scriptjob.storage.ports import IGlobalStorage
from scriptjob.system.process import IProcessRunner, SubprocessRunner
from scriptjob.utils.loggers import get_logger


class LifecycleState(str, Enum):
    UNVALIDATED = "unvalidated"
    VALIDATED = "validated"
    RUNTIME_ACQUIRED = "runtime_acquired"
    API_INSTALLED = "api_installed"
    PRE_SCRIPT_RUN = "pre_script_run"
    SCRIPT_LOADED = "script_loaded"
    ENTRY_INVOKED = "entry_invoked"
    FINALIZED = "finalized"


class PythonJob:
    """
    A job backed by a Python script in a module directory.

    exec() validates the module directory and script, runs the script in a
    fresh interpreter with the host API installed, calls its run() function
    and translates the outcome. Every script failure comes back as a
    JobResult; only a failure to install the host API is raised.
    """

    def __init__(
        self,
        descriptor: JobDescriptor,
        storage: IGlobalStorage,
        options: Optional[JobOptions] = None,
        runner: Optional[IProcessRunner] = None,
        settings: Optional[Settings] = None,
    ):
        self.descriptor = descriptor
        self.storage = storage
        self.options = options or JobOptions()
        self.settings = settings or get_settings()
        self.runner = runner or SubprocessRunner(storage, do_chroot=self.settings.do_chroot)
        self.description = ""
        self.state = LifecycleState.UNVALIDATED
        self._progress = ProgressReporter()
        self.logger = get_logger(__name__, module=self.module_name)

    @property
    def module_name(self) -> str:
        return self.descriptor.name

    @property
    def pretty_name(self) -> str:
        return self.descriptor.pretty_name

    @property
    def working_path(self) -> str:
        return self.descriptor.working_path

    @property
    def configuration(self) -> Dict[str, Any]:
        return self.descriptor.configuration

    @property
    def script_path(self) -> str:
        """Absolute path of the job script; symlinks are not resolved."""
        return str((Path(self.working_path) / self.descriptor.script_file).absolute())

    def pretty_status_message(self) -> str:
        if self.description:
            return self.description
        return f"Running {self.pretty_name} operation."

    def on_progress(self, listener: ProgressListener) -> None:
        self._progress.subscribe(listener)

    def emit_progress(self, value: float) -> None:
        self._progress.emit(value)

    def _advance(self, state: LifecycleState) -> None:
        self.state = state
        self.logger.debug("Job state changed", state=state.value)

    def exec(self) -> JobResult:
        self.state = LifecycleState.UNVALIDATED
        try:
            return self._exec()
        finally:
            self._advance(LifecycleState.FINALIZED)

    def _validate(self) -> Optional[JobResult]:
        working_dir = Path(self.working_path)
        if not working_dir.is_dir() or not os.access(working_dir, os.R_OK):
            self.logger.error("Working directory is not readable", working_path=self.working_path)
            return translator.bad_working_directory(self.working_path, self.pretty_name)

        script_path = Path(self.script_path)
        if not script_path.is_file() or not os.access(script_path, os.R_OK):
            self.logger.error("Main script file is not readable", script=str(script_path))
            return translator.bad_script_file(str(script_path), self.pretty_name)
        return None

    def _exec(self) -> JobResult:
        invalid = self._validate()
        if invalid is not None:
            return invalid
        self._advance(LifecycleState.VALIDATED)

        script_path = self.script_path
        with scoped_interpreter(self.working_path) as interpreter:
            self._advance(LifecycleState.RUNTIME_ACQUIRED)
            self._install_host_api(interpreter)
            self._advance(LifecycleState.API_INSTALLED)

            if self.options.pre_script:
                raised = contract.capture_exception(
                    lambda: interpreter.exec_source(self.options.pre_script, "<pre-script>")
                )
                if raised is not None:
                    self.logger.error("Error in pre-script", error=raised.message, traceback=raised.traceback)
                    return translator.pre_script_failed(self.pretty_name, raised)
            self._advance(LifecycleState.PRE_SCRIPT_RUN)

            raised = contract.capture_exception(lambda: interpreter.exec_file(script_path))
            if raised is not None:
                self.logger.error("Error while loading", script=script_path, error=raised.message, traceback=raised.traceback)
                return translator.script_load_failed(script_path, self.pretty_name, raised)
            self._advance(LifecycleState.SCRIPT_LOADED)

            self.description = derive_description(interpreter.namespace)
            self.emit_progress(0)

            if contract.ENTRY_POINT not in interpreter.namespace:
                self.logger.error("Script has no run() function", script=script_path)
                return translator.missing_entry_point(script_path, self.pretty_name)

            outcome = contract.invoke_entry_point(interpreter.namespace[contract.ENTRY_POINT])
            self._advance(LifecycleState.ENTRY_INVOKED)

            if isinstance(outcome, contract.Raised):
                self.logger.error("Error while running", script=script_path, error=outcome.message, traceback=outcome.traceback)
            elif isinstance(outcome, contract.MalformedReturn):
                self.logger.error("Invalid results from run()", script=script_path, type=outcome.value_type, reason=outcome.reason)
            return translator.translate_run_outcome(outcome, script_path, self.pretty_name)

    def _install_host_api(self, interpreter: GuestInterpreter) -> None:
        try:
            install_host_api(interpreter, self, self.storage, self.runner, self.settings)
        except Exception as e:
            self.logger.error("Error installing host API", error=str(e), exc_info=True)
            # a host bug, not a script bug: never a JobResult
            raise HostApiInstallError(
                "Could not install the host API", str(e), module=self.module_name
            ) from e

    def __repr__(self) -> str:
        return f"PythonJob(module={self.module_name!r}, script={self.descriptor.script_file!r})"
