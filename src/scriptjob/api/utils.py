"""
The ``utils`` namespace of the host API.

Logging, YAML loading, process helpers, translations lookup and mount, bound
to the job that is running.
"""

import subprocess
from typing import Any, Callable, List, Optional, Union

import yaml

from scriptjob.errors import YAMLLoadError
from scriptjob.settings import Settings
from scriptjob.storage.ports import IGlobalStorage
from scriptjob.system import mount as mount_utility
from scriptjob.system import translations
from scriptjob.system.process import Command, IProcessRunner, ProcessResult, RunLocation
from scriptjob.utils.loggers import get_logger
from scriptjob.utils.strings import obscure as obscure_text

OutputSink = Union[None, list, Callable[[str], Any]]


def _output_callback(callback: OutputSink) -> Optional[Callable[[str], Any]]:
    if callback is None:
        return None
    if isinstance(callback, list):
        return callback.append
    if callable(callback):
        return callback
    raise TypeError(f"callback must be a list or callable, not {type(callback).__name__}")


def _check(result: ProcessResult) -> ProcessResult:
    if result.code != 0:
        raise subprocess.CalledProcessError(result.code, result.command, output=result.output)
    return result


class HostUtils:
    def __init__(
        self,
        module_name: str,
        storage: IGlobalStorage,
        runner: IProcessRunner,
        settings: Settings,
    ):
        self._storage = storage
        self._runner = runner
        self._settings = settings
        self._logger = get_logger("scriptjob.guest", module=module_name, source="guest")

    def debug(self, message: str) -> None:
        self._logger.debug(str(message))

    def warning(self, message: str) -> None:
        self._logger.warning(str(message))

    warn = warning

    def error(self, message: str) -> None:
        self._logger.error(str(message))

    @staticmethod
    def obscure(text: str) -> str:
        """Obscure (reversibly encode) a string."""
        return obscure_text(text)

    def load_yaml(self, path: str) -> Any:
        """
        Load a YAML file.

        Raises:
            YAMLLoadError: If the file cannot be read or parsed
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            self._logger.warning("Could not load YAML", path=path, error=str(e))
            raise YAMLLoadError(path, str(e)) from e

    def _run(
        self,
        command_list: Command,
        location: RunLocation,
        input: str = "",
        timeout: float = 0,
        callback: OutputSink = None,
    ) -> ProcessResult:
        return self._runner.run(
            command_list,
            location=location,
            input=input or "",
            timeout=float(timeout or 0),
            on_output=_output_callback(callback),
        )

    def target_env_call(self, command_list: Command, input: str = "", timeout: float = 0) -> int:
        """Run a command in the target; returns its exit code."""
        return self._run(command_list, RunLocation.TARGET, input, timeout).code

    def check_target_env_call(self, command_list: Command, input: str = "", timeout: float = 0) -> int:
        """Run a command in the target; raises CalledProcessError on failure."""
        return _check(self._run(command_list, RunLocation.TARGET, input, timeout)).code

    def check_target_env_output(self, command_list: Command, input: str = "", timeout: float = 0) -> str:
        """Run a command in the target; returns its output or raises CalledProcessError."""
        return _check(self._run(command_list, RunLocation.TARGET, input, timeout)).output

    def target_env_process_output(
        self, command_list: Command, callback: OutputSink = None, input: str = "", timeout: float = 0
    ) -> str:
        """
        Run a command in the target, passing each output line to ``callback``.

        ``callback`` may be a callable or a list to append lines to.
        """
        return _check(self._run(command_list, RunLocation.TARGET, input, timeout, callback)).output

    def host_env_process_output(
        self, command_list: Command, callback: OutputSink = None, input: str = "", timeout: float = 0
    ) -> str:
        """Same as target_env_process_output(), but runs on the host."""
        return _check(self._run(command_list, RunLocation.HOST, input, timeout, callback)).output

    def gettext_languages(self) -> List[str]:
        return translations.gettext_languages(self._storage)

    def gettext_path(self) -> Optional[str]:
        return translations.gettext_path(self._storage, self._settings.locale_dirs)

    def mount(
        self, device_path: str, mount_point: str, filesystem_name: str = "", options: str = ""
    ) -> int:
        """
        Run the mount utility.

        Returns the program's exit code, or:
        -1 = process crashed
        -2 = process failed to start
        -3 = bad arguments
        """
        return mount_utility.mount(
            self._runner,
            device_path,
            mount_point,
            filesystem_name,
            options,
            timeout=self._settings.mount_timeout,
        )
