"""
Process execution for job scripts.

Commands run either on the host or inside the install target. Target
commands are wrapped in ``chroot <rootMountPoint>`` unless chroot is switched
off in the settings; the root mount point is read from global storage.
"""

import shlex
import subprocess
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import psutil

from scriptjob.settings import get_settings
from scriptjob.storage.ports import IGlobalStorage
from scriptjob.utils.loggers import get_logger

logger = get_logger(__name__)

Command = Union[str, Sequence[str]]
OutputCallback = Callable[[str], None]


class RunLocation(str, Enum):
    """Where a command runs."""

    HOST = "host"
    TARGET = "target"


class ProcessCode(IntEnum):
    """
    Negative result codes for commands that did not exit normally.

    Non-negative codes are the program's own exit status.
    """

    CRASHED = -1
    FAILED_TO_START = -2
    NO_WORKING_DIRECTORY = -3
    TIMED_OUT = -4


@dataclass(frozen=True)
class ProcessResult:
    """
    Outcome of one command.

    Attributes:
        code: Exit status, or a negative ProcessCode
        output: Merged standard output and standard error
        command: The argument list that was (or would have been) started
    """

    code: int
    output: str = ""
    command: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.code == 0


def as_command_list(command: Command) -> List[str]:
    """Accept a list of arguments or a shell-like command string."""
    if isinstance(command, str):
        return shlex.split(command)
    return [str(arg) for arg in command]


class IProcessRunner(ABC):
    """
    Port interface for running external commands.
    """

    @abstractmethod
    def run(
        self,
        command: Command,
        *,
        location: RunLocation = RunLocation.TARGET,
        input: str = "",
        timeout: float = 0,
        working_path: Optional[str] = None,
        on_output: Optional[OutputCallback] = None,
    ) -> ProcessResult:
        """
        Run a command to completion.

        Args:
            command: Argument list or shell-like string
            location: Host or install target
            input: Text written to the command's standard input
            timeout: Seconds before the command is killed, fractions allowed;
                0 means no limit
            working_path: Working directory for the command
            on_output: Called with each line of output, without the newline

        Returns:
            ProcessResult; never raises for command failures
        """
        pass


class SubprocessRunner(IProcessRunner):
    """
    Runs commands with subprocess, killing the whole process tree on timeout.
    """

    def __init__(
        self,
        storage: Optional[IGlobalStorage] = None,
        do_chroot: Optional[bool] = None,
    ):
        self.storage = storage
        self.do_chroot = get_settings().do_chroot if do_chroot is None else do_chroot

    def _resolve(self, args: List[str], location: RunLocation) -> Optional[List[str]]:
        if location is RunLocation.HOST or not self.do_chroot:
            return args

        root = self.storage.value("rootMountPoint") if self.storage else None
        if not root:
            logger.warning("No rootMountPoint in global storage", command=args)
            return None
        return ["chroot", str(root)] + args

    def run(
        self,
        command: Command,
        *,
        location: RunLocation = RunLocation.TARGET,
        input: str = "",
        timeout: float = 0,
        working_path: Optional[str] = None,
        on_output: Optional[OutputCallback] = None,
    ) -> ProcessResult:
        try:
            args = as_command_list(command)
        except ValueError as e:
            logger.warning("Could not parse command", command=command, error=str(e))
            return ProcessResult(ProcessCode.FAILED_TO_START, str(e), [])
        if not args:
            logger.warning("Refusing to run an empty command")
            return ProcessResult(ProcessCode.FAILED_TO_START, "", args)

        argv = self._resolve(args, RunLocation(location))
        if argv is None:
            return ProcessResult(
                ProcessCode.NO_WORKING_DIRECTORY,
                "No rootMountPoint in global storage",
                args,
            )

        if working_path and not Path(working_path).is_dir():
            logger.warning("Working directory does not exist", working_path=working_path)
            return ProcessResult(ProcessCode.NO_WORKING_DIRECTORY, "", argv)

        logger.debug("Running command", command=argv, location=location, timeout=timeout)
        try:
            process = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE if input else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                cwd=working_path,
                text=True,
                errors="replace",
                start_new_session=True,
            )
        except OSError as e:
            logger.warning("Command failed to start", command=argv, error=str(e))
            return ProcessResult(ProcessCode.FAILED_TO_START, str(e), argv)

        timed_out = threading.Event()
        timer = None
        if timeout and timeout > 0:
            timer = threading.Timer(timeout, self._kill_tree, args=(process, timed_out))
            timer.daemon = True
            timer.start()

        if input:
            feeder = threading.Thread(target=self._feed, args=(process, input), daemon=True)
            feeder.start()

        lines: List[str] = []
        try:
            for line in process.stdout:
                lines.append(line)
                if on_output is not None:
                    on_output(line.rstrip("\n"))
            process.wait()
        finally:
            if timer is not None:
                timer.cancel()
            if process.poll() is None:
                # the output callback raised; do not leave the command behind
                self._kill_tree(process)
                process.wait()
            process.stdout.close()

        output = "".join(lines)
        if timed_out.is_set():
            logger.warning("Command timed out", command=argv, timeout=timeout)
            code = int(ProcessCode.TIMED_OUT)
        elif process.returncode < 0:
            logger.warning("Command crashed", command=argv, signal=-process.returncode)
            code = int(ProcessCode.CRASHED)
        else:
            code = process.returncode

        if code != 0:
            logger.debug("Command finished", command=argv, code=code)
        return ProcessResult(code, output, argv)

    @staticmethod
    def _feed(process: subprocess.Popen, text: str) -> None:
        try:
            process.stdin.write(text)
            process.stdin.close()
        except (BrokenPipeError, ValueError):
            # the command exited without reading all of its input
            pass

    @staticmethod
    def _kill_tree(process: subprocess.Popen, timed_out: Optional[threading.Event] = None) -> None:
        if timed_out is not None:
            timed_out.set()
        try:
            parent = psutil.Process(process.pid)
            victims = parent.children(recursive=True) + [parent]
        except psutil.NoSuchProcess:
            return
        for victim in victims:
            try:
                victim.kill()
            except psutil.NoSuchProcess:
                pass
