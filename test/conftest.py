import logging
import textwrap
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from scriptjob.job.descriptor import JobDescriptor, JobOptions
from scriptjob.job.python_job import PythonJob
from scriptjob.settings import Settings
from scriptjob.storage.global_storage import GlobalStorage
from scriptjob.system.process import IProcessRunner, ProcessResult, RunLocation, as_command_list
from scriptjob.utils.loggers import configure_default_logging


class FakeRunner(IProcessRunner):
    """Records commands and answers with a canned result."""

    def __init__(self, code: int = 0, output: str = "", lines: Optional[List[str]] = None):
        self.code = code
        self.output = output
        self.lines = lines or []
        self.calls = []

    def run(self, command, *, location=RunLocation.TARGET, input="", timeout=0, working_path=None, on_output=None):
        args = as_command_list(command)
        self.calls.append(
            {"command": args, "location": location, "input": input, "timeout": timeout}
        )
        if on_output is not None:
            for line in self.lines:
                on_output(line)
        return ProcessResult(self.code, self.output, args)


@pytest.fixture
def settings() -> Settings:
    return Settings(do_chroot=False, locale_dirs=[])


@pytest.fixture
def storage() -> GlobalStorage:
    return GlobalStorage()


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_module(tmp_path) -> Callable[..., Path]:
    """Create a module directory holding a job script."""

    def _make(source: str, name: str = "testmodule", script: str = "main.py", **extra_files: str) -> Path:
        module_dir = tmp_path / name
        module_dir.mkdir(exist_ok=True)
        (module_dir / script).write_text(textwrap.dedent(source), encoding="utf-8")
        for filename, content in extra_files.items():
            (module_dir / filename).write_text(textwrap.dedent(content), encoding="utf-8")
        return module_dir

    return _make


@pytest.fixture
def make_job(storage, fake_runner, settings) -> Callable[..., PythonJob]:
    def _make(
        module_dir,
        script: str = "main.py",
        configuration=None,
        pre_script: Optional[str] = None,
    ) -> PythonJob:
        descriptor = JobDescriptor(
            script_file=script,
            working_path=str(module_dir),
            configuration=configuration or {},
        )
        return PythonJob(
            descriptor,
            storage,
            JobOptions(pre_script=pre_script),
            runner=fake_runner,
            settings=settings,
        )

    return _make


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo configure_logging() so handlers never outlive a captured stream."""
    yield
    configure_default_logging()
    logging.root.setLevel(logging.WARNING)
    for handler in list(logging.root.handlers):
        logging.root.removeHandler(handler)
