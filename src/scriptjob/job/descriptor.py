"""
Job descriptor and per-job options
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from scriptjob.errors import ModuleDescriptorError


@dataclass(frozen=True)
class JobDescriptor:
    """
    What to run for one Python job.

    Attributes:
        script_file: Script path, relative to working_path
        working_path: The module directory the job runs from
        configuration: Module configuration handed to the script
        module_name: Name reported to the script; defaults to the directory name
    """

    script_file: str
    working_path: str
    configuration: Dict[str, Any] = field(default_factory=dict)
    module_name: Optional[str] = None

    @property
    def pretty_name(self) -> str:
        return Path(self.working_path).name

    @property
    def name(self) -> str:
        return self.module_name or self.pretty_name


@dataclass(frozen=True)
class JobOptions:
    """
    Host-side options shared by the jobs that are given them.

    Attributes:
        pre_script: Python source run before every job script, in the same
            namespace. Mostly useful in tests to patch the host API.
    """

    pre_script: Optional[str] = None

    @classmethod
    def from_file(cls, path: Optional[str]) -> "JobOptions":
        if not path:
            return cls()
        try:
            return cls(pre_script=Path(path).read_text(encoding="utf-8"))
        except OSError as e:
            raise ModuleDescriptorError(f"Cannot read pre-script {path}", str(e)) from e
