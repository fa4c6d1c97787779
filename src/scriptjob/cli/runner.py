"""
Module loading and execution for the CLI
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from scriptjob.errors import ModuleDescriptorError
from scriptjob.job.descriptor import JobDescriptor, JobOptions
from scriptjob.job.python_job import PythonJob
from scriptjob.job.result import JobResult
from scriptjob.settings import Settings, get_settings
from scriptjob.storage.global_storage import GlobalStorage
from scriptjob.utils.loggers import get_logger

DESCRIPTOR_FILE = "module.desc"
DEFAULT_SCRIPT = "main.py"


def _read_mapping(path: Path, what: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ModuleDescriptorError(f"Cannot read {what} {path}", str(e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ModuleDescriptorError(f"The {what} {path} is not a YAML mapping")
    return data


class ModuleRunner:
    """
    Runs one module directory as a Python job, the way the job queue would.
    """

    def __init__(
        self,
        storage: Optional[GlobalStorage] = None,
        options: Optional[JobOptions] = None,
        settings: Optional[Settings] = None,
    ):
        self.logger = get_logger(__name__)
        self.storage = storage if storage is not None else GlobalStorage()
        self.options = options or JobOptions()
        self.settings = settings or get_settings()
        self.progress: List[float] = []
        self.job: Optional[PythonJob] = None

    def load_descriptor(
        self,
        module_dir: str,
        script: Optional[str] = None,
        config_path: Optional[str] = None,
    ) -> JobDescriptor:
        """
        Build a job descriptor for ``module_dir``.

        The script comes from ``script``, else the ``script`` key of
        module.desc, else main.py. The configuration comes from
        ``config_path``, else ``<module>.conf`` in the module directory.
        """
        directory = Path(module_dir)
        if not directory.is_dir():
            raise ModuleDescriptorError(f"Module directory not found: {module_dir}")

        desc: Dict[str, Any] = {}
        desc_path = directory / DESCRIPTOR_FILE
        if desc_path.exists():
            desc = _read_mapping(desc_path, "module descriptor")
            interface = desc.get("interface", "python")
            if interface != "python":
                raise ModuleDescriptorError(
                    f"Module {directory.name} has interface {interface!r}, not 'python'"
                )

        configuration: Dict[str, Any] = {}
        if config_path:
            configuration = _read_mapping(Path(config_path), "configuration")
        else:
            default_config = directory / f"{directory.name}.conf"
            if default_config.exists():
                configuration = _read_mapping(default_config, "configuration")

        descriptor = JobDescriptor(
            script_file=script or str(desc.get("script", DEFAULT_SCRIPT)),
            working_path=str(directory),
            configuration=configuration,
            module_name=desc.get("name"),
        )
        self.logger.debug(
            "Loaded module",
            module=descriptor.name,
            script=descriptor.script_file,
            config_keys=len(configuration),
        )
        return descriptor

    def run(self, descriptor: JobDescriptor) -> JobResult:
        self.job = PythonJob(descriptor, self.storage, self.options, settings=self.settings)
        self.job.on_progress(self.progress.append)
        self.logger.info("Running module", module=descriptor.name)
        result = self.job.exec()
        self.logger.info(
            "Module finished",
            module=descriptor.name,
            kind=result.kind.value,
            summary=result.summary,
        )
        return result
