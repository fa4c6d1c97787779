"""
Assembly of the host API module guest scripts import.
"""

from types import ModuleType
from typing import TYPE_CHECKING, Optional

from scriptjob.api.proxies import GlobalStorageProxy, JobProxy
from scriptjob.api.utils import HostUtils
from scriptjob.settings import Settings, get_settings
from scriptjob.storage.ports import IGlobalStorage
from scriptjob.system.process import IProcessRunner

if TYPE_CHECKING:
    from scriptjob.job.python_job import PythonJob
    from scriptjob.runtime.interpreter import GuestInterpreter


def build_host_module(
    job_proxy: JobProxy,
    storage_proxy: GlobalStorageProxy,
    utils: HostUtils,
    settings: Optional[Settings] = None,
) -> ModuleType:
    settings = settings or get_settings()
    module = ModuleType(settings.host_module_name, "Host API for Python job scripts")

    module.ORGANIZATION_NAME = settings.organization_name
    module.ORGANIZATION_DOMAIN = settings.organization_domain
    module.APPLICATION_NAME = settings.application_name
    module.VERSION = settings.version
    module.VERSION_SHORT = settings.version_short

    module.Job = JobProxy
    module.GlobalStorage = GlobalStorageProxy
    module.utils = utils
    module.job = job_proxy
    module.globalstorage = storage_proxy
    return module


def install_host_api(
    interpreter: "GuestInterpreter",
    job: "PythonJob",
    storage: IGlobalStorage,
    runner: IProcessRunner,
    settings: Settings,
) -> ModuleType:
    """
    Build fresh proxies for ``job`` and bind them into the interpreter.

    The guest sees ``job``, ``globalstorage`` and ``utils`` at the top level
    and can also ``import`` the host module by name.
    """
    job_proxy = JobProxy(job)
    storage_proxy = GlobalStorageProxy(storage)
    utils = HostUtils(job.module_name, storage, runner, settings)
    module = build_host_module(job_proxy, storage_proxy, utils, settings)
    interpreter.install(
        module,
        {"job": job_proxy, "globalstorage": storage_proxy, "utils": utils},
    )
    return module
