from scriptjob.api.host_api import build_host_module, install_host_api
from scriptjob.api.proxies import GlobalStorageProxy, JobProxy
from scriptjob.api.utils import HostUtils

__all__ = [
    "GlobalStorageProxy",
    "HostUtils",
    "JobProxy",
    "build_host_module",
    "install_host_api",
]
