"""
Objects handed to guest scripts as ``job`` and ``globalstorage``
"""

import copy
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from scriptjob.storage.global_storage import GlobalStorage
from scriptjob.storage.ports import IGlobalStorage

if TYPE_CHECKING:
    from scriptjob.job.python_job import PythonJob


class JobProxy:
    """
    Read-only view of the running job.

    The configuration is a copy taken when the proxy is built; changing it
    does not affect the job.
    """

    def __init__(self, job: "PythonJob"):
        self._job = job
        self._module_name = job.module_name
        self._pretty_name = job.pretty_name
        self._working_path = job.working_path
        self._configuration = copy.deepcopy(dict(job.configuration))

    @property
    def module_name(self) -> str:
        return self._module_name

    @property
    def pretty_name(self) -> str:
        return self._pretty_name

    @property
    def working_path(self) -> str:
        return self._working_path

    @property
    def configuration(self) -> Dict[str, Any]:
        return self._configuration

    def setprogress(self, value: float) -> None:
        """Report progress, usually between 0 and 1."""
        self._job.emit_progress(float(value))

    def __repr__(self) -> str:
        return f"Job(module_name={self._module_name!r}, working_path={self._working_path!r})"


class GlobalStorageProxy:
    """
    Forwards every call straight to the shared store.

    Constructed without a store (as test scripts do), it gets a private one.
    """

    def __init__(self, storage: Optional[IGlobalStorage] = None):
        self._storage = storage if storage is not None else GlobalStorage()

    def contains(self, key: str) -> bool:
        return self._storage.contains(key)

    def count(self) -> int:
        return self._storage.count()

    def insert(self, key: str, value: Any) -> None:
        self._storage.insert(key, value)

    def keys(self) -> List[str]:
        return self._storage.keys()

    def remove(self, key: str) -> int:
        return self._storage.remove(key)

    def value(self, key: str) -> Any:
        return self._storage.value(key)

    def __repr__(self) -> str:
        return f"GlobalStorage(count={self._storage.count()})"
