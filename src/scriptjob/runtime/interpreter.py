"""
Per-execution interpreter scope for guest scripts.

A GuestInterpreter is a fresh top-level namespace plus the process state a
guest script sees while it runs: the host API module in sys.modules and the
module directory on sys.path. Both are undone on release, and modules the
script imported from its own directory are dropped.
"""

import builtins
import sys
import threading
from contextlib import contextmanager
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, Iterator, Mapping, Optional

from scriptjob.utils.loggers import get_logger

logger = get_logger(__name__)

# sys.modules and sys.path are process-wide, so scopes must not overlap
_SCOPE_LOCK = threading.RLock()

_MISSING = object()


def _is_within(path: str, directory: str) -> bool:
    try:
        Path(path).resolve().relative_to(directory)
    except (ValueError, OSError):
        return False
    return True


class GuestInterpreter:
    """
    One guest execution environment. Not reusable after release().
    """

    def __init__(self, working_path: str):
        self.working_path = str(Path(working_path).resolve())
        self.namespace: Dict[str, Any] = {
            "__name__": "__main__",
            "__doc__": None,
            "__builtins__": builtins,
        }
        self.released = False
        self._host_module_name: Optional[str] = None
        self._saved_host_module: Any = _MISSING
        self._modules_before = set(sys.modules)
        sys.path.insert(0, self.working_path)

    def install(self, host_module: ModuleType, bindings: Mapping[str, Any]) -> None:
        """
        Make ``host_module`` importable and bind it, plus ``bindings``, at
        the top level of the namespace.
        """
        name = host_module.__name__
        self._host_module_name = name
        self._saved_host_module = sys.modules.get(name, _MISSING)
        sys.modules[name] = host_module
        self.namespace[name] = host_module
        self.namespace.update(bindings)

    def exec_source(self, source: str, filename: str = "<string>") -> None:
        exec(compile(source, filename, "exec"), self.namespace)

    def exec_file(self, path: str) -> None:
        """Run a script file as top-level statements in the namespace."""
        path = str(path)
        self.namespace["__file__"] = path
        # a docstring left by earlier code in this namespace is not the script's
        self.namespace["__doc__"] = None
        # bytes, so that a coding cookie in the file is honoured
        source = Path(path).read_bytes()
        exec(compile(source, path, "exec"), self.namespace)

    def release(self) -> None:
        if self.released:
            return
        self.released = True

        if self._host_module_name is not None:
            if self._saved_host_module is _MISSING:
                sys.modules.pop(self._host_module_name, None)
            else:
                sys.modules[self._host_module_name] = self._saved_host_module

        try:
            sys.path.remove(self.working_path)
        except ValueError:
            logger.debug("Guest removed its working path from sys.path", path=self.working_path)

        for name in set(sys.modules) - self._modules_before:
            module_file = getattr(sys.modules.get(name), "__file__", None)
            if module_file and _is_within(module_file, self.working_path):
                del sys.modules[name]

        self.namespace.clear()


@contextmanager
def scoped_interpreter(working_path: str) -> Iterator[GuestInterpreter]:
    """
    Acquire a fresh interpreter for one execution and release it on every
    exit path.
    """
    with _SCOPE_LOCK:
        interpreter = GuestInterpreter(working_path)
        logger.debug("Interpreter acquired", working_path=interpreter.working_path)
        try:
            yield interpreter
        finally:
            interpreter.release()
            logger.debug("Interpreter released", working_path=interpreter.working_path)
