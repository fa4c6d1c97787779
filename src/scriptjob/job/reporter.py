"""
Progress and description reporting for Python jobs
"""

from typing import Any, Callable, List, Mapping

from scriptjob.job.contract import DOCSTRING, PRETTY_NAME
from scriptjob.utils.loggers import get_logger

logger = get_logger(__name__)

ProgressListener = Callable[[float], None]


def derive_description(namespace: Mapping[str, Any]) -> str:
    """
    Find a human-readable title in a loaded script's namespace.

    Tries ``pretty_name()`` first, then the first line of the module
    docstring. Returns "" when neither gives any text.
    """
    func = namespace.get(PRETTY_NAME)
    if func is not None:
        try:
            name = func()
        except (Exception, SystemExit) as e:
            logger.warning("pretty_name() failed, trying __doc__", error=repr(e))
        else:
            if isinstance(name, str):
                return name
            logger.warning("pretty_name() did not return text", type=type(name).__name__)

    doc = namespace.get(DOCSTRING)
    if isinstance(doc, str):
        text = doc.strip()
        first_line = text.split("\n", 1)[0].strip()
        if first_line:
            return first_line

    return ""


class ProgressReporter:
    """
    Relays progress values to every subscribed listener.
    """

    def __init__(self):
        self._listeners: List[ProgressListener] = []

    def subscribe(self, listener: ProgressListener) -> None:
        self._listeners.append(listener)

    def emit(self, value: float) -> None:
        for listener in list(self._listeners):
            listener(value)
