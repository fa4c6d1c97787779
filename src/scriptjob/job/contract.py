"""
The guest script contract.

A job script may define ``pretty_name()`` and a module docstring for its
title, and must define ``run()``. What ``run()`` does is folded into one of
the RunOutcome variants below before any result is built.
"""

import traceback
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

ENTRY_POINT = "run"
PRETTY_NAME = "pretty_name"
DOCSTRING = "__doc__"


@dataclass(frozen=True)
class NoReturn:
    """run() returned None."""


@dataclass(frozen=True)
class ErrorPair:
    """run() returned (summary, details)."""

    summary: str
    details: str


@dataclass(frozen=True)
class MalformedReturn:
    """run() returned something that is neither None nor a text pair."""

    value_type: str
    reason: str


@dataclass(frozen=True)
class Raised:
    """Guest code raised instead of returning."""

    error: BaseException
    traceback: str

    @property
    def message(self) -> str:
        return "".join(traceback.format_exception_only(type(self.error), self.error)).strip()


RunOutcome = Union[NoReturn, ErrorPair, MalformedReturn, Raised]


def classify_return(value: Any) -> RunOutcome:
    if value is None:
        return NoReturn()

    # str and bytes are sequences too, but never a (summary, details) pair
    if not isinstance(value, (tuple, list)):
        return MalformedReturn(type(value).__name__, "expected None or a (summary, details) pair")
    if len(value) != 2:
        return MalformedReturn(type(value).__name__, f"expected 2 elements, got {len(value)}")
    summary, details = value
    if not isinstance(summary, str) or not isinstance(details, str):
        return MalformedReturn(
            type(value).__name__,
            f"expected two strings, got ({type(summary).__name__}, {type(details).__name__})",
        )
    return ErrorPair(summary, details)


def capture_exception(func: Callable[[], Any]) -> Optional[Raised]:
    """Call ``func`` and return what it raised, or None."""
    try:
        func()
    except (Exception, SystemExit) as e:
        return Raised(e, traceback.format_exc())
    return None


def invoke_entry_point(run: Callable[[], Any]) -> RunOutcome:
    try:
        value = run()
    except (Exception, SystemExit) as e:
        return Raised(e, traceback.format_exc())
    return classify_return(value)
