"""
Job results as seen by the job queue
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict


class ResultKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INTERNAL_ERROR = "internal_error"


class ResultCode(IntEnum):
    """
    Cause codes carried by job results
    """

    NO_ERROR = 0
    GENERIC_ERROR = -1
    UNCAUGHT_GUEST_EXCEPTION = 1
    INVALID_CONFIGURATION = 2

    @classmethod
    def get_description(cls, code: int) -> str:
        descriptions = {
            cls.NO_ERROR: "no-error",
            cls.GENERIC_ERROR: "generic-error",
            cls.UNCAUGHT_GUEST_EXCEPTION: "uncaught-guest-exception",
            cls.INVALID_CONFIGURATION: "invalid-configuration",
        }
        return descriptions.get(code, "unknown")


@dataclass(frozen=True)
class JobResult:
    """
    Outcome of one job execution.

    Build instances with ok(), error() or internal_error(); a result is
    always complete when it is created.
    """

    kind: ResultKind
    summary: str = ""
    details: str = ""
    code: ResultCode = ResultCode.NO_ERROR

    @classmethod
    def ok(cls) -> "JobResult":
        return cls(ResultKind.SUCCESS)

    @classmethod
    def error(
        cls,
        summary: str,
        details: str = "",
        code: ResultCode = ResultCode.GENERIC_ERROR,
    ) -> "JobResult":
        return cls(ResultKind.ERROR, summary, details, code)

    @classmethod
    def internal_error(
        cls,
        summary: str,
        details: str = "",
        code: ResultCode = ResultCode.UNCAUGHT_GUEST_EXCEPTION,
    ) -> "JobResult":
        return cls(ResultKind.INTERNAL_ERROR, summary, details, code)

    def is_success(self) -> bool:
        return self.kind is ResultKind.SUCCESS

    def __bool__(self) -> bool:
        return self.is_success()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "summary": self.summary,
            "details": self.details,
            "code": int(self.code),
            "cause": ResultCode.get_description(self.code),
        }
