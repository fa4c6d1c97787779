from scriptjob.system.process import (
    IProcessRunner,
    ProcessCode,
    ProcessResult,
    RunLocation,
    SubprocessRunner,
)

__all__ = [
    "IProcessRunner",
    "ProcessCode",
    "ProcessResult",
    "RunLocation",
    "SubprocessRunner",
]
