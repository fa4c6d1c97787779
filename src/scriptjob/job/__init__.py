from scriptjob.job.descriptor import JobDescriptor, JobOptions
from scriptjob.job.result import JobResult, ResultCode, ResultKind

__all__ = [
    "JobDescriptor",
    "JobOptions",
    "JobResult",
    "ResultCode",
    "ResultKind",
]
