# Script job runtime - Main package
"""
Script job runtime for installer pipelines

This package provides:
- PythonJob, which runs a guest Python script as one installer job
- The libinstaller host API injected into guest scripts
- An in-memory global storage shared between jobs
- A command line loader for running one module directory
"""

__version__ = "0.1.0"

from scriptjob.job.descriptor import JobDescriptor, JobOptions
from scriptjob.job.python_job import PythonJob
from scriptjob.job.result import JobResult, ResultCode, ResultKind
from scriptjob.storage.global_storage import GlobalStorage

__all__ = [
    "GlobalStorage",
    "JobDescriptor",
    "JobOptions",
    "JobResult",
    "PythonJob",
    "ResultCode",
    "ResultKind",
]
