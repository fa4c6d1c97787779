"""
Translation of guest outcomes into job results.

A bad working directory or script file is an error with the
INVALID_CONFIGURATION code. Anything the guest raised is an internal
error with the UNCAUGHT_GUEST_EXCEPTION code.
"""

from scriptjob.job.contract import ErrorPair, MalformedReturn, NoReturn, Raised, RunOutcome
from scriptjob.job.result import JobResult, ResultCode

BAD_WORKING_DIRECTORY = "bad working directory"
BAD_SCRIPT_FILE = "bad main script file"
BAD_INTERNAL_SCRIPT = "bad internal script"
MISSING_ENTRY_POINT = "missing entry point"
INVALID_RESULTS = "invalid results"
UNCAUGHT_EXCEPTION = "uncaught exception"


def bad_working_directory(working_path: str, pretty_name: str) -> JobResult:
    return JobResult.error(
        BAD_WORKING_DIRECTORY,
        f"Working directory {working_path} for python job {pretty_name} is not readable.",
        ResultCode.INVALID_CONFIGURATION,
    )


def bad_script_file(script_path: str, pretty_name: str) -> JobResult:
    return JobResult.error(
        BAD_SCRIPT_FILE,
        f"Main script file {script_path} for python job {pretty_name} is not readable.",
        ResultCode.INVALID_CONFIGURATION,
    )


def pre_script_failed(pretty_name: str, raised: Raised) -> JobResult:
    return JobResult.internal_error(
        BAD_INTERNAL_SCRIPT,
        f"Internal script for python job {pretty_name} raised an exception.\n{raised.message}",
        ResultCode.UNCAUGHT_GUEST_EXCEPTION,
    )


def script_load_failed(script_path: str, pretty_name: str, raised: Raised) -> JobResult:
    return JobResult.internal_error(
        BAD_SCRIPT_FILE,
        f"Main script file {script_path} for python job {pretty_name} "
        f"could not be loaded because it raised an exception.\n{raised.message}",
        ResultCode.UNCAUGHT_GUEST_EXCEPTION,
    )


def missing_entry_point(script_path: str, pretty_name: str) -> JobResult:
    return JobResult.error(
        MISSING_ENTRY_POINT,
        f"Main script file {script_path} for python job {pretty_name} "
        "does not contain a run() function.",
    )


def translate_run_outcome(outcome: RunOutcome, script_path: str, pretty_name: str) -> JobResult:
    """Map what run() did to the job result."""
    if isinstance(outcome, NoReturn):
        return JobResult.ok()
    if isinstance(outcome, ErrorPair):
        return JobResult.error(outcome.summary, outcome.details)
    if isinstance(outcome, MalformedReturn):
        return JobResult.error(
            INVALID_RESULTS,
            f"Main script file {script_path} for python job {pretty_name} "
            f"returned invalid results: {outcome.reason}.",
        )
    if isinstance(outcome, Raised):
        return JobResult.internal_error(
            UNCAUGHT_EXCEPTION,
            f"Main script file {script_path} for python job {pretty_name} "
            f"raised an exception.\n{outcome.message}",
            ResultCode.UNCAUGHT_GUEST_EXCEPTION,
        )
    raise TypeError(f"Unknown run outcome {outcome!r}")
