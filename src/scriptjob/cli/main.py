#!/usr/bin/env python3
"""
scriptjob CLI - Run one installer module directory as a Python job
"""

import argparse
import sys
from typing import List, Optional

from scriptjob import __version__
from scriptjob.cli.formatter import ResultFormatter
from scriptjob.cli.runner import ModuleRunner
from scriptjob.errors import HostApiInstallError, ScriptJobError
from scriptjob.job.descriptor import JobOptions
from scriptjob.job.result import ResultKind
from scriptjob.storage.global_storage import GlobalStorage
from scriptjob.utils.loggers import configure_logging, get_logger

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_INTERNAL_ERROR = 2
EXIT_BAD_INPUT = 3
EXIT_HOST_FAILURE = 4

_EXIT_CODES = {
    ResultKind.SUCCESS: EXIT_SUCCESS,
    ResultKind.ERROR: EXIT_ERROR,
    ResultKind.INTERNAL_ERROR: EXIT_INTERNAL_ERROR,
}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="scriptjob-run",
        description="Run one installer module directory as a Python job"
    )

    parser.add_argument(
        "module_dir",
        type=str,
        help="Module directory containing module.desc and the job script"
    )
    parser.add_argument(
        "--script", "-s",
        type=str,
        help="Script file relative to the module directory (default: from module.desc, or main.py)"
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        help="Job configuration YAML file (default: <module>.conf in the module directory)"
    )
    parser.add_argument(
        "--globals", "-g",
        type=str,
        help="YAML file to preload into global storage"
    )
    parser.add_argument(
        "--save-globals",
        type=str,
        help="Write global storage to this file after the job (YAML, or JSON for *.json)"
    )
    parser.add_argument(
        "--pre-script", "-p",
        type=str,
        help="Python file run before the job script, in the same namespace"
    )
    parser.add_argument(
        "--format",
        choices=["pretty", "json", "yaml"],
        default="pretty",
        help="Output format (default: pretty)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Include global storage in the output"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    logger = get_logger(__name__)

    try:
        storage = GlobalStorage()
        if args.globals:
            storage.load_yaml(args.globals)
        runner = ModuleRunner(storage=storage, options=JobOptions.from_file(args.pre_script))
        descriptor = runner.load_descriptor(args.module_dir, args.script, args.config)
    except ScriptJobError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        if e.detail:
            print(f"  {e.detail}", file=sys.stderr)
        return EXIT_BAD_INPUT

    try:
        result = runner.run(descriptor)
    except HostApiInstallError as e:
        logger.error("Host API installation failed", error=e.to_dict())
        print(f"Fatal: {e.message}: {e.detail}", file=sys.stderr)
        return EXIT_HOST_FAILURE

    formatter = ResultFormatter(format=args.format, verbose=args.verbose)
    print(
        formatter.format_result(
            result,
            module=descriptor.name,
            status=runner.job.pretty_status_message(),
            progress=runner.progress,
            storage=storage.to_dict(),
        )
    )

    if args.save_globals:
        try:
            if args.save_globals.endswith(".json"):
                storage.save_json(args.save_globals)
            else:
                storage.save_yaml(args.save_globals)
        except OSError as e:
            print(f"Error saving global storage to {args.save_globals}: {e}", file=sys.stderr)
            return EXIT_BAD_INPUT

    return _EXIT_CODES[result.kind]


def entry_point():
    """CLI entry point"""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    entry_point()
