"""
Mount helper exposed to guest scripts
"""

from pathlib import Path
from typing import List

from scriptjob.system.process import IProcessRunner, ProcessCode, RunLocation
from scriptjob.utils.loggers import get_logger

logger = get_logger(__name__)


def build_mount_command(
    device_path: str, mount_point: str, filesystem_name: str = "", options: str = ""
) -> List[str]:
    args = ["mount"]
    if filesystem_name:
        args += ["-t", filesystem_name]
    if options:
        # "-o" is implied unless the caller passes raw flags
        if options.startswith("-"):
            args.append(options)
        else:
            args += ["-o", options]
    args += [device_path, mount_point]
    return args


def mount(
    runner: IProcessRunner,
    device_path: str,
    mount_point: str,
    filesystem_name: str = "",
    options: str = "",
    timeout: int = 10,
) -> int:
    """
    Run the mount utility on the host.

    Returns:
        The program's exit code, or:
        -1 = process crashed
        -2 = process failed to start
        -3 = bad arguments (empty device or mount point, or the mount
             point could not be created)
    """
    if not device_path or not mount_point:
        if not device_path:
            logger.warning("Can't mount an empty device")
        if not mount_point:
            logger.warning("Can't mount on an empty mount point")
        return int(ProcessCode.NO_WORKING_DIRECTORY)

    target = Path(mount_point)
    if not target.exists():
        try:
            target.mkdir(parents=True)
        except OSError as e:
            logger.warning("Could not create mount point", mount_point=mount_point, error=str(e))
            return int(ProcessCode.NO_WORKING_DIRECTORY)

    args = build_mount_command(device_path, mount_point, filesystem_name, options)
    result = runner.run(args, location=RunLocation.HOST, timeout=timeout)
    if result.code != 0:
        logger.warning("Mount failed", command=args, code=result.code, output=result.output)
    return result.code
