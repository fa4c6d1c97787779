"""
Result formatting utilities for CLI output
"""

import json
import sys
from typing import Any, Dict, Optional, Sequence

import yaml

from scriptjob.job.result import JobResult, ResultKind


class ResultFormatter:
    """
    Format job results for different output types
    """

    def __init__(self, format: str = "pretty", verbose: bool = False, use_colors: bool = True):
        self.format = format
        self.verbose = verbose
        self.use_colors = use_colors and self._supports_color()

        if self.use_colors:
            self.colors = {
                'reset': '\033[0m',
                'red': '\033[91m',
                'green': '\033[92m',
                'yellow': '\033[93m',
                'cyan': '\033[96m',
                'dim': '\033[2m',
            }
        else:
            self.colors = {k: '' for k in ['reset', 'red', 'green', 'yellow', 'cyan', 'dim']}

    def _supports_color(self) -> bool:
        return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()

    def _colorize(self, text: str, color: str) -> str:
        return f"{self.colors[color]}{text}{self.colors['reset']}"

    def format_result(
        self,
        result: JobResult,
        module: str,
        status: str = "",
        progress: Sequence[float] = (),
        storage: Optional[Dict[str, Any]] = None,
    ) -> str:
        data = self._as_dict(result, module, status, progress, storage)
        if self.format == "json":
            return json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self.format == "yaml":
            return yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
        return self._format_pretty(result, data)

    def _as_dict(self, result, module, status, progress, storage) -> Dict[str, Any]:
        data = {"module": module, "status": status}
        data.update(result.to_dict())
        data["progress"] = list(progress)
        if self.verbose and storage is not None:
            data["globalstorage"] = storage
        return data

    def _format_pretty(self, result: JobResult, data: Dict[str, Any]) -> str:
        output = []

        if result.kind is ResultKind.SUCCESS:
            output.append(self._colorize(f"✅ Job {data['module']} succeeded", "green"))
        elif result.kind is ResultKind.ERROR:
            output.append(self._colorize(f"❌ Job {data['module']} failed: {result.summary}", "red"))
        else:
            output.append(
                self._colorize(
                    f"💥 Job {data['module']} crashed: {result.summary} ({data['cause']})", "red"
                )
            )
        output.append("")

        if data["status"]:
            output.append(f"  Status:    {data['status']}")
        if data["progress"]:
            steps = ", ".join(f"{value:g}" for value in data["progress"])
            output.append(f"  Progress:  {self._colorize(steps, 'yellow')}")

        if result.details:
            output.append("")
            output.append(self._colorize("DETAILS:", "cyan"))
            output.append(self._colorize("-" * 40, "dim"))
            output.append(result.details.rstrip())

        if "globalstorage" in data:
            output.append("")
            output.append(self._colorize("GLOBAL STORAGE:", "cyan"))
            output.append(self._colorize("-" * 40, "dim"))
            output.append(
                yaml.safe_dump(data["globalstorage"], default_flow_style=False, allow_unicode=True).rstrip()
            )

        output.append("")
        return "\n".join(output)
