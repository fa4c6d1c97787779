import json
from typing import Optional, Dict, Any


class ScriptJobError(Exception):
    """Host-level error with message, detail and extra attributes."""

    def __init__(
        self,
        message: str,
        detail: Optional[str] = None,
        **kwargs: Any
    ):
        self.message = message
        self.detail = detail
        self.extra = kwargs
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary format."""
        error_dict = {
            "message": self.message,
            "detail": self.detail,
        }
        error_dict.update(self.extra)
        return {k: v for k, v in error_dict.items() if v is not None}

    def to_json(self) -> str:
        """Convert error to JSON string."""
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)

    def __str__(self) -> str:
        parts = [f"Error: {self.message}"]
        if self.detail:
            parts.append(f"Detail: {self.detail}")
        if self.extra:
            parts.append(f"Extra: {self.extra}")
        return "\n".join(parts)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message='{self.message}', detail='{self.detail}', extra={self.extra})"


class HostApiInstallError(ScriptJobError):
    """The host API could not be built or installed into the interpreter.

    This is a bug in the host, not in the guest script, and is never turned
    into a JobResult.
    """


class YAMLLoadError(ScriptJobError):
    """A YAML document could not be read or parsed."""

    def __init__(self, path: str, detail: Optional[str] = None):
        super().__init__(f"Could not load YAML file {path}", detail, path=path)
        self.path = path


class ModuleDescriptorError(ScriptJobError):
    """A module directory, its descriptor or its configuration is unusable."""
