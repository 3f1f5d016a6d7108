"""Error types raised by caddyctl operations."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class CaddyctlError(RuntimeError):
    """Base class for every error surfaced to the operator."""


class InvalidNameError(CaddyctlError, ValueError):
    """Raised when a label, host or upstream fails validation."""


class ConflictError(CaddyctlError):
    """Raised when a block or label file exists and force was not requested."""

    def __init__(self, message: str, *, path: Path | None, host: str | None = None):
        super().__init__(message)
        self.path = path
        self.host = host


class NotFoundError(CaddyctlError):
    """Raised when a file expected to exist is missing."""

    def __init__(self, path: Path):
        super().__init__(f"file not found: {path}")
        self.path = path


class StoreIOError(CaddyctlError):
    """Raised when a filesystem or process operation fails."""


class ConfigError(CaddyctlError):
    """Raised when the settings file is malformed."""


@dataclass(frozen=True)
class ExecResult:
    """Result envelope for subprocess execution."""

    argv: tuple[str, ...]
    returncode: int


class ExecError(StoreIOError):
    """Raised when a command returns non-zero or cannot be started."""

    def __init__(self, result: ExecResult, detail: str = "", *, message: str | None = None):
        if message is None:
            rendered = " ".join(result.argv)
            message = f"command failed ({result.returncode}): {rendered}"
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message)
        self.result = result


class ReloadError(ExecError):
    """Raised when one step of the reload sequence fails."""

    def __init__(self, step: str, cause: ExecError):
        super().__init__(cause.result, message=f"failed to run caddy {step}: {cause}")
        self.step = step
