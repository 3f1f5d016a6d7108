"""Command runner for the reload sequence."""

from __future__ import annotations

import logging
import subprocess

from caddyctl.errors import ExecError, ExecResult

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127


def run_command(
    argv: list[str],
    *,
    check: bool = True,
) -> ExecResult:
    """Run command with stdout/stderr inherited from the current process."""
    logger.debug("exec %s", argv)
    try:
        completed = subprocess.run(argv, check=False)
    except OSError as exc:
        result = ExecResult(argv=tuple(argv), returncode=COMMAND_NOT_FOUND)
        raise ExecError(result, str(exc)) from exc
    result = ExecResult(argv=tuple(argv), returncode=completed.returncode)
    if check and result.returncode != 0:
        raise ExecError(result)
    return result


def run_docker(
    args: list[str],
    *,
    check: bool = True,
) -> ExecResult:
    """Run docker command."""
    return run_command(["docker", *args], check=check)
