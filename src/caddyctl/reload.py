"""Format, validate and reload the Caddy configuration inside a container."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from caddyctl.config import ReloadSettings
from caddyctl.errors import ExecError, ExecResult, ReloadError
from caddyctl.exec import run_docker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReloadStep:
    name: str
    args: tuple[str, ...]


def exec_prefix(settings: ReloadSettings) -> list[str]:
    """Common ``docker exec`` prefix for every step."""
    prefix = ["exec", "-i"]
    if settings.tty:
        prefix.append("-t")
    prefix.append(settings.container)
    return prefix


def build_steps(settings: ReloadSettings) -> list[ReloadStep]:
    prefix = exec_prefix(settings)
    return [
        ReloadStep("fmt", (*prefix, "caddy", "fmt", "--overwrite", settings.config)),
        ReloadStep("validate", (*prefix, "caddy", "validate", "--config", settings.config)),
        ReloadStep("reload", (*prefix, "caddy", "reload", "--config", settings.config)),
    ]


def run_reload(
    settings: ReloadSettings,
    *,
    on_step: Callable[[ReloadStep], None] | None = None,
) -> list[ExecResult]:
    """Run fmt, validate and reload in order, stopping at the first failure.

    Raises:
        ReloadError: naming the step that failed; later steps are not run
    """
    results: list[ExecResult] = []
    for step in build_steps(settings):
        if on_step is not None:
            on_step(step)
        try:
            results.append(run_docker(list(step.args)))
        except ExecError as exc:
            logger.debug("reload step %s failed with %d", step.name, exc.result.returncode)
            raise ReloadError(step.name, exc) from exc
    return results
