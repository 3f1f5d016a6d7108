"""Unit tests for the docker exec reload sequence."""

from __future__ import annotations

import subprocess

import pytest

from caddyctl.config import ReloadSettings
from caddyctl.errors import ExecError, ExecResult, ReloadError
from caddyctl.exec import COMMAND_NOT_FOUND, run_command
from caddyctl.reload import build_steps, exec_prefix, run_reload


class _DockerStub:
    def __init__(self, fail_on: str | None = None, code: int = 1):
        self.fail_on = fail_on
        self.code = code
        self.calls: list[tuple[str, ...]] = []

    def __call__(self, args: list[str], *, check: bool = True) -> ExecResult:
        _ = check
        self.calls.append(tuple(args))
        result = ExecResult(argv=tuple(["docker", *args]), returncode=0)
        if self.fail_on is not None and self.fail_on in args:
            raise ExecError(ExecResult(argv=result.argv, returncode=self.code))
        return result


def test_exec_prefix_with_and_without_tty() -> None:
    assert exec_prefix(ReloadSettings()) == ["exec", "-i", "-t", "caddy"]
    assert exec_prefix(ReloadSettings(container="edge", tty=False)) == ["exec", "-i", "edge"]


def test_build_steps_order_and_arguments() -> None:
    steps = build_steps(ReloadSettings(container="edge", config="/etc/caddy/Caddyfile", tty=False))
    assert [s.name for s in steps] == ["fmt", "validate", "reload"]
    assert steps[0].args == ("exec", "-i", "edge", "caddy", "fmt", "--overwrite", "/etc/caddy/Caddyfile")
    assert steps[1].args == ("exec", "-i", "edge", "caddy", "validate", "--config", "/etc/caddy/Caddyfile")
    assert steps[2].args == ("exec", "-i", "edge", "caddy", "reload", "--config", "/etc/caddy/Caddyfile")


def test_run_reload_runs_all_steps_in_order(monkeypatch: pytest.MonkeyPatch) -> None:
    stub = _DockerStub()
    monkeypatch.setattr("caddyctl.reload.run_docker", stub)

    announced: list[str] = []
    results = run_reload(ReloadSettings(), on_step=lambda step: announced.append(step.name))

    assert announced == ["fmt", "validate", "reload"]
    assert [call[5] for call in stub.calls] == ["fmt", "validate", "reload"]
    assert all(r.returncode == 0 for r in results)


def test_run_reload_stops_at_first_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    stub = _DockerStub(fail_on="validate", code=2)
    monkeypatch.setattr("caddyctl.reload.run_docker", stub)

    with pytest.raises(ReloadError, match="failed to run caddy validate") as excinfo:
        run_reload(ReloadSettings())

    assert excinfo.value.step == "validate"
    assert isinstance(excinfo.value, ExecError)
    assert excinfo.value.result.returncode == 2
    assert len(stub.calls) == 2


def test_run_reload_fmt_failure_runs_nothing_else(monkeypatch: pytest.MonkeyPatch) -> None:
    stub = _DockerStub(fail_on="fmt")
    monkeypatch.setattr("caddyctl.reload.run_docker", stub)

    with pytest.raises(ReloadError):
        run_reload(ReloadSettings())
    assert len(stub.calls) == 1


def test_run_command_nonzero_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fake_run(argv, check):
        return subprocess.CompletedProcess(argv, 3)

    monkeypatch.setattr("caddyctl.exec.subprocess.run", _fake_run)
    with pytest.raises(ExecError, match=r"command failed \(3\): docker ps"):
        run_command(["docker", "ps"])

    result = run_command(["docker", "ps"], check=False)
    assert result.returncode == 3


def test_run_command_missing_executable(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fake_run(argv, check):
        raise FileNotFoundError(2, "No such file or directory", argv[0])

    monkeypatch.setattr("caddyctl.exec.subprocess.run", _fake_run)
    with pytest.raises(ExecError) as excinfo:
        run_command(["docker", "ps"])
    assert excinfo.value.result.returncode == COMMAND_NOT_FOUND
