"""Pytest configuration and fixtures for caddyctl tests."""
from pathlib import Path

import pytest


def pytest_sessionfinish(session, exitstatus):
    """Fail the run when --cov was requested but no data was collected.

    Usually means the tests imported a stale copy of the package instead of
    the installed 'caddyctl'.
    """
    cov_enabled = any("--cov" in str(arg) for arg in session.config.args)
    if not cov_enabled:
        return

    coverage_files = list(Path.cwd().glob(".coverage*"))
    if not coverage_files:
        pytest.exit(
            "Coverage was enabled but no data was collected. "
            "Check that tests import from 'caddyctl' (the package) not 'src/caddyctl' (filesystem path).",
            returncode=1
        )
