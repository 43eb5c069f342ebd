"""
Pytest configuration and shared fixtures.
"""

import sys
from pathlib import Path
from typing import Optional, Union

import pytest


# Add app directory to path
APP_DIR = Path(__file__).parent.parent / "app"
sys.path.insert(0, str(APP_DIR))

from kubectl_mcp.executor.types import ExecutionResult  # noqa: E402


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as an async test"
    )


def ok(stdout: str = "", stderr: str = "") -> ExecutionResult:
    """A successful scripted execution."""
    return ExecutionResult(exit_code=0, stdout=stdout, stderr=stderr, duration_ms=1)


def fail(stderr: str, exit_code: int = 1, stdout: str = "") -> ExecutionResult:
    """A failed scripted execution."""
    return ExecutionResult(exit_code=exit_code, stdout=stdout, stderr=stderr, duration_ms=1)


class ScriptedRunner:
    """
    Stand-in for ProcessRunner that replays queued results.

    Each queued item is either an ExecutionResult or an exception to raise.
    Every call's argument vector is recorded in ``calls``.
    """

    def __init__(self, results: Optional[list[Union[ExecutionResult, Exception]]] = None):
        self.results = list(results or [])
        self.calls: list[list[str]] = []

    def queue(self, *items: Union[ExecutionResult, Exception]) -> "ScriptedRunner":
        self.results.extend(items)
        return self

    async def run(self, args: list[str], timeout: Optional[float] = None) -> ExecutionResult:
        self.calls.append(list(args))
        item = self.results.pop(0) if self.results else ok()
        if isinstance(item, Exception):
            raise item
        item.argv = ["kubectl", *args]
        return item


@pytest.fixture
def runner() -> ScriptedRunner:
    """An empty scripted runner; queue results per test."""
    return ScriptedRunner()
