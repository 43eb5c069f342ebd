"""
Prometheus metrics.

Counts tool calls by outcome, by failure kind and by tool name, and
renders them in the Prometheus text exposition format.
"""

import time
from dataclasses import dataclass, field
from typing import Optional

from kubectl_mcp import __version__
from kubectl_mcp.executor.types import ErrorKind

PREFIX = "kubectl_mcp"


def _series(name: str, kind: str, help_text: str, samples: list[tuple[str, object]]) -> list[str]:
    """One metric family: HELP and TYPE headers, then its samples."""
    lines = [f"# HELP {PREFIX}_{name} {help_text}", f"# TYPE {PREFIX}_{name} {kind}"]
    lines.extend(f"{PREFIX}_{name}{labels} {value}" for labels, value in samples)
    return lines


@dataclass
class MetricsCollector:
    """
    In-process counters for the /metrics route.

    Handlers run on a single event loop and increment between awaits,
    so plain integers are enough.
    """

    calls: int = 0
    successes: int = 0
    failures: int = 0
    started_at: float = field(default_factory=time.time)
    calls_by_tool: dict[str, int] = field(default_factory=dict)
    failures_by_kind: dict[str, int] = field(default_factory=dict)

    @property
    def uptime_seconds(self) -> float:
        return time.time() - self.started_at

    def inc_tool_call(self, tool_name: str, error_kind: Optional[ErrorKind] = None) -> None:
        """Record one finished tool call; ``error_kind`` marks a failure."""
        self.calls += 1
        self.calls_by_tool[tool_name] = self.calls_by_tool.get(tool_name, 0) + 1
        if error_kind is None:
            self.successes += 1
            return
        self.failures += 1
        self.failures_by_kind[error_kind.value] = self.failures_by_kind.get(error_kind.value, 0) + 1

    def format_prometheus(self) -> str:
        """Render every family, separated by blank lines."""
        families = [
            _series("info", "gauge", "Server information", [(f'{{version="{__version__}"}}', 1)]),
            _series("uptime_seconds", "gauge", "Server uptime in seconds", [("", f"{self.uptime_seconds:.2f}")]),
            _series("tool_calls_total", "counter", "Total tool calls", [("", self.calls)]),
            _series("tool_calls_success_total", "counter", "Successful tool calls", [("", self.successes)]),
            _series("tool_calls_error_total", "counter", "Failed tool calls", [("", self.failures)]),
        ]
        if self.failures_by_kind:
            families.append(_series(
                "tool_errors_by_kind",
                "counter",
                "Failed tool calls by failure kind",
                [(f'{{kind="{kind}"}}', n) for kind, n in sorted(self.failures_by_kind.items())],
            ))
        if self.calls_by_tool:
            families.append(_series(
                "tool_calls_by_name",
                "counter",
                "Tool calls by tool name",
                [(f'{{tool="{tool}"}}', n) for tool, n in sorted(self.calls_by_tool.items())],
            ))
        return "\n\n".join("\n".join(family) for family in families) + "\n"
