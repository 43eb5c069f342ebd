"""
Unit tests for the Prometheus metrics collector.
"""

from kubectl_mcp.executor import ErrorKind
from kubectl_mcp.http import MetricsCollector


class TestMetricsCollector:

    def test_counts_by_outcome(self):
        metrics = MetricsCollector()
        metrics.inc_tool_call("kubectl_get")
        metrics.inc_tool_call("kubectl_get", error_kind=ErrorKind.RESOURCE_NOT_FOUND)
        metrics.inc_tool_call("kubectl_cp", error_kind=ErrorKind.MALFORMED_REQUEST)

        assert metrics.calls == 3
        assert metrics.successes == 1
        assert metrics.failures == 2
        assert metrics.calls_by_tool == {"kubectl_get": 2, "kubectl_cp": 1}
        assert metrics.failures_by_kind == {"ResourceNotFound": 1, "MalformedRequest": 1}

    def test_exposition(self):
        metrics = MetricsCollector()
        metrics.inc_tool_call("kubectl_get", error_kind=ErrorKind.PROCESS_TIMEOUT)

        text = metrics.format_prometheus()

        assert "kubectl_mcp_tool_calls_total 1" in text
        assert "kubectl_mcp_tool_calls_error_total 1" in text
        assert 'kubectl_mcp_tool_errors_by_kind{kind="ProcessTimeout"} 1' in text
        assert 'kubectl_mcp_tool_calls_by_name{tool="kubectl_get"} 1' in text
        assert text.endswith("\n")

    def test_empty_collector_omits_labelled_series(self):
        text = MetricsCollector().format_prometheus()
        assert "kubectl_mcp_tool_errors_by_kind" not in text
        assert "kubectl_mcp_tool_calls_by_name" not in text
