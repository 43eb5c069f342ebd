"""
HTTP-side observability.

Provides the MetricsCollector and the probe routes served next to the
MCP endpoint on the streamable-http transport.
"""

from kubectl_mcp.http.metrics import MetricsCollector
from kubectl_mcp.http.probes import register_probe_routes

__all__ = ["MetricsCollector", "register_probe_routes"]
