"""
Probe and scrape routes for the streamable-http transport.

/health answers as long as the process serves requests. /ready also
requires that the configured kubectl binary resolves on PATH, since
every tool call would fail with ToolNotInstalled otherwise.
"""

import shutil
from typing import Callable

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse

from kubectl_mcp import __version__
from kubectl_mcp.http.metrics import MetricsCollector

PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


def register_probe_routes(
    mcp: FastMCP,
    metrics: MetricsCollector,
    binary: str,
    tool_names: Callable[[], list[str]],
) -> None:
    """Attach /health, /ready and /metrics to the server's HTTP app."""

    @mcp.custom_route("/health", methods=["GET"])
    async def health(request: Request) -> JSONResponse:
        return JSONResponse({
            "status": "healthy",
            "service": "kubectl_mcp",
            "version": __version__,
            "uptime_seconds": round(metrics.uptime_seconds, 2),
        })

    @mcp.custom_route("/ready", methods=["GET"])
    async def ready(request: Request) -> JSONResponse:
        resolved = shutil.which(binary)
        if resolved is None:
            return JSONResponse(
                {
                    "status": "not_ready",
                    "checks": {"kubectl_installed": False},
                    "binary": binary,
                },
                status_code=503,
            )
        return JSONResponse({
            "status": "ready",
            "checks": {"kubectl_installed": True},
            "binary": resolved,
            "registered_tools": tool_names(),
        })

    @mcp.custom_route("/metrics", methods=["GET"])
    async def scrape(request: Request) -> PlainTextResponse:
        return PlainTextResponse(metrics.format_prometheus(), media_type=PROMETHEUS_CONTENT_TYPE)
