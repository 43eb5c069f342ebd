"""
Server assembly.

Wires runner, dispatcher, lifecycle orchestrator and registry into one
FastMCP instance. Nothing here runs kubectl; that happens per tool call.
"""

from dataclasses import dataclass
from typing import Optional

from fastmcp import FastMCP

from kubectl_mcp.config import KubectlMCPConfig
from kubectl_mcp.executor.runner import create_runner
from kubectl_mcp.http import MetricsCollector, register_probe_routes
from kubectl_mcp.tools.dispatcher import CommandDispatcher, Runner
from kubectl_mcp.tools.lifecycle import ResourceLifecycle
from kubectl_mcp.tools.registry import ToolRegistry
from kubectl_mcp.utils.logging import get_logger

logger = get_logger(__name__)

SERVER_NAME = "kubectl_mcp"


@dataclass
class ServerBundle:
    """The FastMCP server plus the pieces tests and the CLI reach into."""

    server: FastMCP
    registry: ToolRegistry
    metrics: MetricsCollector


def create_server(
    config: KubectlMCPConfig,
    runner: Optional[Runner] = None,
) -> ServerBundle:
    """
    Build a ready-to-run server.

    Args:
        config: Loaded configuration
        runner: Replaces the kubectl process runner (tests pass a scripted one)

    Returns:
        ServerBundle with the FastMCP instance, its tool registry and metrics
    """
    dispatcher = CommandDispatcher(runner or create_runner(config.command.model_dump()))
    lifecycle = ResourceLifecycle(
        dispatcher,
        poll_interval=config.lifecycle.poll_interval,
        max_attempts=config.lifecycle.max_attempts,
    )
    metrics = MetricsCollector()
    registry = ToolRegistry(dispatcher, lifecycle, metrics)

    mcp = FastMCP(name=SERVER_NAME)
    registry.register_with_mcp(mcp)
    register_probe_routes(mcp, metrics, config.command.binary, lambda: registry.tool_names)

    logger.info(
        f"{SERVER_NAME} ready with {len(registry.tool_names)} tools "
        f"(binary={config.command.binary}, timeout={config.command.default_timeout}s)"
    )
    return ServerBundle(server=mcp, registry=registry, metrics=metrics)
