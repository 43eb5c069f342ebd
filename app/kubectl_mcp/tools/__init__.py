"""
MCP Tools for kubectl.

Contains:
- CommandDispatcher: tool name + arguments -> kubectl execution
- ResourceLifecycle: composite apply-and-wait / copy operations
- ToolRegistry: FastMCP registration and error translation
"""

from kubectl_mcp.tools.dispatcher import TOOL_REQUESTS, CommandDispatcher, PreparedCall
from kubectl_mcp.tools.lifecycle import (
    LifecycleOutcome,
    LifecycleState,
    ReadinessPoll,
    ResourceLifecycle,
    pod_is_ready,
)
from kubectl_mcp.tools.manifests import manifest_namespace, resolve_manifest, staged_manifest
from kubectl_mcp.tools.registry import ERROR_PREFIX, ToolRegistry, format_tool_error

__all__ = [
    # Dispatcher
    "CommandDispatcher",
    "PreparedCall",
    "TOOL_REQUESTS",
    # Lifecycle
    "LifecycleOutcome",
    "LifecycleState",
    "ReadinessPoll",
    "ResourceLifecycle",
    "pod_is_ready",
    # Manifests
    "manifest_namespace",
    "resolve_manifest",
    "staged_manifest",
    # Registry
    "ERROR_PREFIX",
    "ToolRegistry",
    "format_tool_error",
]
