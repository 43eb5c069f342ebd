"""
Configuration system for the Kubectl MCP Server.

Exports:
    KubectlMCPConfig: Main configuration container
    load_config: Load configuration from YAML/env
"""

from kubectl_mcp.config.models import (
    CommandSettings,
    KubectlMCPConfig,
    LifecycleSettings,
    ServerSettings,
)
from kubectl_mcp.config.loader import load_config

__all__ = [
    "KubectlMCPConfig",
    "ServerSettings",
    "CommandSettings",
    "LifecycleSettings",
    "load_config",
]
