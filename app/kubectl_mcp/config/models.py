"""
Pydantic models for server configuration.

Configuration is loaded once at startup and handed to components
explicitly; nothing reads a global config object.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ServerSettings(BaseModel):
    """Server configuration settings."""

    host: str = Field(
        default="127.0.0.1",
        description="Host to bind the server to",
    )
    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Port to listen on",
    )
    transport: Literal["streamable-http", "stdio"] = Field(
        default="stdio",
        description="Transport protocol to use",
    )
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Logging level",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional log file in addition to stderr",
    )


class CommandSettings(BaseModel):
    """kubectl execution settings."""

    binary: str = Field(
        default="kubectl",
        min_length=1,
        description="kubectl executable name or path",
    )
    default_timeout: int = Field(
        default=60,
        ge=1,
        le=600,
        description="Default command timeout in seconds",
    )
    max_output_size: int = Field(
        default=10 * 1024 * 1024,
        ge=1000,
        description="Maximum captured output in bytes; larger output is an error",
    )
    kubeconfig: Optional[str] = Field(
        default=None,
        description="Explicit KUBECONFIG for every invocation (passthrough if unset)",
    )


class LifecycleSettings(BaseModel):
    """Readiness polling for composite operations."""

    poll_interval: float = Field(
        default=2.0,
        gt=0,
        description="Seconds between readiness polls",
    )
    max_attempts: int = Field(
        default=30,
        ge=1,
        le=1000,
        description="Readiness polls before giving up",
    )


class KubectlMCPConfig(BaseModel):
    """
    Main configuration container for the Kubectl MCP Server.

    Loaded from YAML files and environment variables, then passed to
    server components via dependency injection.
    """

    server: ServerSettings = Field(default_factory=ServerSettings)
    command: CommandSettings = Field(default_factory=CommandSettings)
    lifecycle: LifecycleSettings = Field(default_factory=LifecycleSettings)

    # Allow extra fields to be ignored (forward compatibility)
    model_config = ConfigDict(extra="ignore")
