"""
Tool Registry.

Registers the kubectl tools with FastMCP. Each handler forwards its
arguments to the CommandDispatcher (or the ResourceLifecycle for
composite tools) and converts classified failures into ToolError with a
stable "Failed to execute kubectl command:" prefix.
"""

import json
from contextlib import ExitStack
from typing import Any, Awaitable, Callable, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from kubectl_mcp import __version__
from kubectl_mcp.executor.types import (
    KubectlToolError,
    MalformedRequestError,
    ToolResponse,
)
from kubectl_mcp.http.metrics import MetricsCollector
from kubectl_mcp.tools.dispatcher import CommandDispatcher
from kubectl_mcp.tools.lifecycle import ResourceLifecycle
from kubectl_mcp.tools.manifests import manifest_namespace, resolve_manifest
from kubectl_mcp.utils.logging import get_logger

logger = get_logger(__name__)

ERROR_PREFIX = "Failed to execute kubectl command:"


def format_tool_error(error: KubectlToolError) -> str:
    """Render a classified failure for the protocol layer."""
    details = error.to_dict()
    message = f"{ERROR_PREFIX} [{details['kind']}] {details['message']}"
    stderr = details["stderr"].strip()
    if stderr and stderr not in message:
        message = f"{message}\nstderr: {stderr}"
    return message


def _drop_none(**kwargs: Any) -> dict[str, Any]:
    return {key: value for key, value in kwargs.items() if value is not None}


class ToolRegistry:
    """
    Owns the tool handlers registered on a FastMCP server.

    Handlers are thin: they pack their parameters into the JSON argument
    shape the dispatcher expects, then call it.
    """

    def __init__(
        self,
        dispatcher: CommandDispatcher,
        lifecycle: ResourceLifecycle,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.dispatcher = dispatcher
        self.lifecycle = lifecycle
        self.metrics = metrics or MetricsCollector()
        self._registered: list[str] = []

    @property
    def tool_names(self) -> list[str]:
        """Get names of all registered tools."""
        return list(self._registered)

    async def call(self, tool_name: str, arguments: dict[str, Any]) -> str:
        """Dispatch a simple tool call and return its text."""
        return await self._guarded(
            tool_name, lambda: self.dispatcher.dispatch(tool_name, arguments)
        )

    async def apply_and_wait(self, arguments: dict[str, Any]) -> str:
        """Run the apply-and-wait composite for one resource."""

        async def run() -> ToolResponse:
            name = arguments.get("name")
            if not isinstance(name, str) or not name.strip():
                raise MalformedRequestError("'name' is required and must be a non-empty string")
            name = name.strip()
            resource_type = arguments.get("resourceType") or "pod"

            with ExitStack() as stack:
                manifest_path = resolve_manifest(arguments, stack)
                # polling must look where the manifest put the resource
                namespace = arguments.get("namespace") or manifest_namespace(manifest_path, name)
                outcome = await self.lifecycle.apply_and_wait(
                    manifest_path,
                    name=name,
                    namespace=namespace,
                    resource_type=resource_type,
                )

            summary = (
                f"{resource_type}/{name} is {outcome.state.value} "
                f"after {outcome.attempts} status check(s)"
            )
            body = json.dumps(outcome.resource, indent=2)
            return ToolResponse.from_text(f"{summary}\n{body}", data=outcome.resource)

        return await self._guarded("kubectl_apply_and_wait", run)

    async def _guarded(
        self,
        tool_name: str,
        operation: Callable[[], Awaitable[ToolResponse]],
    ) -> str:
        try:
            response = await operation()
        except KubectlToolError as e:
            self.metrics.inc_tool_call(tool_name, error_kind=e.kind)
            logger.error(f"{tool_name} failed: {e.kind.value}: {e.message}")
            raise ToolError(format_tool_error(e)) from e

        self.metrics.inc_tool_call(tool_name)
        return response.text

    def register_with_mcp(self, mcp: FastMCP) -> None:
        """
        Register all kubectl tools with a FastMCP server.

        Args:
            mcp: FastMCP server instance
        """
        registry = self

        @mcp.tool(
            name="kubectl_generic",
            annotations={
                "title": "Run kubectl Command",
                "readOnlyHint": False,
                "destructiveHint": True,
                "openWorldHint": True,
            },
        )
        async def kubectl_generic(
            command: str,
            subCommand: str | None = None,
            resourceType: str | None = None,
            name: str | None = None,
            namespace: str | None = None,
            outputFormat: str | None = None,
            flags: dict[str, Any] | None = None,
            args: list[str] | None = None,
        ) -> str:
            """
            Run any supported kubectl verb with structured arguments.

            Args:
                command: kubectl verb (get, create, delete, apply, annotate, exec, cp, ...)
                subCommand: Optional second keyword (e.g. 'status' for rollout)
                resourceType: Resource type (pod, namespace, configmap, ...)
                name: Resource name
                namespace: Namespace, passed as -n
                outputFormat: json, yaml, wide, name or none
                flags: Flag name to value; true renders --flag, false omits it
                args: Extra positional arguments, appended last
            """
            return await registry.call(
                "kubectl_generic",
                _drop_none(
                    command=command,
                    subCommand=subCommand,
                    resourceType=resourceType,
                    name=name,
                    namespace=namespace,
                    outputFormat=outputFormat,
                    flags=flags,
                    args=args,
                ),
            )

        @mcp.tool(
            name="kubectl_get",
            annotations={"title": "Get Resources", "readOnlyHint": True, "destructiveHint": False},
        )
        async def kubectl_get(
            resourceType: str,
            name: str | None = None,
            namespace: str | None = None,
            output: str = "json",
            allNamespaces: bool = False,
            labelSelector: str | None = None,
            fieldSelector: str | None = None,
        ) -> str:
            """Get one resource or list resources of a type."""
            return await registry.call(
                "kubectl_get",
                _drop_none(
                    resourceType=resourceType,
                    name=name,
                    namespace=namespace,
                    output=output,
                    allNamespaces=allNamespaces,
                    labelSelector=labelSelector,
                    fieldSelector=fieldSelector,
                ),
            )

        @mcp.tool(
            name="kubectl_describe",
            annotations={"title": "Describe Resource", "readOnlyHint": True, "destructiveHint": False},
        )
        async def kubectl_describe(
            resourceType: str,
            name: str,
            namespace: str | None = None,
        ) -> str:
            """Show detailed state and recent events for a resource."""
            return await registry.call(
                "kubectl_describe",
                _drop_none(resourceType=resourceType, name=name, namespace=namespace),
            )

        @mcp.tool(
            name="kubectl_create",
            annotations={"title": "Create Resource", "readOnlyHint": False, "destructiveHint": False},
        )
        async def kubectl_create(
            resourceType: str,
            name: str,
            namespace: str | None = None,
            flags: dict[str, Any] | None = None,
            args: list[str] | None = None,
        ) -> str:
            """Create a resource imperatively (e.g. a namespace or configmap)."""
            return await registry.call(
                "kubectl_create",
                _drop_none(
                    resourceType=resourceType,
                    name=name,
                    namespace=namespace,
                    flags=flags,
                    args=args,
                ),
            )

        @mcp.tool(
            name="kubectl_delete",
            annotations={"title": "Delete Resource", "readOnlyHint": False, "destructiveHint": True},
        )
        async def kubectl_delete(
            resourceType: str,
            name: str,
            namespace: str | None = None,
            force: bool = False,
            gracePeriodSeconds: int | None = None,
        ) -> str:
            """Delete a resource by type and name."""
            return await registry.call(
                "kubectl_delete",
                _drop_none(
                    resourceType=resourceType,
                    name=name,
                    namespace=namespace,
                    force=force,
                    gracePeriodSeconds=gracePeriodSeconds,
                ),
            )

        @mcp.tool(
            name="kubectl_apply",
            annotations={"title": "Apply Manifest", "readOnlyHint": False, "destructiveHint": True},
        )
        async def kubectl_apply(
            manifest: str | None = None,
            manifestPath: str | None = None,
            namespace: str | None = None,
            dryRun: bool = False,
        ) -> str:
            """Apply a YAML manifest given inline or as a file path."""
            return await registry.call(
                "kubectl_apply",
                _drop_none(
                    manifest=manifest,
                    manifestPath=manifestPath,
                    namespace=namespace,
                    dryRun=dryRun,
                ),
            )

        @mcp.tool(
            name="kubectl_logs",
            annotations={"title": "Pod Logs", "readOnlyHint": True, "destructiveHint": False},
        )
        async def kubectl_logs(
            name: str,
            namespace: str | None = None,
            container: str | None = None,
            tail: int | None = None,
            previous: bool = False,
            since: str | None = None,
        ) -> str:
            """Fetch logs from a pod (or type/name such as deployment/web)."""
            return await registry.call(
                "kubectl_logs",
                _drop_none(
                    name=name,
                    namespace=namespace,
                    container=container,
                    tail=tail,
                    previous=previous,
                    since=since,
                ),
            )

        @mcp.tool(
            name="kubectl_exec",
            annotations={"title": "Exec in Pod", "readOnlyHint": False, "destructiveHint": True},
        )
        async def kubectl_exec(
            name: str,
            command: list[str],
            namespace: str | None = None,
            container: str | None = None,
        ) -> str:
            """Run a non-interactive command inside a pod."""
            return await registry.call(
                "kubectl_exec",
                _drop_none(name=name, command=command, namespace=namespace, container=container),
            )

        @mcp.tool(
            name="kubectl_cp",
            annotations={"title": "Copy Files", "readOnlyHint": False, "destructiveHint": True},
        )
        async def kubectl_cp(
            sourceFilePath: str,
            destinationFilePath: str,
            container: str | None = None,
        ) -> str:
            """
            Copy files between the local machine and a pod.

            Args:
                sourceFilePath: Local path or [namespace/]pod:path
                destinationFilePath: Local path or [namespace/]pod:path
                container: Container in the pod; defaults to the first one
            """
            return await registry.call(
                "kubectl_cp",
                _drop_none(
                    sourceFilePath=sourceFilePath,
                    destinationFilePath=destinationFilePath,
                    container=container,
                ),
            )

        @mcp.tool(
            name="kubectl_apply_and_wait",
            annotations={"title": "Apply and Wait Ready", "readOnlyHint": False, "destructiveHint": True},
        )
        async def kubectl_apply_and_wait(
            name: str,
            manifest: str | None = None,
            manifestPath: str | None = None,
            namespace: str | None = None,
            resourceType: str = "pod",
        ) -> str:
            """
            Apply a manifest, then wait until the named pod is Running with
            all containers ready. Fails with LifecycleTimedOut otherwise.
            """
            return await registry.apply_and_wait(
                _drop_none(
                    name=name,
                    manifest=manifest,
                    manifestPath=manifestPath,
                    namespace=namespace,
                    resourceType=resourceType,
                )
            )

        @mcp.tool(
            name="k8s_ping",
            annotations={"title": "Ping", "readOnlyHint": True, "destructiveHint": False},
        )
        async def k8s_ping() -> str:
            """Simple ping tool to verify the server is responding."""
            return f"pong from kubectl_mcp v{__version__}"

        self._registered = [*self.dispatcher.tool_names, "kubectl_apply_and_wait", "k8s_ping"]
