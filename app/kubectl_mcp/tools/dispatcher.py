"""
Command dispatcher.

The single entry point behind every simple tool: resolves a tool name and
its JSON arguments into a CommandRequest, builds the argument vector,
runs it, and interprets the output. Any failure propagates with its
classified kind intact.
"""

from contextlib import ExitStack
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from kubectl_mcp.executor.builder import build_arguments, coerce_flag_value
from kubectl_mcp.executor.interpreter import interpret
from kubectl_mcp.executor.runner import check_result
from kubectl_mcp.executor.types import (
    CommandRequest,
    ExecutionResult,
    FlagValue,
    MalformedRequestError,
    OutputFormat,
    ToolResponse,
)
from kubectl_mcp.tools.manifests import resolve_manifest
from kubectl_mcp.utils.logging import get_logger

logger = get_logger(__name__)


class Runner(Protocol):
    """Anything that can run an argument vector (real or scripted)."""

    async def run(self, args: list[str], timeout: Optional[float] = None) -> ExecutionResult:
        ...


@dataclass
class PreparedCall:
    """A request plus the text to report when kubectl prints nothing."""

    request: CommandRequest
    empty_message: Optional[str] = None


# =============================================================================
# Argument helpers
# =============================================================================


def _required_str(arguments: dict[str, Any], key: str) -> str:
    value = arguments.get(key)
    if not isinstance(value, str) or not value.strip():
        raise MalformedRequestError(f"'{key}' is required and must be a non-empty string")
    return value.strip()


def _optional_str(arguments: dict[str, Any], key: str) -> Optional[str]:
    value = arguments.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise MalformedRequestError(f"'{key}' must be a string")
    return value.strip() or None


def _string_list(arguments: dict[str, Any], key: str) -> tuple[str, ...]:
    value = arguments.get(key)
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise MalformedRequestError(f"'{key}' must be a list of strings")
    return tuple(value)


def _flags(arguments: dict[str, Any], key: str = "flags") -> dict[str, FlagValue]:
    value = arguments.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MalformedRequestError(f"'{key}' must be an object")
    return {str(k): coerce_flag_value(str(k), v) for k, v in value.items()}


def _output_format(value: Any) -> Optional[OutputFormat]:
    if value is None or value == "":
        return None
    try:
        return OutputFormat(value)
    except ValueError:
        allowed = ", ".join(f.value for f in OutputFormat)
        raise MalformedRequestError(
            f"Unsupported output format '{value}'. Allowed: {allowed}"
        ) from None


# =============================================================================
# Tool -> request table
# =============================================================================


def _prepare_generic(arguments: dict[str, Any], stack: ExitStack) -> PreparedCall:
    return PreparedCall(
        CommandRequest(
            verb=_required_str(arguments, "command"),
            sub_command=_optional_str(arguments, "subCommand"),
            resource_type=_optional_str(arguments, "resourceType"),
            name=_optional_str(arguments, "name"),
            namespace=_optional_str(arguments, "namespace"),
            output_format=_output_format(arguments.get("outputFormat")),
            flags=_flags(arguments),
            positional_args=_string_list(arguments, "args"),
        ),
        empty_message="Command completed successfully",
    )


def _prepare_get(arguments: dict[str, Any], stack: ExitStack) -> PreparedCall:
    all_namespaces = bool(arguments.get("allNamespaces"))
    flags: dict[str, FlagValue] = {
        "all-namespaces": all_namespaces,
        "selector": _optional_str(arguments, "labelSelector"),
        "field-selector": _optional_str(arguments, "fieldSelector"),
    }
    return PreparedCall(
        CommandRequest(
            verb="get",
            resource_type=_required_str(arguments, "resourceType"),
            name=_optional_str(arguments, "name"),
            namespace=None if all_namespaces else _optional_str(arguments, "namespace"),
            output_format=_output_format(arguments.get("output", "json")),
            flags=flags,
        ),
    )


def _prepare_describe(arguments: dict[str, Any], stack: ExitStack) -> PreparedCall:
    return PreparedCall(
        CommandRequest(
            verb="describe",
            resource_type=_required_str(arguments, "resourceType"),
            name=_required_str(arguments, "name"),
            namespace=_optional_str(arguments, "namespace"),
        )
    )


def _prepare_create(arguments: dict[str, Any], stack: ExitStack) -> PreparedCall:
    return PreparedCall(
        CommandRequest(
            verb="create",
            resource_type=_required_str(arguments, "resourceType"),
            name=_required_str(arguments, "name"),
            namespace=_optional_str(arguments, "namespace"),
            flags=_flags(arguments),
            positional_args=_string_list(arguments, "args"),
        )
    )


def _prepare_delete(arguments: dict[str, Any], stack: ExitStack) -> PreparedCall:
    grace_period = arguments.get("gracePeriodSeconds")
    flags: dict[str, FlagValue] = {
        "force": bool(arguments.get("force")),
        "grace-period": coerce_flag_value("grace-period", grace_period),
    }
    return PreparedCall(
        CommandRequest(
            verb="delete",
            resource_type=_required_str(arguments, "resourceType"),
            name=_required_str(arguments, "name"),
            namespace=_optional_str(arguments, "namespace"),
            flags=flags,
        )
    )


def _prepare_apply(arguments: dict[str, Any], stack: ExitStack) -> PreparedCall:
    manifest_path = resolve_manifest(arguments, stack)
    return PreparedCall(
        CommandRequest(
            verb="apply",
            namespace=_optional_str(arguments, "namespace"),
            flags={"dry-run": "client" if arguments.get("dryRun") else None},
            positional_args=("-f", manifest_path),
        )
    )


def _prepare_logs(arguments: dict[str, Any], stack: ExitStack) -> PreparedCall:
    flags: dict[str, FlagValue] = {
        "container": _optional_str(arguments, "container"),
        "tail": coerce_flag_value("tail", arguments.get("tail")),
        "previous": bool(arguments.get("previous")),
        "since": _optional_str(arguments, "since"),
    }
    return PreparedCall(
        CommandRequest(
            verb="logs",
            name=_required_str(arguments, "name"),
            namespace=_optional_str(arguments, "namespace"),
            flags=flags,
        ),
        empty_message="(no log output)",
    )


def _prepare_exec(arguments: dict[str, Any], stack: ExitStack) -> PreparedCall:
    command = _string_list(arguments, "command")
    if not command:
        raise MalformedRequestError("'command' must list the program and its arguments")
    return PreparedCall(
        CommandRequest(
            verb="exec",
            namespace=_optional_str(arguments, "namespace"),
            flags={"container": _optional_str(arguments, "container")},
            positional_args=(_required_str(arguments, "name"), "--", *command),
        )
    )


def _prepare_cp(arguments: dict[str, Any], stack: ExitStack) -> PreparedCall:
    source = _required_str(arguments, "sourceFilePath")
    destination = _required_str(arguments, "destinationFilePath")
    return PreparedCall(
        CommandRequest(
            verb="cp",
            flags={"container": _optional_str(arguments, "container")},
            positional_args=(source, destination),
        ),
        empty_message=f"File copied from {source} to {destination} successfully.",
    )


ToolPreparer = Callable[[dict[str, Any], ExitStack], PreparedCall]

TOOL_REQUESTS: dict[str, ToolPreparer] = {
    "kubectl_generic": _prepare_generic,
    "kubectl_get": _prepare_get,
    "kubectl_describe": _prepare_describe,
    "kubectl_create": _prepare_create,
    "kubectl_delete": _prepare_delete,
    "kubectl_apply": _prepare_apply,
    "kubectl_logs": _prepare_logs,
    "kubectl_exec": _prepare_exec,
    "kubectl_cp": _prepare_cp,
}


class CommandDispatcher:
    """
    Resolves tool calls into kubectl executions.

    Holds no mutable state across calls; concurrent dispatches share only
    the (stateless) runner.
    """

    def __init__(self, runner: Runner, timeout: Optional[float] = None):
        """
        Initialize the dispatcher.

        Args:
            runner: Process runner used for every invocation
            timeout: Optional per-call timeout override in seconds
        """
        self.runner = runner
        self.timeout = timeout

    @property
    def tool_names(self) -> list[str]:
        return list(TOOL_REQUESTS)

    async def dispatch(self, tool_name: str, arguments: Optional[dict[str, Any]] = None) -> ToolResponse:
        """
        Run one tool call.

        Args:
            tool_name: Registered tool name (e.g. 'kubectl_cp')
            arguments: JSON arguments from the protocol layer

        Returns:
            ToolResponse with a single text block

        Raises:
            KubectlToolError: Classified failure of any kind
        """
        prepare = TOOL_REQUESTS.get(tool_name)
        if prepare is None:
            raise MalformedRequestError(f"Unknown tool '{tool_name}'")

        with ExitStack() as stack:
            prepared = prepare(arguments or {}, stack)
            return await self.execute(prepared.request, prepared.empty_message)

    async def execute(
        self,
        request: CommandRequest,
        empty_message: Optional[str] = None,
    ) -> ToolResponse:
        """Build, run and interpret a single request."""
        args = build_arguments(request)
        result = await self.runner.run(args, timeout=self.timeout)
        check_result(result)
        logger.debug(f"{request.verb} finished in {result.duration_ms}ms")
        return interpret(result, request.output_format, empty_message)
