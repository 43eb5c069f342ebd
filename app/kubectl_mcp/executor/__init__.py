"""
Kubectl command translation and execution.

This module handles:
- Building argument vectors from structured requests
- Async subprocess execution with bounded output
- Classifying failures and interpreting output
"""

from kubectl_mcp.executor.types import (
    CommandRequest,
    ContentBlock,
    ErrorKind,
    ExecutionResult,
    FlagValue,
    KubectlToolError,
    LifecycleTimedOutError,
    MalformedRequestError,
    OutputFormat,
    OutputParseError,
    OutputTooLargeError,
    PermissionDeniedError,
    ProcessFailedError,
    ProcessTimeoutError,
    ResourceNotFoundError,
    ToolNotInstalledError,
    ToolResponse,
)
from kubectl_mcp.executor.contracts import (
    VERB_CONTRACTS,
    VerbContract,
    get_contract,
    validate_request,
)
from kubectl_mcp.executor.builder import (
    CopyLocation,
    build_arguments,
    coerce_flag_value,
    parse_copy_location,
    render_flags,
    validate_copy_paths,
)
from kubectl_mcp.executor.runner import (
    ProcessRunner,
    check_result,
    classify_failure,
    create_runner,
)
from kubectl_mcp.executor.interpreter import interpret, normalize_text

__all__ = [
    # Types
    "CommandRequest",
    "ContentBlock",
    "ErrorKind",
    "ExecutionResult",
    "FlagValue",
    "OutputFormat",
    "ToolResponse",
    # Exceptions
    "KubectlToolError",
    "LifecycleTimedOutError",
    "MalformedRequestError",
    "OutputParseError",
    "OutputTooLargeError",
    "PermissionDeniedError",
    "ProcessFailedError",
    "ProcessTimeoutError",
    "ResourceNotFoundError",
    "ToolNotInstalledError",
    # Contracts
    "VERB_CONTRACTS",
    "VerbContract",
    "get_contract",
    "validate_request",
    # Builder
    "CopyLocation",
    "build_arguments",
    "coerce_flag_value",
    "parse_copy_location",
    "render_flags",
    "validate_copy_paths",
    # Runner
    "ProcessRunner",
    "check_result",
    "classify_failure",
    "create_runner",
    # Interpreter
    "interpret",
    "normalize_text",
]
