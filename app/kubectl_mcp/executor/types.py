"""
Type definitions for kubectl command translation and execution.

This module defines the data structures passed between the argument
builder, the process runner, the output interpreter and the dispatcher,
plus the classified error hierarchy they raise.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class OutputFormat(str, Enum):
    """Output formats accepted for the ``-o`` flag."""

    JSON = "json"
    YAML = "yaml"
    WIDE = "wide"
    NAME = "name"
    NONE = "none"  # Emit no -o token at all


# A flag value is a string (rendered --key=value), True (rendered --key)
# or False/None (omitted).
FlagValue = Union[str, bool, None]


@dataclass(frozen=True)
class CommandRequest:
    """
    Structured description of one kubectl invocation.

    Attributes:
        verb: Primary kubectl action (get, create, cp, exec, ...)
        sub_command: Optional second keyword (e.g. "status" for rollout)
        resource_type: Kind of object acted on (pod, namespace, ...)
        name: Object name
        namespace: Target namespace, rendered as ``-n <namespace>``
        output_format: Requested output format
        flags: Flag name -> value, rendered as ``--key=value`` / ``--key``
        positional_args: Trailing arguments, passed through as-is
    """

    verb: str
    sub_command: Optional[str] = None
    resource_type: Optional[str] = None
    name: Optional[str] = None
    namespace: Optional[str] = None
    output_format: Optional[OutputFormat] = None
    flags: dict[str, FlagValue] = field(default_factory=dict)
    positional_args: tuple[str, ...] = ()


@dataclass
class ExecutionResult:
    """
    Result of running one subprocess to completion.

    Attributes:
        exit_code: Process exit code
        stdout: Captured standard output (bounded by max_output_size)
        stderr: Captured standard error
        duration_ms: Wall-clock duration of the run
        argv: Full argument vector that was executed, binary included
    """

    exit_code: int
    stdout: str
    stderr: str
    duration_ms: int
    argv: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if the process exited cleanly."""
        return self.exit_code == 0


@dataclass(frozen=True)
class ContentBlock:
    """A single text block of a tool response."""

    text: str
    type: str = "text"


@dataclass
class ToolResponse:
    """
    Envelope returned to the protocol layer.

    ``data`` carries the parsed object when JSON output was requested.
    It is for in-process consumers only and is never serialised.
    """

    content: list[ContentBlock]
    data: Any = None

    @classmethod
    def from_text(cls, text: str, data: Any = None) -> "ToolResponse":
        """Build a single-block response."""
        return cls(content=[ContentBlock(text=text)], data=data)

    @property
    def text(self) -> str:
        """Text of the single content block."""
        return self.content[0].text if self.content else ""

    def to_dict(self) -> dict:
        """Convert to the wire shape ``{"content": [{"type", "text"}]}``."""
        return {
            "content": [{"type": block.type, "text": block.text} for block in self.content]
        }


class ErrorKind(str, Enum):
    """Failure classification surfaced to callers."""

    MALFORMED_REQUEST = "MalformedRequest"
    TOOL_NOT_INSTALLED = "ToolNotInstalled"
    RESOURCE_NOT_FOUND = "ResourceNotFound"
    PERMISSION_DENIED = "PermissionDenied"
    OUTPUT_TOO_LARGE = "OutputTooLarge"
    OUTPUT_PARSE_ERROR = "OutputParseError"
    PROCESS_TIMEOUT = "ProcessTimeout"
    LIFECYCLE_TIMED_OUT = "LifecycleTimedOut"
    PROCESS_FAILED = "ProcessFailed"


class KubectlToolError(Exception):
    """
    Base exception for all classified failures.

    The original stdout/stderr text is kept for diagnostics.
    """

    kind: ErrorKind = ErrorKind.PROCESS_FAILED

    def __init__(
        self,
        message: str,
        stdout: str = "",
        stderr: str = "",
        argv: Optional[list[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.stdout = stdout
        self.stderr = stderr
        self.argv = list(argv or [])

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "argv": self.argv,
        }


class MalformedRequestError(KubectlToolError):
    """Raised before spawn when a request breaks its verb contract."""

    kind = ErrorKind.MALFORMED_REQUEST


class ToolNotInstalledError(KubectlToolError):
    """Raised when the kubectl binary cannot be found."""

    kind = ErrorKind.TOOL_NOT_INSTALLED


class ResourceNotFoundError(KubectlToolError):
    """Raised when kubectl reports the named resource does not exist."""

    kind = ErrorKind.RESOURCE_NOT_FOUND


class PermissionDeniedError(KubectlToolError):
    """Raised when kubectl reports an authorization failure."""

    kind = ErrorKind.PERMISSION_DENIED


class OutputTooLargeError(KubectlToolError):
    """Raised when captured output exceeds the configured bound."""

    kind = ErrorKind.OUTPUT_TOO_LARGE

    def __init__(self, limit: int, argv: Optional[list[str]] = None):
        super().__init__(f"Output exceeded {limit} bytes", argv=argv)
        self.limit = limit


class OutputParseError(KubectlToolError):
    """Raised when JSON output was requested but stdout is not JSON."""

    kind = ErrorKind.OUTPUT_PARSE_ERROR


class ProcessTimeoutError(KubectlToolError):
    """Raised when a subprocess does not finish in time."""

    kind = ErrorKind.PROCESS_TIMEOUT

    def __init__(self, timeout: float, argv: Optional[list[str]] = None):
        super().__init__(f"Command timed out after {timeout}s", argv=argv)
        self.timeout = timeout


class LifecycleTimedOutError(KubectlToolError):
    """Raised when a readiness poll exhausts its attempt budget."""

    kind = ErrorKind.LIFECYCLE_TIMED_OUT

    def __init__(self, message: str, attempts: int, last_status: Any = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_status = last_status


class ProcessFailedError(KubectlToolError):
    """Raised for any other nonzero exit."""

    kind = ErrorKind.PROCESS_FAILED

    def __init__(
        self,
        message: str,
        exit_code: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
        argv: Optional[list[str]] = None,
    ):
        super().__init__(message, stdout=stdout, stderr=stderr, argv=argv)
        self.exit_code = exit_code
