"""
Async process execution engine.

This module runs the kubectl binary with asyncio subprocess management:
- Argument vectors are passed straight to exec, never through a shell
- Timeout handling kills the child and raises ProcessTimeoutError
- Output size is bounded while reading, before decode
- Nonzero exits are classified from stderr into typed failures
"""

import asyncio
import os
import shlex
import signal
import time
from typing import Any, Mapping, Optional

from kubectl_mcp.executor.types import (
    ExecutionResult,
    KubectlToolError,
    OutputTooLargeError,
    PermissionDeniedError,
    ProcessFailedError,
    ProcessTimeoutError,
    ResourceNotFoundError,
    ToolNotInstalledError,
)
from kubectl_mcp.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_OUTPUT_SIZE = 10 * 1024 * 1024
_READ_CHUNK = 64 * 1024
_REAP_GRACE = 2.0

_NOT_FOUND_MARKERS = ("notfound", "not found")
# exec stderr carries the container's own output; match only kubectl's NotFound
_EXEC_NOT_FOUND_MARKERS = ("(notfound)",)
_PERMISSION_MARKERS = ("forbidden", "unauthorized", "must be logged in")


class ProcessRunner:
    """
    Executes kubectl with bounded output and a reproducible environment.

    The runner is stateless between calls, so one instance can serve any
    number of concurrent invocations.
    """

    def __init__(
        self,
        binary: str = "kubectl",
        default_timeout: float = 60,
        max_output_size: int = DEFAULT_MAX_OUTPUT_SIZE,
        kubeconfig: Optional[str] = None,
        environment: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize the process runner.

        Args:
            binary: Executable name or path
            default_timeout: Default timeout in seconds
            max_output_size: Maximum bytes captured per stream
            kubeconfig: Explicit KUBECONFIG override; passthrough if None
            environment: Extra variables layered over the caller's environment
        """
        self.binary = binary
        self.default_timeout = default_timeout
        self.max_output_size = max_output_size
        self.kubeconfig = kubeconfig
        self.environment = dict(environment or {})

    def build_environment(self, overrides: Optional[Mapping[str, str]] = None) -> dict[str, str]:
        """Caller's environment plus explicit overrides, KUBECONFIG last."""
        env = dict(os.environ)
        env.update(self.environment)
        if overrides:
            env.update(overrides)
        if self.kubeconfig:
            env["KUBECONFIG"] = self.kubeconfig
        return env

    async def run(
        self,
        args: list[str],
        timeout: Optional[float] = None,
        max_output_size: Optional[int] = None,
        environment: Optional[Mapping[str, str]] = None,
    ) -> ExecutionResult:
        """
        Run the binary with the given argument vector.

        A nonzero exit is returned, not raised; use check_result() to
        turn it into a classified failure.

        Args:
            args: Argument vector, excluding the binary
            timeout: Optional timeout override in seconds
            max_output_size: Optional output bound override in bytes
            environment: Optional per-call environment overrides

        Returns:
            ExecutionResult for the completed process

        Raises:
            ToolNotInstalledError: If the binary cannot be found
            ProcessTimeoutError: If the process exceeds the timeout
            OutputTooLargeError: If stdout or stderr exceeds the bound
        """
        timeout = timeout or self.default_timeout
        limit = max_output_size or self.max_output_size
        argv = [self.binary, *args]

        logger.debug(f"Running: {shlex.join(argv)}")
        started = time.monotonic()

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self.build_environment(environment),
                start_new_session=True,
            )
        except FileNotFoundError as e:
            raise ToolNotInstalledError(
                f"{self.binary} command not found. Please ensure kubectl is "
                f"installed and configured correctly.",
                argv=argv,
            ) from e
        except PermissionError as e:
            raise ProcessFailedError(
                f"{self.binary} is not executable: {e}",
                argv=argv,
            ) from e

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                self._communicate(process, limit, argv),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            await _kill(process)
            logger.warning(f"Command timed out after {timeout}s: {shlex.join(argv)}")
            raise ProcessTimeoutError(timeout, argv=argv) from None
        except OutputTooLargeError:
            await _kill(process)
            logger.warning(f"Output exceeded {limit} bytes: {shlex.join(argv)}")
            raise

        duration_ms = int((time.monotonic() - started) * 1000)

        return ExecutionResult(
            exit_code=process.returncode,
            stdout=stdout_bytes.decode("utf-8", errors="replace"),
            stderr=stderr_bytes.decode("utf-8", errors="replace"),
            duration_ms=duration_ms,
            argv=argv,
        )

    async def _communicate(
        self,
        process: asyncio.subprocess.Process,
        limit: int,
        argv: list[str],
    ) -> tuple[bytes, bytes]:
        """Drain both pipes concurrently, then reap the process."""
        readers = [
            asyncio.ensure_future(_read_bounded(process.stdout, limit, argv)),
            asyncio.ensure_future(_read_bounded(process.stderr, limit, argv)),
        ]
        try:
            stdout_bytes, stderr_bytes = await asyncio.gather(*readers)
        except BaseException:
            for reader in readers:
                reader.cancel()
            raise

        await process.wait()
        return stdout_bytes, stderr_bytes


async def _read_bounded(
    stream: asyncio.StreamReader,
    limit: int,
    argv: list[str],
) -> bytes:
    buffer = bytearray()
    while True:
        chunk = await stream.read(_READ_CHUNK)
        if not chunk:
            return bytes(buffer)
        buffer.extend(chunk)
        if len(buffer) > limit:
            raise OutputTooLargeError(limit, argv=argv)


async def _kill(process: asyncio.subprocess.Process) -> None:
    """
    Kill the child's process group, then reap it within a grace period.

    Helpers spawned by kubectl (exec credential plugins) share its pipes,
    and wait() does not return while any of them holds one open.
    """
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    try:
        await asyncio.wait_for(process.wait(), timeout=_REAP_GRACE)
    except asyncio.TimeoutError:
        logger.warning(f"pid {process.pid} not reaped {_REAP_GRACE}s after kill")


def classify_failure(result: ExecutionResult) -> KubectlToolError:
    """
    Map a nonzero exit to the most specific failure kind.

    The stderr text decides: "not found" markers mean the resource does
    not exist, authorization markers mean the caller lacks permission,
    anything else is a generic process failure. For exec only kubectl's
    "(NotFound)" error counts, so a missing command inside the container
    stays a process failure.
    """
    stderr = result.stderr.strip()
    lowered = stderr.lower()
    detail = stderr or result.stdout.strip() or f"exit code {result.exit_code}"
    common = {"stdout": result.stdout, "stderr": result.stderr, "argv": result.argv}

    verb = result.argv[1] if len(result.argv) > 1 else None
    not_found_markers = _EXEC_NOT_FOUND_MARKERS if verb == "exec" else _NOT_FOUND_MARKERS

    if any(marker in lowered for marker in not_found_markers):
        return ResourceNotFoundError(f"Resource not found: {detail}", **common)

    if any(marker in lowered for marker in _PERMISSION_MARKERS):
        return PermissionDeniedError(f"Permission denied: {detail}", **common)

    return ProcessFailedError(
        f"Command failed with exit code {result.exit_code}: {detail}",
        exit_code=result.exit_code,
        **common,
    )


def check_result(result: ExecutionResult) -> ExecutionResult:
    """
    Raise the classified failure for a nonzero exit.

    Returns:
        The same result, when it succeeded
    """
    if not result.success:
        error = classify_failure(result)
        logger.warning(f"{error.kind.value}: {shlex.join(result.argv)}")
        raise error
    return result


def create_runner(command_config: Optional[dict[str, Any]] = None) -> ProcessRunner:
    """
    Factory function to create a ProcessRunner.

    Args:
        command_config: Optional command configuration with binary,
            default_timeout, max_output_size and kubeconfig

    Returns:
        Configured ProcessRunner instance
    """
    command_config = command_config or {}

    return ProcessRunner(
        binary=command_config.get("binary", "kubectl"),
        default_timeout=command_config.get("default_timeout", 60),
        max_output_size=command_config.get("max_output_size", DEFAULT_MAX_OUTPUT_SIZE),
        kubeconfig=command_config.get("kubeconfig"),
    )
