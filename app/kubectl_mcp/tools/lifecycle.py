"""
Resource lifecycle orchestration.

Composite operations that need more than one kubectl call because the
cluster converges asynchronously. Apply-and-wait is an explicit state
machine:

    Applying -> Polling -> Ready | TimedOut | Errored

Only the read-status step is ever repeated; the mutating apply runs once.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from kubectl_mcp.executor.types import (
    CommandRequest,
    KubectlToolError,
    LifecycleTimedOutError,
    OutputFormat,
    ResourceNotFoundError,
    ToolResponse,
)
from kubectl_mcp.tools.dispatcher import CommandDispatcher
from kubectl_mcp.utils.logging import get_logger

logger = get_logger(__name__)

ReadinessPredicate = Callable[[dict[str, Any]], bool]
Sleep = Callable[[float], Awaitable[Any]]


class LifecycleState(str, Enum):
    """States of the apply-and-wait sequence."""

    APPLYING = "Applying"
    POLLING = "Polling"
    READY = "Ready"
    TIMED_OUT = "TimedOut"
    ERRORED = "Errored"


def pod_is_ready(resource: dict[str, Any]) -> bool:
    """A pod is ready when Running and every container reports ready."""
    status = resource.get("status") or {}
    if status.get("phase") != "Running":
        return False
    container_statuses = status.get("containerStatuses") or []
    return all(cs.get("ready") is True for cs in container_statuses)


@dataclass
class ReadinessPoll:
    """
    Attempt accounting for one polling sequence.

    ``attempt`` counts predicate evaluations and never exceeds
    ``max_attempts``.
    """

    max_attempts: int
    interval: float
    predicate: ReadinessPredicate = pod_is_ready
    attempt: int = 0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.interval < 0:
            raise ValueError("interval must not be negative")

    @property
    def exhausted(self) -> bool:
        return self.attempt >= self.max_attempts

    def record(self, resource: Optional[dict[str, Any]]) -> bool:
        """
        Count one attempt and evaluate the predicate.

        A resource that is not visible yet counts as an attempt but is
        never ready.
        """
        if self.exhausted:
            raise RuntimeError("Readiness poll budget already exhausted")
        self.attempt += 1
        return resource is not None and self.predicate(resource)


@dataclass
class LifecycleOutcome:
    """Terminal result of a successful orchestration."""

    state: LifecycleState
    attempts: int
    resource: Optional[dict[str, Any]] = None
    transitions: list[LifecycleState] = field(default_factory=list)


class ResourceLifecycle:
    """
    Drives multi-step operations on top of the dispatcher.

    The sleep function is injectable so polling can be tested without
    real delays.
    """

    def __init__(
        self,
        dispatcher: CommandDispatcher,
        poll_interval: float = 2.0,
        max_attempts: int = 30,
        sleep: Sleep = asyncio.sleep,
    ):
        self.dispatcher = dispatcher
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self._sleep = sleep

    async def apply_and_wait(
        self,
        manifest_path: str,
        name: str,
        namespace: Optional[str] = None,
        resource_type: str = "pod",
        predicate: ReadinessPredicate = pod_is_ready,
    ) -> LifecycleOutcome:
        """
        Apply a manifest, then poll until the named resource is ready.

        Raises:
            LifecycleTimedOutError: If the poll budget runs out
            KubectlToolError: If apply or a status read fails
        """
        transitions = [LifecycleState.APPLYING]
        logger.info(f"Applying {manifest_path} for {resource_type}/{name}")

        apply_request = CommandRequest(
            verb="apply",
            namespace=namespace,
            positional_args=("-f", manifest_path),
        )
        try:
            await self.dispatcher.execute(apply_request)
        except KubectlToolError:
            transitions.append(LifecycleState.ERRORED)
            logger.warning(f"Apply failed for {resource_type}/{name}")
            raise

        return await self.wait_for_ready(
            name,
            namespace=namespace,
            resource_type=resource_type,
            predicate=predicate,
            transitions=transitions,
        )

    async def wait_for_ready(
        self,
        name: str,
        namespace: Optional[str] = None,
        resource_type: str = "pod",
        predicate: ReadinessPredicate = pod_is_ready,
        transitions: Optional[list[LifecycleState]] = None,
    ) -> LifecycleOutcome:
        """Poll ``get -o json`` until the predicate holds or attempts run out."""
        transitions = transitions if transitions is not None else []
        transitions.append(LifecycleState.POLLING)

        poll = ReadinessPoll(
            max_attempts=self.max_attempts,
            interval=self.poll_interval,
            predicate=predicate,
        )
        status_request = CommandRequest(
            verb="get",
            resource_type=resource_type,
            name=name,
            namespace=namespace,
            output_format=OutputFormat.JSON,
        )
        resource: Optional[dict[str, Any]] = None

        while not poll.exhausted:
            try:
                response = await self.dispatcher.execute(status_request)
                resource = response.data
            except ResourceNotFoundError:
                # Not visible yet
                resource = None
            except KubectlToolError:
                transitions.append(LifecycleState.ERRORED)
                logger.warning(f"Status read failed for {resource_type}/{name}")
                raise

            if poll.record(resource):
                transitions.append(LifecycleState.READY)
                logger.info(
                    f"{resource_type}/{name} ready after {poll.attempt} attempt(s)"
                )
                return LifecycleOutcome(
                    state=LifecycleState.READY,
                    attempts=poll.attempt,
                    resource=resource,
                    transitions=transitions,
                )

            if not poll.exhausted:
                await self._sleep(poll.interval)

        transitions.append(LifecycleState.TIMED_OUT)
        phase = ((resource or {}).get("status") or {}).get("phase", "unknown")
        logger.warning(
            f"{resource_type}/{name} not ready after {poll.attempt} attempts (phase={phase})"
        )
        raise LifecycleTimedOutError(
            f"{resource_type}/{name} did not become ready after "
            f"{poll.attempt} attempts (last phase: {phase})",
            attempts=poll.attempt,
            last_status=resource,
        )

    async def copy(
        self,
        source: str,
        destination: str,
        container: Optional[str] = None,
    ) -> ToolResponse:
        """
        Copy between a local path and a pod in a single kubectl call.

        The pod must already be ready; run wait_for_ready first when
        copying right after creating it.
        """
        arguments: dict[str, Any] = {
            "sourceFilePath": source,
            "destinationFilePath": destination,
        }
        if container:
            arguments["container"] = container
        return await self.dispatcher.dispatch("kubectl_cp", arguments)
