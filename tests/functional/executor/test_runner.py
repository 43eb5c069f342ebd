#!/usr/bin/env python3
"""
Functional tests for the process runner.

These tests spawn real subprocesses using standard POSIX tools in place
of kubectl, so they need no cluster:
1. Exit codes and captured streams
2. Output bounds and timeouts
3. Environment handling
"""

import asyncio

import pytest

from kubectl_mcp.executor import (
    ErrorKind,
    OutputTooLargeError,
    ProcessRunner,
    ProcessTimeoutError,
    ResourceNotFoundError,
    ToolNotInstalledError,
    check_result,
    create_runner,
)


# =============================================================================
# Execution Tests
# =============================================================================
class TestExecution:
    """Test real subprocess execution."""

    @pytest.mark.asyncio
    async def test_captures_streams_and_exit_code(self):
        runner = ProcessRunner(binary="sh")
        result = await runner.run(["-c", "echo hello; echo oops >&2; exit 3"])

        assert result.exit_code == 3
        assert not result.success
        assert result.stdout == "hello\n"
        assert result.stderr == "oops\n"
        assert result.argv[0] == "sh"
        assert result.duration_ms >= 0

    @pytest.mark.asyncio
    async def test_arguments_are_not_shell_interpreted(self):
        runner = ProcessRunner(binary="echo")
        result = await runner.run(["$(whoami)", "a;b", "`id`"])

        assert result.success
        assert result.stdout == "$(whoami) a;b `id`\n"

    @pytest.mark.asyncio
    async def test_stdin_is_not_inherited(self):
        runner = ProcessRunner(binary="cat", default_timeout=5)
        result = await runner.run([])

        assert result.success
        assert result.stdout == ""

    @pytest.mark.asyncio
    async def test_classified_failure(self):
        runner = ProcessRunner(binary="sh")
        result = await runner.run([
            "-c",
            "echo 'Error from server (NotFound): pods \"ghost\" not found' >&2; exit 1",
        ])

        with pytest.raises(ResourceNotFoundError) as exc_info:
            check_result(result)

        assert exc_info.value.argv == result.argv
        assert "ghost" in exc_info.value.stderr


# =============================================================================
# Limit Tests
# =============================================================================
class TestLimits:
    """Test timeout and output bounds."""

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self):
        runner = ProcessRunner(binary="sleep")

        with pytest.raises(ProcessTimeoutError) as exc_info:
            await runner.run(["5"], timeout=0.2)

        assert exc_info.value.kind == ErrorKind.PROCESS_TIMEOUT
        assert exc_info.value.argv == ["sleep", "5"]

    @pytest.mark.asyncio
    async def test_timeout_with_background_child_holding_pipes(self):
        runner = ProcessRunner(binary="sh")

        # the outer bound only trips if the runner itself hangs
        with pytest.raises(ProcessTimeoutError):
            await asyncio.wait_for(
                runner.run(["-c", "sleep 30 & sleep 30"], timeout=0.5),
                timeout=5,
            )

    @pytest.mark.asyncio
    async def test_exited_leader_with_lingering_child_times_out(self):
        runner = ProcessRunner(binary="sh")

        with pytest.raises(ProcessTimeoutError):
            await asyncio.wait_for(
                runner.run(["-c", "sleep 30 & echo started"], timeout=0.5),
                timeout=5,
            )

    @pytest.mark.asyncio
    async def test_output_too_large(self):
        runner = ProcessRunner(binary="head", max_output_size=1000)

        with pytest.raises(OutputTooLargeError) as exc_info:
            await runner.run(["-c", "5000", "/dev/zero"])

        assert exc_info.value.kind == ErrorKind.OUTPUT_TOO_LARGE

    @pytest.mark.asyncio
    async def test_output_at_limit_is_accepted(self):
        runner = ProcessRunner(binary="head", max_output_size=1000)
        result = await runner.run(["-c", "1000", "/dev/zero"])

        assert result.success
        assert len(result.stdout) == 1000

    @pytest.mark.asyncio
    async def test_missing_binary(self):
        runner = ProcessRunner(binary="kubectl-not-installed-anywhere")

        with pytest.raises(ToolNotInstalledError) as exc_info:
            await runner.run(["version"])

        assert "not found" in exc_info.value.message


# =============================================================================
# Environment Tests
# =============================================================================
class TestEnvironment:
    """Test environment composition."""

    @pytest.mark.asyncio
    async def test_kubeconfig_override(self):
        runner = ProcessRunner(
            binary="sh",
            kubeconfig="/tmp/explicit-kubeconfig",
            environment={"EXTRA_VAR": "extra"},
        )
        result = await runner.run(["-c", 'echo "$KUBECONFIG $EXTRA_VAR $CALL_VAR"'], environment={"CALL_VAR": "call"})

        assert result.stdout == "/tmp/explicit-kubeconfig extra call\n"

    def test_kubeconfig_passthrough(self, monkeypatch):
        monkeypatch.setenv("KUBECONFIG", "/home/user/.kube/other")
        env = ProcessRunner().build_environment()
        assert env["KUBECONFIG"] == "/home/user/.kube/other"

    def test_kubeconfig_wins_over_call_override(self):
        runner = ProcessRunner(kubeconfig="/etc/kube/config")
        env = runner.build_environment({"KUBECONFIG": "/tmp/other"})
        assert env["KUBECONFIG"] == "/etc/kube/config"


def test_create_runner_from_dict():
    runner = create_runner({"binary": "/opt/kubectl", "default_timeout": 15, "kubeconfig": "/k"})

    assert runner.binary == "/opt/kubectl"
    assert runner.default_timeout == 15
    assert runner.kubeconfig == "/k"
    assert runner.max_output_size == 10 * 1024 * 1024
