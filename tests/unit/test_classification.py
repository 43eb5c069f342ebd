"""
Unit tests for nonzero-exit classification.
"""

import pytest

from kubectl_mcp.executor import (
    ErrorKind,
    ExecutionResult,
    PermissionDeniedError,
    ProcessFailedError,
    ResourceNotFoundError,
    check_result,
    classify_failure,
)


def _failed(stderr: str, exit_code: int = 1, stdout: str = "", argv=None) -> ExecutionResult:
    return ExecutionResult(
        exit_code=exit_code,
        stdout=stdout,
        stderr=stderr,
        duration_ms=5,
        argv=argv or ["kubectl", "get", "pod", "missing"],
    )


class TestClassifyFailure:
    """stderr text decides the failure kind."""

    @pytest.mark.parametrize(
        "stderr",
        [
            'Error from server (NotFound): pods "missing" not found',
            'error: the server doesn\'t have a resource type "foo" NotFound',
            "Error from server (NotFound): namespaces \"ghost\" not found",
        ],
    )
    def test_not_found(self, stderr: str):
        error = classify_failure(_failed(stderr))

        assert isinstance(error, ResourceNotFoundError)
        assert error.kind == ErrorKind.RESOURCE_NOT_FOUND
        assert "not found" in error.message.lower() or "notfound" in error.message.lower()

    @pytest.mark.parametrize(
        "stderr",
        [
            'Error from server (Forbidden): pods is forbidden: User "dev" cannot list resource "pods"',
            "error: You must be logged in to the server (Unauthorized)",
        ],
    )
    def test_permission_denied(self, stderr: str):
        error = classify_failure(_failed(stderr))

        assert isinstance(error, PermissionDeniedError)
        assert error.kind == ErrorKind.PERMISSION_DENIED

    def test_generic_failure_keeps_exit_code(self):
        error = classify_failure(_failed("error: unknown flag: --bogus", exit_code=2))

        assert isinstance(error, ProcessFailedError)
        assert error.exit_code == 2
        assert "unknown flag" in error.message

    def test_output_preserved(self):
        error = classify_failure(_failed("boom", stdout="partial"))

        assert error.stdout == "partial"
        assert error.stderr == "boom"
        assert error.argv == ["kubectl", "get", "pod", "missing"]

    def test_empty_stderr_falls_back_to_exit_code(self):
        error = classify_failure(_failed("", exit_code=7))
        assert "exit code 7" in error.message


class TestExecClassification:
    """exec stderr mixes kubectl errors with the container's own output."""

    EXEC_ARGV = ["kubectl", "exec", "web-0", "--", "foo"]

    def test_missing_command_in_container_is_process_failure(self):
        error = classify_failure(_failed("sh: foo: not found", exit_code=127, argv=self.EXEC_ARGV))

        assert isinstance(error, ProcessFailedError)
        assert error.exit_code == 127

    def test_missing_pod_is_not_found(self):
        error = classify_failure(
            _failed('Error from server (NotFound): pods "web-0" not found', argv=self.EXEC_ARGV)
        )
        assert isinstance(error, ResourceNotFoundError)


class TestCheckResult:
    """check_result raises only on nonzero exits."""

    def test_success_passes_through(self):
        result = ExecutionResult(exit_code=0, stdout="ok", stderr="warning: x", duration_ms=1)
        assert check_result(result) is result

    def test_failure_raises_classified(self):
        with pytest.raises(ResourceNotFoundError):
            check_result(_failed('pods "missing" not found'))
