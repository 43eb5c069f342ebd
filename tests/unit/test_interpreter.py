"""
Unit tests for output interpretation.
"""

import json

import pytest

from kubectl_mcp.executor import (
    ErrorKind,
    ExecutionResult,
    OutputFormat,
    OutputParseError,
    interpret,
    normalize_text,
)


def _result(stdout: str) -> ExecutionResult:
    return ExecutionResult(exit_code=0, stdout=stdout, stderr="", duration_ms=3, argv=["kubectl", "get"])


class TestInterpret:
    """Envelope shape and parsing."""

    def test_json_is_parsed(self):
        payload = {"metadata": {"name": "cm-1"}, "data": {"key1": "value1"}}
        response = interpret(_result(json.dumps(payload) + "\n"), OutputFormat.JSON)

        assert response.data["metadata"]["name"] == "cm-1"
        assert response.data["data"]["key1"] == "value1"
        assert json.loads(response.text) == payload

    def test_invalid_json_keeps_original_text(self):
        with pytest.raises(OutputParseError) as exc_info:
            interpret(_result("NAME   READY\nweb    1/1\n"), OutputFormat.JSON)

        assert exc_info.value.kind == ErrorKind.OUTPUT_PARSE_ERROR
        assert exc_info.value.stdout == "NAME   READY\nweb    1/1\n"

    def test_empty_json_output_is_a_parse_error(self):
        with pytest.raises(OutputParseError):
            interpret(_result(""), OutputFormat.JSON)

    @pytest.mark.parametrize("output_format", [None, OutputFormat.WIDE, OutputFormat.NAME, OutputFormat.YAML])
    def test_text_passthrough(self, output_format):
        response = interpret(_result("NAME   READY   \nweb    1/1   \n\n"), output_format)

        assert response.text == "NAME   READY\nweb    1/1"
        assert response.data is None

    def test_single_text_block(self):
        response = interpret(_result("namespace/ns-1 created\n"))

        assert len(response.content) == 1
        assert response.to_dict() == {
            "content": [{"type": "text", "text": "namespace/ns-1 created"}]
        }

    def test_empty_message_used_for_empty_stdout(self):
        response = interpret(_result(""), None, empty_message="File copied")
        assert response.text == "File copied"

    def test_empty_message_ignored_when_stdout_present(self):
        response = interpret(_result("done\n"), None, empty_message="File copied")
        assert response.text == "done"


def test_normalize_text_keeps_leading_whitespace():
    assert normalize_text("  a  \n\tb\t\n") == "  a\n\tb"
