"""
Output interpretation.

Wraps captured stdout in the single-block ToolResponse envelope, parsing
it first when JSON output was requested.
"""

import json
from typing import Optional

from kubectl_mcp.executor.types import (
    ExecutionResult,
    OutputFormat,
    OutputParseError,
    ToolResponse,
)


def normalize_text(text: str) -> str:
    """Strip trailing whitespace from every line and from the end."""
    return "\n".join(line.rstrip() for line in text.rstrip().splitlines())


def interpret(
    result: ExecutionResult,
    output_format: Optional[OutputFormat] = None,
    empty_message: Optional[str] = None,
) -> ToolResponse:
    """
    Turn a successful execution into a ToolResponse.

    Args:
        result: Completed execution
        output_format: Format requested with ``-o``
        empty_message: Text to return when stdout is empty

    Returns:
        ToolResponse with one text block; ``data`` holds the parsed
        object for JSON output

    Raises:
        OutputParseError: If JSON was requested and stdout is not JSON
    """
    if output_format == OutputFormat.JSON:
        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise OutputParseError(
                f"Expected JSON output but could not parse it: {e}",
                stdout=result.stdout,
                stderr=result.stderr,
                argv=result.argv,
            ) from e
        return ToolResponse.from_text(result.stdout.strip(), data=data)

    text = normalize_text(result.stdout)
    if not text and empty_message:
        text = empty_message
    return ToolResponse.from_text(text)
