"""
Argument vector construction.

Turns a CommandRequest into the ordered list of tokens handed to the
process runner. Every user-supplied value becomes exactly one list
element; nothing is ever joined into a shell string, so spaces, quotes
and shell metacharacters in names or paths stay inert.

Token order:
    verb, sub_command?, resource_type?, name?, -n <ns>?, -o <fmt>?,
    --flags..., positional args...
"""

import re
from dataclasses import dataclass
from typing import Any, Optional

from kubectl_mcp.executor.contracts import validate_request
from kubectl_mcp.executor.types import (
    CommandRequest,
    FlagValue,
    MalformedRequestError,
    OutputFormat,
)


# DNS-1123 label (namespace) and subdomain (pod name)
_DNS_LABEL = r"[a-z0-9](?:[-a-z0-9]*[a-z0-9])?"
_DNS_SUBDOMAIN = r"[a-z0-9](?:[-a-z0-9.]*[a-z0-9])?"
_POD_REFERENCE = re.compile(
    rf"^(?:(?P<namespace>{_DNS_LABEL})/)?(?P<pod>{_DNS_SUBDOMAIN})$"
)


def build_arguments(request: CommandRequest) -> list[str]:
    """
    Build the kubectl argument vector for a request.

    Pure and deterministic: the same request always yields the same list.

    Args:
        request: Structured command description

    Returns:
        Ordered list of tokens, excluding the binary itself

    Raises:
        MalformedRequestError: If the request breaks its verb contract
    """
    contract = validate_request(request)

    if request.verb == "cp":
        validate_copy_paths(*request.positional_args)

    args: list[str] = [request.verb]

    if request.sub_command:
        args.append(request.sub_command)

    if not contract.positional_only:
        if request.resource_type:
            args.append(request.resource_type)
        if request.name:
            args.append(request.name)

    if request.namespace:
        args.extend(["-n", request.namespace])

    output_format = _coerce_output_format(request.output_format)
    if output_format is not None and output_format != OutputFormat.NONE:
        args.extend(["-o", output_format.value])

    args.extend(render_flags(request.flags))
    args.extend(request.positional_args)

    return args


def render_flags(flags: dict[str, FlagValue]) -> list[str]:
    """
    Render a flag mapping into tokens.

    str   -> ``--key=value``
    True  -> ``--key``
    False / None -> omitted
    """
    tokens: list[str] = []
    for raw_key, value in flags.items():
        key = _normalize_flag_key(raw_key)

        if value is None or value is False:
            continue
        if value is True:
            tokens.append(f"--{key}")
        elif isinstance(value, str):
            tokens.append(f"--{key}={value}")
        else:
            raise MalformedRequestError(
                f"Flag '{key}' has unsupported value type {type(value).__name__}"
            )
    return tokens


def coerce_flag_value(key: str, value: Any) -> FlagValue:
    """
    Normalise a JSON-decoded flag value into a FlagValue.

    Numbers become their string form; anything that is not a scalar is
    rejected.
    """
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    raise MalformedRequestError(
        f"Flag '{key}' must be a string, boolean or number, got {type(value).__name__}"
    )


def _normalize_flag_key(key: str) -> str:
    stripped = key.lstrip("-")
    if not stripped or "=" in stripped or any(ch.isspace() for ch in stripped):
        raise MalformedRequestError(f"Invalid flag name: {key!r}")
    return stripped


def _coerce_output_format(value: Any) -> Optional[OutputFormat]:
    if value is None or isinstance(value, OutputFormat):
        return value
    try:
        return OutputFormat(value)
    except ValueError:
        allowed = ", ".join(f.value for f in OutputFormat)
        raise MalformedRequestError(
            f"Unsupported output format '{value}'. Allowed: {allowed}"
        ) from None


# =============================================================================
# kubectl cp locations
# =============================================================================


@dataclass(frozen=True)
class CopyLocation:
    """
    One side of a ``kubectl cp``.

    Remote locations have the form ``[namespace/]pod:path``.
    """

    path: str
    pod: Optional[str] = None
    namespace: Optional[str] = None

    @property
    def is_remote(self) -> bool:
        return self.pod is not None


def parse_copy_location(location: str) -> CopyLocation:
    """
    Split a cp argument into its pod reference and path.

    A colon is only meaningful directly after a ``[namespace/]pod``
    reference. Local paths containing a colon are not supported.

    Raises:
        MalformedRequestError: For empty or unsupported locations
    """
    if not location or not location.strip():
        raise MalformedRequestError("Copy source and destination must be non-empty")

    if ":" not in location:
        return CopyLocation(path=location)

    prefix, _, path = location.partition(":")
    match = _POD_REFERENCE.match(prefix)
    if match is None:
        raise MalformedRequestError(
            f"Unsupported copy location {location!r}: a colon is only allowed "
            f"after a [namespace/]pod reference"
        )
    if not path:
        raise MalformedRequestError(f"Copy location {location!r} has no container path")

    return CopyLocation(
        path=path,
        pod=match.group("pod"),
        namespace=match.group("namespace"),
    )


def validate_copy_paths(source: str, destination: str) -> tuple[CopyLocation, CopyLocation]:
    """Parse both cp locations and require at least one pod side."""
    src = parse_copy_location(source)
    dst = parse_copy_location(destination)
    if not src.is_remote and not dst.is_remote:
        raise MalformedRequestError(
            "kubectl cp needs a pod location ([namespace/]pod:path) on at least one side"
        )
    return src, dst
