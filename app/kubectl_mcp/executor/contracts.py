"""
Per-verb request contracts.

One table describes, for every kubectl verb this server accepts, which
request fields it needs and how many positional arguments it takes.
The argument builder consults it before producing any tokens.
"""

from dataclasses import dataclass
from typing import Optional

from kubectl_mcp.executor.types import CommandRequest, MalformedRequestError


@dataclass(frozen=True)
class VerbContract:
    """
    Structural requirements for one verb.

    Attributes:
        positional_only: Verb takes positional args instead of type/name
        requires_resource_type: resource_type must be set
        requires_name: name must be set
        requires_sub_command: sub_command must be set
        min_positional: Minimum number of positional args
        exact_positional: Exact number of positional args, if fixed
    """

    positional_only: bool = False
    requires_resource_type: bool = False
    requires_name: bool = False
    requires_sub_command: bool = False
    min_positional: int = 0
    exact_positional: Optional[int] = None


VERB_CONTRACTS: dict[str, VerbContract] = {
    "get": VerbContract(requires_resource_type=True),
    "describe": VerbContract(requires_resource_type=True),
    "create": VerbContract(requires_resource_type=True),
    "delete": VerbContract(requires_resource_type=True),
    "apply": VerbContract(min_positional=1),  # -f <manifest>
    "annotate": VerbContract(requires_resource_type=True, min_positional=1),
    "label": VerbContract(requires_resource_type=True, min_positional=1),
    "patch": VerbContract(requires_resource_type=True, requires_name=True),
    "scale": VerbContract(requires_resource_type=True, requires_name=True),
    "logs": VerbContract(requires_name=True),
    "rollout": VerbContract(requires_sub_command=True, requires_resource_type=True),
    "exec": VerbContract(positional_only=True, min_positional=1),
    "cp": VerbContract(positional_only=True, exact_positional=2),
    "explain": VerbContract(requires_resource_type=True),
    "top": VerbContract(requires_resource_type=True),
    "wait": VerbContract(requires_resource_type=True),
    "api-resources": VerbContract(),
    "api-versions": VerbContract(),
    "version": VerbContract(),
    "cluster-info": VerbContract(),
}


def get_contract(verb: str) -> VerbContract:
    """Look up the contract for a verb, rejecting unknown verbs."""
    contract = VERB_CONTRACTS.get(verb)
    if contract is None:
        raise MalformedRequestError(
            f"Unknown kubectl verb '{verb}'. "
            f"Supported verbs: {', '.join(sorted(VERB_CONTRACTS))}"
        )
    return contract


def _is_namespace_token(token: str) -> bool:
    return token.startswith("-n=") or token.startswith("--namespace=")


def validate_request(request: CommandRequest) -> VerbContract:
    """
    Check a request against its verb contract.

    Returns:
        The matching VerbContract

    Raises:
        MalformedRequestError: If the request breaks the contract
    """
    verb = request.verb
    if not verb or not verb.strip():
        raise MalformedRequestError("A kubectl verb is required")

    contract = get_contract(verb)
    positional = list(request.positional_args)

    if contract.positional_only and (request.resource_type or request.name):
        raise MalformedRequestError(
            f"'{verb}' takes positional arguments, not resourceType/name"
        )

    if contract.requires_sub_command and not request.sub_command:
        raise MalformedRequestError(f"'{verb}' requires a sub-command")

    if contract.requires_resource_type and not request.resource_type:
        raise MalformedRequestError(f"'{verb}' requires a resource type")

    if contract.requires_name and not request.name:
        raise MalformedRequestError(f"'{verb}' requires a resource name")

    if contract.exact_positional is not None and len(positional) != contract.exact_positional:
        raise MalformedRequestError(
            f"'{verb}' requires exactly {contract.exact_positional} positional "
            f"arguments, got {len(positional)}"
        )

    # exec may carry "-n=<ns>" among its args; those do not count
    if verb == "exec":
        positional = [arg for arg in positional if not _is_namespace_token(arg)]

    if len(positional) < contract.min_positional:
        raise MalformedRequestError(
            f"'{verb}' requires at least {contract.min_positional} positional "
            f"argument(s)"
        )

    return contract
