"""
Manifest staging for apply-style tools.

kubectl only applies manifests from files, so inline manifest text is
written to a temporary file that lives for the duration of one call.
"""

import os
import tempfile
from contextlib import ExitStack, contextmanager
from typing import Any, Iterator, Optional

import yaml

from kubectl_mcp.executor.types import MalformedRequestError


@contextmanager
def staged_manifest(content: str) -> Iterator[str]:
    """Write manifest text to a temporary file and remove it afterwards."""
    fd, path = tempfile.mkstemp(prefix="kubectl-mcp-", suffix=".yaml")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        yield path
    finally:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass


def resolve_manifest(arguments: dict[str, Any], stack: ExitStack) -> str:
    """
    Return a manifest file path from ``manifest`` or ``manifestPath``.

    Exactly one of the two must be given. Inline manifests are staged on
    ``stack`` and removed when it closes.
    """
    manifest = arguments.get("manifest")
    manifest_path = arguments.get("manifestPath")

    if bool(manifest) == bool(manifest_path):
        raise MalformedRequestError("Provide exactly one of 'manifest' or 'manifestPath'")

    if manifest_path:
        if not isinstance(manifest_path, str) or not os.path.isfile(manifest_path):
            raise MalformedRequestError(f"Manifest file not found: {manifest_path}")
        return manifest_path

    if not isinstance(manifest, str):
        raise MalformedRequestError("'manifest' must be a string")
    return stack.enter_context(staged_manifest(manifest))


def manifest_namespace(path: str, name: str) -> Optional[str]:
    """
    Return ``metadata.namespace`` of the document named ``name`` in a manifest.

    None when no document carries that name, the match sets no namespace,
    or the file is not parsable YAML (kubectl apply reports that itself).
    """
    try:
        with open(path, encoding="utf-8") as f:
            documents = list(yaml.safe_load_all(f))
    except (OSError, yaml.YAMLError):
        return None

    for document in documents:
        if not isinstance(document, dict):
            continue
        metadata = document.get("metadata")
        if not isinstance(metadata, dict) or metadata.get("name") != name:
            continue
        namespace = metadata.get("namespace")
        return namespace if isinstance(namespace, str) and namespace else None
    return None
