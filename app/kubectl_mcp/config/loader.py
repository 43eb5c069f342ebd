"""
Layered configuration loading.

Layers, later ones winning key by key:
1. Package defaults: kubectl_mcp/config/defaults/settings.yaml
2. User file: <config dir>/config.yaml (default dir ~/.kubectl-mcp)
3. Environment: KUBECTL_MCP_<SECTION>__<KEY>, e.g.
   KUBECTL_MCP_COMMAND__DEFAULT_TIMEOUT=120
"""

import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from kubectl_mcp.config.models import KubectlMCPConfig
from kubectl_mcp.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".kubectl-mcp"
PACKAGE_DEFAULTS = Path(__file__).parent / "defaults" / "settings.yaml"
USER_CONFIG_NAME = "config.yaml"

ENV_PREFIX = "KUBECTL_MCP_"
ENV_DELIMITER = "__"

# Older deployments size the output buffer with this variable
LEGACY_MAX_BUFFER_ENV = "SPAWN_MAX_BUFFER"

_TRUE = frozenset({"true", "yes"})
_FALSE = frozenset({"false", "no"})


def merge_settings(lower: dict, upper: dict) -> dict:
    """Overlay ``upper`` on ``lower``; nested sections merge key by key."""
    merged = dict(lower)
    for key, value in upper.items():
        below = merged.get(key)
        merged[key] = (
            merge_settings(below, value)
            if isinstance(below, dict) and isinstance(value, dict)
            else value
        )
    return merged


def read_settings_file(path: Path) -> dict[str, Any]:
    """
    Read one YAML layer.

    A missing file is an empty layer. So is an unparsable one, with a
    warning, so a typo in the user file does not stop the server.
    """
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        logger.warning(f"Ignoring unparsable config file {path}: {e}")
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {path}: top level must be a mapping")
        return {}
    return data


def coerce_env_value(raw: str) -> Any:
    """Booleans, then integers, then floats; anything else stays a string."""
    lowered = raw.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    for convert in (int, float):
        try:
            return convert(raw)
        except ValueError:
            continue
    return raw


def env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """
    Build the environment layer.

    KUBECTL_MCP_SERVER__PORT=9000 -> {"server": {"port": 9000}}
    """
    layer: dict[str, Any] = {}

    for name, raw in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        path = name[len(ENV_PREFIX):].lower().split(ENV_DELIMITER)
        if "" in path:
            logger.warning(f"Ignoring malformed config variable {name}")
            continue
        *sections, leaf = path
        target = layer
        for section in sections:
            target = target.setdefault(section, {})
        target[leaf] = coerce_env_value(raw)

    legacy = environ.get(LEGACY_MAX_BUFFER_ENV)
    command = layer.get("command", {})
    if legacy and "max_output_size" not in command:
        if legacy.strip().isdigit():
            layer.setdefault("command", {})["max_output_size"] = int(legacy)
        else:
            logger.warning(f"Ignoring non-integer {LEGACY_MAX_BUFFER_ENV}={legacy!r}")

    return layer


def load_config(
    config_dir: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> KubectlMCPConfig:
    """
    Load and validate the merged configuration.

    Args:
        config_dir: Directory holding config.yaml; defaults to ~/.kubectl-mcp
        environ: Environment mapping; defaults to os.environ

    Raises:
        pydantic.ValidationError: If a merged value is out of range
    """
    user_file = Path(config_dir or DEFAULT_CONFIG_DIR) / USER_CONFIG_NAME
    layers = [
        read_settings_file(PACKAGE_DEFAULTS),
        read_settings_file(user_file),
        env_overrides(os.environ if environ is None else environ),
    ]

    settings: dict[str, Any] = {}
    for layer in layers:
        settings = merge_settings(settings, layer)

    return KubectlMCPConfig.model_validate(settings)
