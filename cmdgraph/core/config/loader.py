"""Configuration loading utilities.

Router configuration is read from YAML, ``${VAR}`` references are filled
from the environment, and dotted overrides (``{"router.prefix": "!"}``)
are layered on top before the result is validated.
"""

import os
import re
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import yaml

from cmdgraph.core.config.models import Config

_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def expand_env_vars(value: str, environ: Mapping[str, str] | None = None) -> str:
    """Replace ``${VAR}`` references in ``value``.

    Unknown variables are left as they are so that
    ``check_unexpanded_vars`` can report them.

    Examples:
        >>> expand_env_vars("${CMD_PREFIX}", {"CMD_PREFIX": "!"})
        '!'
    """
    env = os.environ if environ is None else environ
    return _VAR_PATTERN.sub(lambda match: env.get(match.group(1), match.group(0)), value)


def expand_env_vars_recursive(obj: Any, environ: Mapping[str, str] | None = None) -> Any:
    """Expand ``${VAR}`` references in every string of a nested dict/list."""
    if isinstance(obj, dict):
        return {key: expand_env_vars_recursive(value, environ) for key, value in obj.items()}
    if isinstance(obj, list):
        return [expand_env_vars_recursive(item, environ) for item in obj]
    if isinstance(obj, str):
        return expand_env_vars(obj, environ)
    return obj


def _unresolved(obj: Any) -> Iterator[str]:
    if isinstance(obj, dict):
        for value in obj.values():
            yield from _unresolved(value)
    elif isinstance(obj, list):
        for item in obj:
            yield from _unresolved(item)
    elif isinstance(obj, str):
        for match in _VAR_PATTERN.finditer(obj):
            yield f"${{{match.group(1)}}}"


def check_unexpanded_vars(data: Any, source: str) -> None:
    """Fail if any ``${VAR}`` reference survived expansion.

    Args:
        data: Expanded configuration data.
        source: Label used in the error message (usually the file path).

    Raises:
        ValueError: Naming every unresolved variable once, sorted.
    """
    unique = sorted(set(_unresolved(data)))
    if unique:
        raise ValueError(
            f"Unresolved environment variable(s) in {source}: {', '.join(unique)}. "
            f"Set these variables or remove the ${{VAR}} references."
        )


def apply_overrides(data: dict[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``data`` with dotted-key overrides applied.

    Nested sections are copied, never mutated in place.

    Examples:
        >>> apply_overrides({"router": {"prefix": "?"}}, {"router.prefix": "!"})
        {'router': {'prefix': '!'}}

    Raises:
        ValueError: If an override path runs through a non-mapping value.
    """
    result = dict(data)
    for dotted, value in overrides.items():
        *sections, leaf = dotted.split(".")
        node = result
        for section in sections:
            child = node.get(section) or {}
            if not isinstance(child, dict):
                raise ValueError(f"Cannot override {dotted!r}: {section!r} is not a section")
            node[section] = child = dict(child)
            node = child
        node[leaf] = value
    return result


def load_config(path: Path | str, overrides: Mapping[str, Any] | None = None) -> Config:
    """Load router configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
        overrides: Dotted-key values applied after environment expansion.

    Returns:
        Validated Config.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        yaml.YAMLError: If the YAML is malformed.
        ValueError: If a ${VAR} reference cannot be resolved or an override
            path is invalid.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open() as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}

    data = expand_env_vars_recursive(data)
    check_unexpanded_vars(data, source=str(config_path))
    if overrides:
        data = apply_overrides(data, overrides)

    return Config(**data)
