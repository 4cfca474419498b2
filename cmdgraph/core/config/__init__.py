"""Configuration package for cmdgraph.

This package provides Pydantic configuration models and loading utilities.
"""

from cmdgraph.core.config.loader import (
    apply_overrides,
    check_unexpanded_vars,
    expand_env_vars,
    expand_env_vars_recursive,
    load_config,
)
from cmdgraph.core.config.models import Config, LoggingConfig, RouterConfig

__all__ = [
    # Models
    "Config",
    "LoggingConfig",
    "RouterConfig",
    # Loaders
    "apply_overrides",
    "check_unexpanded_vars",
    "expand_env_vars",
    "expand_env_vars_recursive",
    "load_config",
]
