"""
Infrastructure module exports.

Startup configuration for the hello-back service.
"""

from .config import ConfigError, EffectiveConfig, get_config, load_base_config, resolve

__all__ = [
    "ConfigError",
    "EffectiveConfig",
    "get_config",
    "load_base_config",
    "resolve",
]
