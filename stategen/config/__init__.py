"""Configuration management for stategen."""

from stategen.config.settings import GeneratorConfig, load_config

__all__ = [
    "GeneratorConfig",
    "load_config",
]
