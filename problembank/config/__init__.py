"""Configuration management for the problem bank."""

from .loader import Config, configure_logging, load_config, save_config
from .models import (
    ClusteringConfig,
    ConfigModel,
    LoggingConfig,
    PostgresConfig,
    SimilarityConfig,
)

__all__ = [
    "ClusteringConfig",
    "Config",
    "ConfigModel",
    "LoggingConfig",
    "PostgresConfig",
    "SimilarityConfig",
    "configure_logging",
    "load_config",
    "save_config",
]
