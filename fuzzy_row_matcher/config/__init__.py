"""Configuration package exports."""

from .loader import CONFIG_EXTENSIONS, ConfigRepository
from .models import RunConfiguration, SourceConfig, TargetConfig, build_config

__all__ = [
    "CONFIG_EXTENSIONS",
    "ConfigRepository",
    "RunConfiguration",
    "SourceConfig",
    "TargetConfig",
    "build_config",
]
