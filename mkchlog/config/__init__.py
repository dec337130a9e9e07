from .loader import DEFAULT_CONFIG_PATH, load_config, parse_config
from .models import (
    ConfigError,
    MkchlogConfig,
    ProjectDef,
    ProjectsConfig,
    SectionDef,
    SectionIndex,
    SectionSpec,
)

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "MkchlogConfig",
    "ProjectDef",
    "ProjectsConfig",
    "SectionDef",
    "SectionIndex",
    "SectionSpec",
    "load_config",
    "parse_config",
]
