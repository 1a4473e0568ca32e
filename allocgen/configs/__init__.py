"""Generator configuration loading and validation."""

from allocgen.configs.loader import (
    ConfigError,
    ContractTemplate,
    GeneratorConfig,
    LoggingConfig,
    PathsConfig,
    load_config,
)

__all__ = [
    "ConfigError",
    "ContractTemplate",
    "GeneratorConfig",
    "LoggingConfig",
    "PathsConfig",
    "load_config",
]
