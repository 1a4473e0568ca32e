"""Configuration loader for the allocation generator.

Loads and validates ``generator.yaml`` into typed, frozen dataclasses.
Input/output locations and the contract skeleton names come from the
config -- the pipeline itself holds no file-path constants.

Relative paths are kept relative and therefore resolve against the
current working directory at run time.

Usage::

    from allocgen.configs.loader import load_config
    cfg = load_config()                          # default path
    cfg = load_config("/custom/generator.yaml")  # explicit path
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from allocgen.utils.fs import load_yaml

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# ---------------------------------------------------------------------------
# Dataclasses -- mirror the YAML structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PathsConfig:
    """Dataset and artifact locations."""

    input: Path
    output: Path


@dataclass(frozen=True)
class ContractTemplate:
    """Names substituted into the generated contract skeleton.

    Defaults reproduce the ``GeneratedAllocations`` contract consumed by
    the token deployment scripts.
    """

    license: str = "MIT"
    pragma: str = "^0.8.19"
    import_path: str = "src/token/AllocationVesting.sol"
    contract_name: str = "GeneratedAllocations"
    library_name: str = "AllocationVesting"
    struct_name: str = "LinearVesting"
    array_name: str = "allAllocations"

    @property
    def vesting_type(self) -> str:
        """Qualified struct type, e.g. ``AllocationVesting.LinearVesting``."""
        return f"{self.library_name}.{self.struct_name}"


@dataclass(frozen=True)
class LoggingConfig:
    """Logging defaults for the CLI."""

    level: str = "INFO"
    file: str | None = None
    json: bool = False


@dataclass(frozen=True)
class GeneratorConfig:
    """Top-level generator configuration."""

    paths: PathsConfig
    template: ContractTemplate = field(default_factory=ContractTemplate)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def input_path(self) -> Path:
        return self.paths.input

    @property
    def output_path(self) -> Path:
        return self.paths.output

    def with_paths(
        self,
        input_path: str | Path | None = None,
        output_path: str | Path | None = None,
    ) -> GeneratorConfig:
        """Copy of this config with the given paths overridden."""
        paths = PathsConfig(
            input=Path(input_path) if input_path is not None else self.paths.input,
            output=Path(output_path) if output_path is not None else self.paths.output,
        )
        return replace(self, paths=paths)


# ---------------------------------------------------------------------------
# Section parsers
# ---------------------------------------------------------------------------


def _parse_template(data: dict[str, Any] | None) -> ContractTemplate:
    if not data:
        return ContractTemplate()
    defaults = ContractTemplate()
    return ContractTemplate(
        license=str(data.get("license", defaults.license)),
        pragma=str(data.get("pragma", defaults.pragma)),
        import_path=str(data.get("import_path", defaults.import_path)),
        contract_name=str(data.get("contract_name", defaults.contract_name)),
        library_name=str(data.get("library_name", defaults.library_name)),
        struct_name=str(data.get("struct_name", defaults.struct_name)),
        array_name=str(data.get("array_name", defaults.array_name)),
    )


def _parse_logging(data: dict[str, Any] | None) -> LoggingConfig:
    if not data:
        return LoggingConfig()
    log_file = data.get("file")
    return LoggingConfig(
        level=str(data.get("level", "INFO")).upper(),
        file=str(log_file) if log_file else None,
        json=bool(data.get("json", False)),
    )


def _validate_config(cfg: GeneratorConfig) -> None:
    """Cross-field validation after parsing."""
    if not str(cfg.paths.input).strip():
        raise ConfigError("paths.input must not be empty")
    if not str(cfg.paths.output).strip():
        raise ConfigError("paths.output must not be empty")
    if cfg.paths.input == cfg.paths.output:
        raise ConfigError(
            f"paths.input and paths.output must differ, both are {cfg.paths.input}"
        )

    tpl = cfg.template
    for name in ("contract_name", "library_name", "struct_name", "array_name"):
        value = getattr(tpl, name)
        if not _IDENTIFIER.match(value):
            raise ConfigError(
                f"template.{name} must be a Solidity identifier, got {value!r}"
            )
    if not tpl.pragma.strip():
        raise ConfigError("template.pragma must not be empty")
    if not tpl.license.strip() or "\n" in tpl.license:
        raise ConfigError(f"template.license must be a single line, got {tpl.license!r}")
    if not tpl.import_path.strip() or '"' in tpl.import_path:
        raise ConfigError(
            f"template.import_path must be a non-empty path without quotes, "
            f"got {tpl.import_path!r}"
        )

    if cfg.logging.level not in _LOG_LEVELS:
        raise ConfigError(
            f"logging.level must be one of {', '.join(_LOG_LEVELS)}, "
            f"got {cfg.logging.level!r}"
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(path: str | Path | None = None) -> GeneratorConfig:
    """Load and validate generator configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to ``generator.yaml``.  ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    GeneratorConfig
        Fully validated, frozen configuration object.

    Raises
    ------
    ConfigError
        If the file is not valid YAML, or any field is missing or fails
        validation.
    FileNotFoundError
        If *path* does not exist.
    """
    if path is None:
        path = Path(__file__).parent / "generator.yaml"
    else:
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.debug("Loading configuration from %s", path)

    try:
        data: dict[str, Any] = load_yaml(path)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Malformed YAML in {path}: {exc}") from exc
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")

    try:
        pd = data["paths"]
        paths = PathsConfig(
            input=Path(pd["input"]),
            output=Path(pd["output"]),
        )

        config = GeneratorConfig(
            paths=paths,
            template=_parse_template(data.get("template")),
            logging=_parse_logging(data.get("logging")),
        )

        _validate_config(config)
        return config

    except KeyError as exc:
        raise ConfigError(
            f"Missing required configuration key: {exc}"
        ) from exc
    except (TypeError, ValueError, AttributeError) as exc:
        raise ConfigError(
            f"Invalid configuration value: {exc}"
        ) from exc
