from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigurationError

DEFAULT_SID_FILTER = "*"
CONFIG_ENV_VAR = "REGBASELINE_CONFIG"


@dataclass(slots=True)
class LoggingConfig:
    """Logging configuration from config.yml."""

    level: str = "INFO"
    log_max_mb: int = 10
    log_backup_count: int = 5

    @property
    def level_number(self) -> int:
        number = logging.getLevelName(self.level.upper())
        if not isinstance(number, int):
            raise ConfigurationError(f"Unknown logging level: {self.level}")
        return number


@dataclass(slots=True)
class BaselineConfig:
    """Collection/comparison settings from config.yml."""

    sid_filter: str = DEFAULT_SID_FILTER
    strict: bool = False  # Also report MatchAll values removed since baseline
    targets_file: Optional[Path] = None


@dataclass(slots=True)
class AppConfig:
    """Top-level configuration resolved from disk and environment."""

    config_path: Optional[Path] = None
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    baseline: BaselineConfig = field(default_factory=BaselineConfig)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            content = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Config file {path} is not valid YAML: {exc}") from exc
    if not isinstance(content, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping at the top level.")
    return content


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Config section '{name}' must be a mapping.")
    return section


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value!r}")


def load_app_config(path: Optional[Path] = None) -> AppConfig:
    """
    Load configuration from a YAML file, providing sensible defaults.

    The file is taken from ``path``, else from the REGBASELINE_CONFIG
    environment variable. A missing file yields the defaults.
    REGBASELINE_SID_FILTER and REGBASELINE_STRICT override the file.
    """
    if path is None and os.environ.get(CONFIG_ENV_VAR):
        path = Path(os.environ[CONFIG_ENV_VAR])

    overrides = _load_yaml(path) if path is not None else {}

    logging_cfg = _section(overrides, "logging")
    logging_config = LoggingConfig(
        level=str(logging_cfg.get("level", "INFO")),
        log_max_mb=int(logging_cfg.get("log_max_mb", 10)),
        log_backup_count=int(logging_cfg.get("log_backup_count", 5)),
    )
    # Validate early so a typo fails at startup
    logging_config.level_number

    baseline_cfg = _section(overrides, "baseline")
    targets_file = baseline_cfg.get("targets_file")
    if targets_file is not None:
        targets_file = Path(targets_file)
        # Relative target files are resolved against the config file location
        if not targets_file.is_absolute() and path is not None:
            targets_file = path.parent / targets_file

    baseline_config = BaselineConfig(
        sid_filter=str(baseline_cfg.get("sid_filter", DEFAULT_SID_FILTER)),
        strict=_parse_bool(baseline_cfg.get("strict", False), "baseline.strict"),
        targets_file=targets_file,
    )

    if "REGBASELINE_SID_FILTER" in os.environ:
        baseline_config.sid_filter = os.environ["REGBASELINE_SID_FILTER"]
    if "REGBASELINE_STRICT" in os.environ:
        baseline_config.strict = _parse_bool(os.environ["REGBASELINE_STRICT"], "REGBASELINE_STRICT")

    return AppConfig(
        config_path=path,
        logging=logging_config,
        baseline=baseline_config,
    )
