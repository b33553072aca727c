"""repeatcal.config_loader

Configuration loader for repeatcal.

- Reads YAML (PyYAML) config files, or JSON when the file has a ``.json`` suffix.
- Environment variables (``REPEATCAL_*``) override file values.
- Exposes a typed dataclass `Config` and a `load_config()` helper that accepts
  an optional path override.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .repeat_exceptions import RepeatConfigError

logger = logging.getLogger(__name__)

ID_STRATEGIES = ("uuid", "sequential")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Environment variable -> config key
ENV_OVERRIDES: dict[str, str] = {
    "REPEATCAL_LOG_LEVEL": "log_level",
    "REPEATCAL_ID_STRATEGY": "id_strategy",
    "REPEATCAL_ID_PREFIX": "id_prefix",
    "REPEATCAL_MAX_OCCURRENCES": "max_occurrences_per_rule",
}


@dataclass
class Config:
    """Typed configuration for repeatcal.

    Fields:
        log_level: logging level name
        id_strategy: how occurrence and group ids are generated ("uuid" or "sequential")
        id_prefix: prefix for sequential ids
        max_occurrences_per_rule: optional cap on occurrences per expansion
    """

    log_level: str = "INFO"
    id_strategy: str = "uuid"
    id_prefix: str = "evt"
    max_occurrences_per_rule: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Bad values are replaced by defaults with a warning rather than raising,
        so a typo in one setting does not stop the application.
        """
        if data is None:
            data = {}

        unknown = sorted(set(data) - set(cls.__dataclass_fields__))
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))

        log_level = str(data.get("log_level") or "INFO").upper()
        if log_level not in LOG_LEVELS:
            logger.warning("Config log_level=%r is not a level name; using INFO", log_level)
            log_level = "INFO"

        id_strategy = str(data.get("id_strategy") or "uuid").strip().lower()
        if id_strategy not in ID_STRATEGIES:
            logger.warning("Config id_strategy=%r is unknown; using 'uuid'", id_strategy)
            id_strategy = "uuid"

        id_prefix = data.get("id_prefix")
        id_prefix = str(id_prefix) if id_prefix else "evt"

        max_occurrences = data.get("max_occurrences_per_rule")
        if max_occurrences is not None and max_occurrences != "":
            try:
                max_occurrences = int(max_occurrences)
            except (TypeError, ValueError):
                logger.warning(
                    "Config max_occurrences_per_rule=%r is not an int; disabling the cap",
                    max_occurrences,
                )
                max_occurrences = None
            else:
                if max_occurrences < 1:
                    logger.warning(
                        "Config max_occurrences_per_rule=%d below 1; disabling the cap",
                        max_occurrences,
                    )
                    max_occurrences = None
        else:
            max_occurrences = None

        return cls(
            log_level=log_level,
            id_strategy=id_strategy,
            id_prefix=id_prefix,
            max_occurrences_per_rule=max_occurrences,
        )


def _load_yaml_or_json(path: Path) -> Any:
    """Load the raw top-level value of a YAML or JSON config file.

    Raises:
        RepeatConfigError: If the file cannot be read or parsed
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RepeatConfigError(f"Unable to read config file {path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            return json.loads(text) if text.strip() else {}
        loaded = yaml.safe_load(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise RepeatConfigError(f"Unable to parse config file {path}: {exc}") from exc

    # safe_load returns None for empty files
    return {} if loaded is None else loaded


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Collect config values set through ``REPEATCAL_*`` environment variables."""
    environ = os.environ if environ is None else environ
    overrides = {}
    for env_key, config_key in ENV_OVERRIDES.items():
        value = environ.get(env_key)
        if value is not None and value.strip():
            overrides[config_key] = value.strip()
    if overrides:
        logger.debug("Config overrides from environment: %s", ", ".join(sorted(overrides)))
    return overrides


def load_config(path: str | os.PathLike[str] | None = None, environ: Mapping[str, str] | None = None) -> Config:
    """Load configuration from a YAML/JSON file plus environment overrides.

    Args:
        path: Optional path to the config file. Defaults to ``./repeatcal.yaml``.
        environ: Environment mapping to read overrides from (defaults to os.environ)

    Returns:
        Config dataclass instance

    Behavior:
    - If the file is missing: defaults (plus environment overrides).
    - If the file exists but its top level is not a mapping: RepeatConfigError.
    """
    p = Path(path) if path else Path.cwd() / "repeatcal.yaml"
    logger.debug("Attempting to load config from %s", p)

    if p.exists():
        raw = _load_yaml_or_json(p)
        if not isinstance(raw, dict):
            logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, raw)
            raise RepeatConfigError("Config file must contain a mapping at top level")
        logger.info("Loaded configuration from %s", p)
    else:
        logger.info("Config file %s not found; using defaults", p)
        raw = {}

    merged = {**raw, **env_overrides(environ)}
    cfg = Config.from_dict(merged)
    logger.debug("Configuration values: %s", cfg)
    return cfg
