from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader.

Responsibilities:
- Load the YAML store config (default config/store.yml)
- Validate it against the bundled config_schema.json
- Apply defaults for optional keys
- Let PROPOSAL_STORE_WORKBOOK override workbook_path (the CLI loads .env
  before calling load_config, so a .env entry wins too)
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/store.yml")
WORKBOOK_ENV_VAR = "PROPOSAL_STORE_WORKBOOK"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class StoreConfig:
    workbook_path: Path
    backup_directory: Path = Path("backups")
    error_log_directory: Path = Path("logs")
    seed_sample_data: bool = True
    header_drift: str = "ignore"  # "ignore" | "reject"


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or if the
            config data fails schema validation (missing required keys, wrong
            types, unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def config_from_dict(data: dict[str, Any]) -> StoreConfig:
    _validate_config_schema(data)
    defaults = StoreConfig(workbook_path=Path(data["workbook_path"]))
    return replace(
        defaults,
        backup_directory=Path(data.get("backup_directory", defaults.backup_directory)),
        error_log_directory=Path(data.get("error_log_directory", defaults.error_log_directory)),
        seed_sample_data=data.get("seed_sample_data", defaults.seed_sample_data),
        header_drift=data.get("header_drift", defaults.header_drift),
    )


def load_config(path: Path) -> StoreConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    override = os.getenv(WORKBOOK_ENV_VAR)
    if override:
        data = {**data, "workbook_path": override}

    return config_from_dict(data)
