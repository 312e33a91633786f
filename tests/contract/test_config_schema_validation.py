from __future__ import annotations

import json

import jsonschema
import pytest
import yaml
from jsonschema.exceptions import ValidationError

from proposal_store.config.loader import SCHEMA_PATH

"""Config schema contract test: config/store.yml keys and types."""


def _schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_config_schema_valid_example():
    config = {
        "workbook_path": "./data/proposal_management.xlsx",
        "backup_directory": "./backups",
        "error_log_directory": "./logs",
        "seed_sample_data": False,
        "header_drift": "reject",
    }
    jsonschema.validate(config, _schema())


def test_config_schema_minimal_example():
    jsonschema.validate({"workbook_path": "store.xlsx"}, _schema())


def test_config_schema_sample_yaml(sample_config_yaml: str):
    jsonschema.validate(yaml.safe_load(sample_config_yaml), _schema())


@pytest.mark.parametrize(
    "config",
    [
        {},
        {"workbook_path": "store.csv"},
        {"workbook_path": "store.xlsx", "header_drift": "rename"},
        {"workbook_path": "store.xlsx", "seed_sample_data": "yes"},
        {"workbook_path": "store.xlsx", "timezone": "UTC"},
    ],
)
def test_config_schema_rejects_invalid(config: dict):
    with pytest.raises(ValidationError):
        jsonschema.validate(config, _schema())
