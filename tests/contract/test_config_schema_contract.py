from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest
import yaml

from asset_engine.config.loader import RULES_SCHEMA_PATH, SCHEMA_PATH

"""Schema files shipped with the package stay loadable and in sync with the code."""


@pytest.mark.parametrize("path", [SCHEMA_PATH, RULES_SCHEMA_PATH], ids=lambda p: p.name)
def test_schema_is_valid_draft(path: Path):
    schema = json.loads(path.read_text(encoding="utf-8"))
    jsonschema.Draft202012Validator.check_schema(schema)


def test_sample_rules_are_accepted(sample_rules_yaml: str):
    data = yaml.safe_load(sample_rules_yaml)
    schema = json.loads(RULES_SCHEMA_PATH.read_text(encoding="utf-8"))
    jsonschema.validate(data, schema)


def test_sample_config_is_accepted(sample_config_yaml: str):
    data = yaml.safe_load(sample_config_yaml)
    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    jsonschema.validate(data, schema)


@pytest.mark.parametrize(
    "data",
    [
        {"max_workers": 0},
        {"max_workers": "4"},
        {"apply_source_filters": "yes"},
        {"database": {"host": "localhost"}},
    ],
)
def test_config_schema_rejects(data):
    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate(data, schema)
