from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import EngineConfig
from ..models.rules import RuleDefinitionError, WorkloadCategory, WorkloadCategoryRule
from ..rules.explain import validate_rule_definition
from ..sources.registry import is_supported

"""Config and rules-file loading.

Responsibilities:
- Load YAML config/engine.yml and the workload rules file
- Validate both against the JSON schemas shipped next to this module
- Apply defaults and environment overrides
"""

__all__ = [
    "ConfigError",
    "RuleCatalog",
    "load_config",
    "load_rules",
    "apply_env_overrides",
    "SCHEMA_PATH",
    "RULES_SCHEMA_PATH",
    "DEFAULT_CONFIG_PATH",
]

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("engine_schema.json")
RULES_SCHEMA_PATH = Path(__file__).with_name("rules_schema.json")
DEFAULT_CONFIG_PATH = Path("config/engine.yml")

ENV_RULES_FILE = "ASSET_ENGINE_RULES_FILE"
ENV_MAX_WORKERS = "ASSET_ENGINE_MAX_WORKERS"
MAX_WORKERS_LIMIT = 64  # engine_schema.json の maximum と揃える


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class RuleCatalog:
    categories: tuple[WorkloadCategory, ...]
    rules: tuple[WorkloadCategoryRule, ...]

    def category(self, category_id: str) -> WorkloadCategory | None:
        for c in self.categories:
            if c.id == category_id:
                return c
        return None

    def category_name(self, category_id: str | None) -> str | None:
        found = self.category(category_id) if category_id is not None else None
        return found.name if found is not None else None

    def active_rules(self) -> list[WorkloadCategoryRule]:
        """Active rules whose category is still active (file order kept)."""
        active_categories = {c.id for c in self.categories if c.is_active}
        return [r for r in self.rules if r.is_active and r.category_id in active_categories]


def _validate_schema(data: Any, schema_path: Path, what: str) -> None:
    if not schema_path.exists():
        raise ConfigError(f"{what} schema not found: {schema_path}")
    try:
        schema = json.loads(schema_path.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"{what} validation failed: {e.message}") from e


def _read_yaml(path: Path, what: str) -> Any:
    if not path.exists():
        raise ConfigError(f"{what} file not found: {path}")
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e


def load_config(path: Path) -> EngineConfig:
    data = _read_yaml(path, "config")
    _validate_schema(data, SCHEMA_PATH, "config")

    default_source = data.get("default_source")
    if default_source is not None and not is_supported(default_source):
        raise ConfigError(f"config validation failed: unsupported default_source {default_source!r}")

    return EngineConfig(
        default_source=default_source,
        rules_file=data.get("rules_file"),
        error_log_dir=data.get("error_log_dir", "./logs"),
        max_workers=data.get("max_workers", 1),
        apply_source_filters=data.get("apply_source_filters", True),
    )


def apply_env_overrides(cfg: EngineConfig) -> EngineConfig:
    """Environment variables take precedence over engine.yml values."""
    rules_file = os.getenv(ENV_RULES_FILE) or cfg.rules_file
    max_workers = cfg.max_workers
    raw_workers = os.getenv(ENV_MAX_WORKERS)
    if raw_workers:
        try:
            max_workers = int(raw_workers)
        except ValueError as e:
            raise ConfigError(f"{ENV_MAX_WORKERS} must be an integer, got {raw_workers!r}") from e
        if max_workers < 1:
            raise ConfigError(f"{ENV_MAX_WORKERS} must be >= 1, got {max_workers}")
        if max_workers > MAX_WORKERS_LIMIT:
            raise ConfigError(f"{ENV_MAX_WORKERS} must be <= {MAX_WORKERS_LIMIT}, got {max_workers}")
    return replace(cfg, rules_file=rules_file, max_workers=max_workers)


def load_rules(path: Path) -> RuleCatalog:
    data = _read_yaml(path, "rules")
    _validate_schema(data, RULES_SCHEMA_PATH, "rules")

    try:
        categories = tuple(WorkloadCategory.from_dict(c) for c in data["categories"])
        rules = tuple(WorkloadCategoryRule.from_dict(r) for r in data["rules"])
    except RuleDefinitionError as e:
        raise ConfigError(f"rules validation failed: {e}") from e

    known = {c.id for c in categories}
    if len(known) != len(categories):
        raise ConfigError("rules validation failed: duplicate category id")
    rule_ids = [r.id for r in rules]
    if len(set(rule_ids)) != len(rule_ids):
        raise ConfigError("rules validation failed: duplicate rule id")
    for rule in rules:
        if rule.category_id not in known:
            raise ConfigError(f"rules validation failed: rule {rule.id} references unknown category {rule.category_id}")
        # 評価時は False になるだけなので読み込みは継続し警告のみ
        for problem in validate_rule_definition(rule.source_field, rule.operator, rule.value):
            logger.warning(f"rule {rule.id} ({rule.label}): {problem}")

    return RuleCatalog(categories=categories, rules=rules)
