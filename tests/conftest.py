# Shared pytest fixtures
from __future__ import annotations
import csv
import tempfile
from pathlib import Path

import pytest

from asset_engine.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        # ASSET_ENGINE_* が開発者の環境から漏れないようにする
        for name in ("ASSET_ENGINE_CONFIG", "ASSET_ENGINE_RULES_FILE", "ASSET_ENGINE_MAX_WORKERS"):
            monkeypatch.delenv(name, raising=False)
        yield p


@pytest.fixture()
def clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """default_source: telus
rules_file: config/rules.yml
error_log_dir: ./logs
max_workers: 1
apply_source_filters: true
"""


@pytest.fixture()
def sample_rules_yaml() -> str:
    return """categories:
  - id: cat-hiperf
    name: High Performance
  - id: cat-apple
    name: Apple Devices
  - id: cat-legacy
    name: Legacy
    is_active: false
rules:
  - id: r-ram
    category_id: cat-hiperf
    priority: 1
    source_field: specifications.ram
    operator: ">="
    value: "64"
  - id: r-apple
    category_id: cat-apple
    priority: 2
    source_field: make
    operator: "="
    value: apple
  - id: r-legacy
    category_id: cat-legacy
    priority: 1
    source_field: make
    operator: includes
    value: a
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "engine.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def write_rules(temp_workdir: Path, sample_rules_yaml: str) -> Path:
    path = temp_workdir / "config" / "rules.yml"
    path.write_text(sample_rules_yaml, encoding="utf-8")
    return path


def write_csv(path: Path, rows: list[dict[str, str]]) -> Path:
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(rows[0]))
        writer.writeheader()
        writer.writerows(rows)
    return path


TELUS_GOOD_ROW = {
    "Subscriber Name": "Jane Q Smith",
    "Phone Number": "(403) 555-0123",
    "Rate Plan": "Business Unlimited",
    "Device Name": "SAMSUNG GALAXY S23 128GB BLACK",
    "IMEI": "356789012345678",
    "Contract end date": "2025-06-30",
    "BAN": "12345678",
    "Status": "Active",
}

TELUS_APPLE_ROW = {
    "Subscriber Name": "Sam Lee",
    "Phone Number": "403-555-0188",
    "Rate Plan": "Business Unlimited",
    "Device Name": "SWAP IPHONE 14 PRO 256GB SPACE BLACK",
    "IMEI": "356789012340001",
    "Contract end date": "",
    "BAN": "12345678",
    "Status": "Active",
}

TELUS_BAD_ROW = {
    "Subscriber Name": "",
    "Phone Number": "587-555-0199",
    "Rate Plan": "",
    "Device Name": "WIDGETCO FLIP 4G",
    "IMEI": "",
    "Contract end date": "",
    "BAN": "12345678",
    "Status": "",
}


@pytest.fixture()
def telus_csv(temp_workdir: Path) -> Path:
    return write_csv(temp_workdir / "data" / "telus.csv", [TELUS_GOOD_ROW, TELUS_APPLE_ROW])


@pytest.fixture()
def telus_partial_csv(temp_workdir: Path) -> Path:
    return write_csv(temp_workdir / "data" / "telus_partial.csv", [TELUS_GOOD_ROW, TELUS_BAD_ROW, TELUS_APPLE_ROW])


@pytest.fixture()
def telus_good_row() -> dict[str, str]:
    return dict(TELUS_GOOD_ROW)


@pytest.fixture()
def telus_bad_row() -> dict[str, str]:
    return dict(TELUS_BAD_ROW)
