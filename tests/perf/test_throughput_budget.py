from __future__ import annotations

import time

import numpy as np
import pytest

from asset_engine.config.loader import RuleCatalog
from asset_engine.excel.reader import frame_to_rows
from asset_engine.models.config_models import EngineConfig
from asset_engine.models.rules import WorkloadCategory, WorkloadCategoryRule
from asset_engine.rules.engine import RuleSet, classify_batch
from asset_engine.services.orchestrator import run_rows
from scripts.gen_perf_dataset import generate_ninjaone_frame

"""Performance budget: transform + classify synthetic NinjaOne exports.

Budgets are loose and only catch order-of-magnitude regressions such as
recompiling rule regexes per row.
"""

ROWS = 5_000
MIN_THROUGHPUT_RPS = 500

CATALOG = RuleCatalog(
    categories=(
        WorkloadCategory("dev", "Developers"),
        WorkloadCategory("exec", "Executives"),
        WorkloadCategory("std", "Standard"),
    ),
    rules=(
        WorkloadCategoryRule("r1", "dev", 1, "specifications.ram", ">=", "32"),
        WorkloadCategoryRule("r2", "exec", 2, "model", "regex", r"^(Precision|EliteBook)\s\d+"),
        WorkloadCategoryRule("r3", "std", 3, "make", "includes", "dell"),
        WorkloadCategoryRule("r4", "std", 4, "specifications.operatingSystem", "includes", "windows"),
    ),
)


@pytest.fixture(scope="module")
def perf_rows():
    return frame_to_rows(generate_ninjaone_frame(ROWS, seed=42))


def test_throughput_budget(perf_rows):
    result = run_rows(EngineConfig(apply_source_filters=False), "ninjaone", perf_rows, catalog=CATALOG)
    assert result.total_rows == ROWS
    assert result.classified_rows + result.unclassified_rows == ROWS
    assert result.throughput_rows_per_sec >= MIN_THROUGHPUT_RPS, (
        f"throughput {result.throughput_rows_per_sec:.0f} rows/s below budget {MIN_THROUGHPUT_RPS}"
    )


def test_match_rule_p95_latency(perf_rows):
    rule_set = RuleSet(CATALOG.active_rules())
    assets = [
        {"make": row.get("Manufacturer"), "model": row.get("System Model"), "specifications": {"ram": row.get("RAM")}}
        for row in perf_rows[:2_000]
    ]
    samples = []
    for asset in assets:
        start = time.perf_counter()
        rule_set.match(asset)
        samples.append(time.perf_counter() - start)
    p95 = float(np.percentile(samples, 95))
    assert p95 < 0.005, f"p95 match latency {p95 * 1000:.3f}ms"
    assert classify_batch(assets, rule_set, max_workers=4) == [rule_set.classify(a) for a in assets]


def test_parallel_run_matches_sequential(perf_rows):
    subset = perf_rows[:1_000]
    seq = run_rows(EngineConfig(), "ninjaone", subset, catalog=CATALOG)
    par = run_rows(EngineConfig(max_workers=4), "ninjaone", subset, catalog=CATALOG)
    assert par.category_counts == seq.category_counts
    assert par.invalid_rows == seq.invalid_rows
