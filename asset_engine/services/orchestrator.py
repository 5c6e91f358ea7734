from __future__ import annotations

import logging
import time
from collections import Counter
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import RuleCatalog
from ..excel.reader import READ_ERRORS, read_rows
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.config_models import EngineConfig
from ..models.processing_result import ImportRunResult, RowOutcome
from ..models.raw_row import RawRow
from ..rules.engine import RuleSet
from ..sources.registry import filter_rows, get_transformer, transform_batch
from .progress import ProgressTracker

"""Import run orchestration.

read file -> source row filter -> transform every row -> classify every
result -> error log -> ImportRunResult. Row problems never stop the run; only
unreadable input raises ProcessingError.
"""

__all__ = [
    "ProcessingError",
    "run_import",
    "run_rows",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Raised when an import run cannot proceed (unreadable input)."""


def run_rows(
    config: EngineConfig,
    source_id: str,
    rows: list[RawRow],
    *,
    catalog: RuleCatalog | None = None,
    file_name: str = "<memory>",
    error_log: ErrorLogBuffer | None = None,
) -> ImportRunResult:
    """Transform and classify already-decoded rows."""
    transformer = get_transformer(source_id)
    source = transformer.source.value
    start = datetime.now(UTC)
    started = time.perf_counter()

    filtered = 0
    if config.apply_source_filters and transformer.row_filter is not None:
        rows, excluded = filter_rows(source, rows)
        filtered = len(excluded)
        if filtered:
            logger.info(f"{filtered} rows skipped by {transformer.label} row filter")

    with ProgressTracker(len(rows), description=f"Transforming {source}") as progress:
        results = transform_batch(
            source,
            rows,
            max_workers=config.max_workers,
            on_result=progress,
        )

    rule_set = RuleSet(catalog.active_rules()) if catalog is not None else None
    if rule_set is not None:
        logger.debug(f"classifying with {len(rule_set)} active rules")

    outcomes: list[RowOutcome] = []
    categories: Counter[str] = Counter()
    for row, result in zip(rows, results, strict=True):
        match = rule_set.match(result.field_bag()) if rule_set is not None else None
        if match is not None:
            name = catalog.category_name(match.category_id) if catalog is not None else None
            categories[name or match.category_id] += 1
        outcomes.append(
            RowOutcome(
                row_number=row.row_number,
                result=result,
                category_id=match.category_id if match is not None else None,
                rule_id=match.rule.id if match is not None else None,
            )
        )
        if error_log is not None:
            for message in result.validation_errors:
                error_log.append(ErrorRecord.for_row(file_name, source, row.row_number, message))

    elapsed = time.perf_counter() - started
    end = datetime.now(UTC)
    total = len(outcomes)
    invalid = sum(1 for o in outcomes if not o.result.is_valid)
    classified = sum(1 for o in outcomes if o.category_id is not None)
    return ImportRunResult(
        source=source,
        file_name=file_name,
        total_rows=total,
        valid_rows=total - invalid,
        invalid_rows=invalid,
        classified_rows=classified,
        unclassified_rows=total - classified,
        filtered_rows=filtered,
        start_time=start,
        end_time=end,
        elapsed_seconds=elapsed,
        throughput_rows_per_sec=(total / elapsed) if elapsed > 0 else 0.0,
        category_counts=dict(categories),
        outcomes=outcomes,
    )


def run_import(
    config: EngineConfig,
    source_id: str,
    input_path: Path,
    *,
    catalog: RuleCatalog | None = None,
    sheet: str | None = None,
) -> ImportRunResult:
    """Run one import file end to end and flush its error log."""
    error_log = ErrorLogBuffer(config.error_log_dir)
    source = get_transformer(source_id).source.value
    try:
        rows = read_rows(input_path, sheet=sheet)
    except READ_ERRORS as e:
        error_log.append(ErrorRecord.for_file(input_path.name, source, str(e)))
        error_log.flush()
        raise ProcessingError(f"cannot read {input_path}: {e}") from e

    logger.info(f"{input_path.name}: {len(rows)} rows read")
    result = run_rows(
        config,
        source,
        rows,
        catalog=catalog,
        file_name=input_path.name,
        error_log=error_log,
    )
    log_path = error_log.flush()
    if log_path is not None:
        logger.debug(f"error log entries by type: {error_log.counts_by_type()}")
        logger.warning(f"{result.invalid_rows} rows with validation errors; details in {log_path}")
        return replace(result, error_log_path=str(log_path))
    return result
