from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..models.error_record import TRANSFORM_FAILURE_PREFIX
from ..models.raw_row import RawRow
from ..models.transformation_result import TransformationResult, ValidationOutcome
from .bgc_template import BGC_TEMPLATE_MAPPINGS, transform_bgc_template_row, validate_bgc_template_fields
from .common import ColumnMapping
from .ninjaone import (
    NINJAONE_MAPPINGS,
    NINJAONE_SERVER_MAPPINGS,
    is_endpoint_row,
    is_server_row,
    transform_ninjaone_row,
    transform_ninjaone_server_row,
    validate_ninjaone_fields,
)
from .phones import validate_phone_fields
from .rogers import ROGERS_MAPPINGS, transform_rogers_row
from .telus import TELUS_MAPPINGS, transform_telus_row

"""Transformation registry: source identifier -> transformer.

The set of sources is fixed at build time; adding a source means adding an
ImportSource member and one entry in ``_REGISTRY``.
"""

__all__ = [
    "ImportSource",
    "SourceTransformer",
    "ColumnMappingTemplate",
    "UnsupportedSourceError",
    "list_supported_sources",
    "is_supported",
    "get_transformer",
    "transform_row",
    "transform_batch",
    "get_column_mapping_template",
    "validate",
    "filter_rows",
]

logger = logging.getLogger(__name__)


class UnsupportedSourceError(Exception):
    """Raised for a source identifier outside the supported set."""

    def __init__(self, source_id: Any) -> None:
        super().__init__(f"Unsupported import source: {source_id}")
        self.source_id = source_id


class ImportSource(str, Enum):
    NINJAONE = "ninjaone"
    NINJAONE_SERVERS = "ninjaone-servers"
    TELUS = "telus"
    ROGERS = "rogers"
    BGC_TEMPLATE = "bgc-template"


@dataclass(frozen=True)
class SourceTransformer:
    source: ImportSource
    label: str
    transform_row: Callable[[RawRow], TransformationResult]
    mappings: tuple[ColumnMapping, ...]
    validate: Callable[[Mapping[str, Any]], list[str]]
    row_filter: Callable[[RawRow], bool] | None = None


@dataclass(frozen=True)
class ColumnMappingTemplate:
    external_column: str
    target_field: str
    target_kind: str  # direct / specifications / custom / ignore
    description: str
    required: bool


_REGISTRY: dict[ImportSource, SourceTransformer] = {
    ImportSource.NINJAONE: SourceTransformer(
        source=ImportSource.NINJAONE,
        label="NinjaOne endpoints",
        transform_row=transform_ninjaone_row,
        mappings=NINJAONE_MAPPINGS,
        validate=validate_ninjaone_fields,
        row_filter=is_endpoint_row,
    ),
    ImportSource.NINJAONE_SERVERS: SourceTransformer(
        source=ImportSource.NINJAONE_SERVERS,
        label="NinjaOne servers",
        transform_row=transform_ninjaone_server_row,
        mappings=NINJAONE_SERVER_MAPPINGS,
        validate=validate_ninjaone_fields,
        row_filter=is_server_row,
    ),
    ImportSource.TELUS: SourceTransformer(
        source=ImportSource.TELUS,
        label="Telus phones",
        transform_row=transform_telus_row,
        mappings=TELUS_MAPPINGS,
        validate=validate_phone_fields,
    ),
    ImportSource.ROGERS: SourceTransformer(
        source=ImportSource.ROGERS,
        label="Rogers phones",
        transform_row=transform_rogers_row,
        mappings=ROGERS_MAPPINGS,
        validate=validate_phone_fields,
    ),
    ImportSource.BGC_TEMPLATE: SourceTransformer(
        source=ImportSource.BGC_TEMPLATE,
        label="Company spreadsheet template",
        transform_row=transform_bgc_template_row,
        mappings=BGC_TEMPLATE_MAPPINGS,
        validate=validate_bgc_template_fields,
    ),
}


def _parse_source(source_id: Any) -> ImportSource | None:
    if isinstance(source_id, ImportSource):
        return source_id
    try:
        return ImportSource(str(source_id).strip().lower())
    except ValueError:
        return None


def list_supported_sources() -> frozenset[str]:
    return frozenset(s.value for s in _REGISTRY)


def is_supported(source_id: Any) -> bool:
    return _parse_source(source_id) in _REGISTRY


def get_transformer(source_id: Any) -> SourceTransformer:
    source = _parse_source(source_id)
    if source is None or source not in _REGISTRY:
        raise UnsupportedSourceError(source_id)
    return _REGISTRY[source]


def _as_row(row: RawRow | Mapping[str, Any]) -> RawRow:
    return row if isinstance(row, RawRow) else RawRow.from_mapping(row)


def transform_row(source_id: Any, row: RawRow | Mapping[str, Any]) -> TransformationResult:
    return get_transformer(source_id).transform_row(_as_row(row))


def _isolated(transformer: SourceTransformer) -> Callable[[RawRow], TransformationResult]:
    def run(row: RawRow) -> TransformationResult:
        try:
            return transformer.transform_row(row)
        except Exception as e:
            # 1 行の想定外エラーでバッチ全体を止めない
            logger.error(f"transform failed source={transformer.source.value} row={row.row_number}: {e}")
            result = TransformationResult()
            result.add_error(f"{TRANSFORM_FAILURE_PREFIX}: {e}")
            return result
    return run


def transform_batch(
    source_id: Any,
    rows: Sequence[RawRow | Mapping[str, Any]],
    *,
    max_workers: int | None = None,
    on_result: Callable[[int, TransformationResult], None] | None = None,
) -> list[TransformationResult]:
    """Transform rows independently; results keep the input order.

    on_result(index, result) is called from the calling thread, in order.
    """
    transformer = get_transformer(source_id)
    run = _isolated(transformer)
    prepared = [_as_row(r) for r in rows]

    results: list[TransformationResult] = []
    if max_workers and max_workers > 1 and len(prepared) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            for index, result in enumerate(pool.map(run, prepared)):
                results.append(result)
                if on_result is not None:
                    on_result(index, result)
    else:
        for index, row in enumerate(prepared):
            result = run(row)
            results.append(result)
            if on_result is not None:
                on_result(index, result)
    return results


def get_column_mapping_template(source_id: Any) -> list[ColumnMappingTemplate]:
    transformer = get_transformer(source_id)
    return [
        ColumnMappingTemplate(
            external_column=m.column,
            target_field=m.target_field,
            target_kind=m.resolved_kind.value,
            description=m.description,
            required=m.required,
        )
        for m in transformer.mappings
    ]


def validate(source_id: Any, fields: Mapping[str, Any]) -> ValidationOutcome:
    errors = get_transformer(source_id).validate(fields)
    return ValidationOutcome(is_valid=not errors, errors=tuple(errors))


def filter_rows(
    source_id: Any, rows: Iterable[RawRow | Mapping[str, Any]]
) -> tuple[list[RawRow], list[RawRow]]:
    """Split rows into (included, excluded) using the source's row filter."""
    transformer = get_transformer(source_id)
    included: list[RawRow] = []
    excluded: list[RawRow] = []
    for raw in rows:
        row = _as_row(raw)
        if transformer.row_filter is None or transformer.row_filter(row):
            included.append(row)
        else:
            excluded.append(row)
    return included, excluded
