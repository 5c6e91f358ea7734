"""Source transformers and the registry that dispatches to them."""

from .registry import (
    ImportSource,
    UnsupportedSourceError,
    filter_rows,
    get_column_mapping_template,
    is_supported,
    list_supported_sources,
    transform_batch,
    transform_row,
    validate,
)

__all__ = [
    "ImportSource",
    "UnsupportedSourceError",
    "list_supported_sources",
    "is_supported",
    "transform_row",
    "transform_batch",
    "get_column_mapping_template",
    "validate",
    "filter_rows",
]
