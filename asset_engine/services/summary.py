from __future__ import annotations

from ..models.processing_result import ImportRunResult

"""SUMMARY line rendering for the import harness.

Format:
SUMMARY source={id} rows={n} valid={n} invalid={n} classified={n}
unclassified={n} filtered={n} elapsed_sec={x} throughput_rps={x}
"""

__all__ = [
    "format_number",
    "render_summary_line",
]


def format_number(value: float) -> str:
    """Integral values without decimals, tiny values without exponent."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if abs(value) < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(result: ImportRunResult) -> str:
    """Render the SUMMARY line for one run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ImportRunResult(
        ...     source="telus", file_name="telus.csv", total_rows=10, valid_rows=9,
        ...     invalid_rows=1, classified_rows=4, unclassified_rows=6, filtered_rows=0,
        ...     start_time=start, end_time=end, elapsed_seconds=2.0, throughput_rows_per_sec=5.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY source=telus rows=10 valid=9 invalid=1 classified=4 unclassified=6 filtered=0 elapsed_sec=2 throughput_rps=5'
    """
    return (
        f"SUMMARY source={result.source} "
        f"rows={result.total_rows} "
        f"valid={result.valid_rows} "
        f"invalid={result.invalid_rows} "
        f"classified={result.classified_rows} "
        f"unclassified={result.unclassified_rows} "
        f"filtered={result.filtered_rows} "
        f"elapsed_sec={format_number(result.elapsed_seconds)} "
        f"throughput_rps={format_number(result.throughput_rows_per_sec)}"
    )
