from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, RuleCatalog, apply_env_overrides, load_config, load_rules
from ..excel.reader import READ_ERRORS, read_rows
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.config_models import EngineConfig
from ..services.golden_master import build_golden_master, write_golden_master
from ..services.orchestrator import ProcessingError, run_import
from ..services.summary import render_summary_line
from ..sources.registry import (
    UnsupportedSourceError,
    get_column_mapping_template,
    get_transformer,
    list_supported_sources,
)

"""CLI entrypoint.

python -m asset_engine.cli --source telus --input data/telus.csv [--rules config/rules.yml]

Flow: .env -> config/engine.yml (+ env overrides) -> rules file -> read input
-> transform + classify -> error log -> SUMMARY line -> exit code.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

ENV_CONFIG_PATH = "ASSET_ENGINE_CONFIG"


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; values in .env win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Asset import transformation & workload classification")
    p.add_argument("--source", help="Import source identifier (see --list-sources)")
    p.add_argument("--input", type=Path, help="CSV / XLSX export to import")
    p.add_argument("--sheet", help="Sheet name for Excel input (default: first sheet)")
    p.add_argument("--config", type=Path, help=f"Engine config (default: ${ENV_CONFIG_PATH} or {DEFAULT_CONFIG_PATH})")
    p.add_argument("--rules", type=Path, help="Workload rules file (overrides rules_file in config)")
    p.add_argument("--golden-master", type=Path, help="Write input/expected transformer snapshot JSON and exit")
    p.add_argument("--list-sources", action="store_true", help="Print supported sources and exit")
    p.add_argument("--show-template", metavar="SOURCE", help="Print the column mapping template of SOURCE and exit")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _resolve_config(args: argparse.Namespace, logger) -> EngineConfig:
    explicit = args.config or (Path(os.environ[ENV_CONFIG_PATH]) if os.getenv(ENV_CONFIG_PATH) else None)
    if explicit is not None:
        cfg = load_config(explicit)
    elif DEFAULT_CONFIG_PATH.exists():
        cfg = load_config(DEFAULT_CONFIG_PATH)
    else:
        logger.debug(f"{DEFAULT_CONFIG_PATH} not found; using defaults")
        cfg = EngineConfig()
    return apply_env_overrides(cfg)


def _print_template(source_id: str) -> None:
    for entry in get_column_mapping_template(source_id):
        target = entry.target_field or "-"
        flag = " (required)" if entry.required else ""
        print(f"{entry.external_column} -> {entry.target_kind}:{target}{flag}  # {entry.description}")


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # [] が渡された場合に sys.argv (pytest の引数) を読まないよう None のときだけ参照
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_debug(True)
        logger.debug("debug mode enabled")

    if args.list_sources:
        for source in sorted(list_supported_sources()):
            print(source)
        return EXIT_SUCCESS_ALL

    if args.show_template:
        try:
            _print_template(args.show_template)
        except UnsupportedSourceError as e:
            logger.error(str(e))
            return EXIT_FATAL
        return EXIT_SUCCESS_ALL

    try:
        cfg = _resolve_config(args, logger)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    source_id = args.source or cfg.default_source
    if not source_id:
        logger.error("no import source given (--source or default_source in config)")
        return EXIT_FATAL
    try:
        source = get_transformer(source_id).source.value
    except UnsupportedSourceError as e:
        logger.error(str(e))
        return EXIT_FATAL

    if args.input is None:
        logger.error("--input is required")
        return EXIT_FATAL
    if not args.input.exists():
        logger.error(f"input file not found: {args.input}")
        return EXIT_FATAL

    if args.golden_master is not None:
        try:
            rows = read_rows(args.input, sheet=args.sheet)
        except READ_ERRORS as e:
            logger.error(f"read: {e}")
            return EXIT_FATAL
        path = write_golden_master(args.golden_master, build_golden_master(source, rows))
        logger.info(f"golden master with {len(rows)} cases written to {path}")
        return EXIT_SUCCESS_ALL

    catalog: RuleCatalog | None = None
    rules_path = args.rules or (Path(cfg.rules_file) if cfg.rules_file else None)
    if rules_path is not None:
        try:
            catalog = load_rules(rules_path)
        except ConfigError as e:
            logger.error(f"rules: {e}")
            return EXIT_FATAL
        logger.info(f"{len(catalog.active_rules())} active rules loaded from {rules_path}")
    else:
        logger.info("no rules file configured; assets will not be classified")

    logger.info(f"Importing {args.input} as {source}")
    try:
        result = run_import(cfg, source, args.input, catalog=catalog, sheet=args.sheet)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    for name, count in sorted(result.category_counts.items()):
        logger.info(f"category {name}: {count}")

    summary_line = render_summary_line(result)
    # log_summary が "SUMMARY " を付与するため先頭を除去
    log_summary(summary_line[len("SUMMARY "):])

    if result.invalid_rows > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
