from __future__ import annotations

from dataclasses import dataclass

"""Config dataclasses for the asset import engine.

These are the typed results of ``asset_engine.config.loader``; the loader owns
parsing, schema validation and environment overrides.
"""

__all__ = [
    "EngineConfig",
]


@dataclass(frozen=True)
class EngineConfig:
    """Root configuration for a harness run.

    Environment variables (ASSET_ENGINE_RULES_FILE / ASSET_ENGINE_MAX_WORKERS)
    take precedence over the values read from config/engine.yml.
    """
    default_source: str | None = None  # --source 省略時に使うソース ID
    rules_file: str | None = None  # 分類ルール YAML (None なら分類しない)
    error_log_dir: str = "./logs"  # errors-YYYYMMDD-HHMMSS.log 出力先
    max_workers: int = 1  # 1 = 逐次処理
    apply_source_filters: bool = True  # NinjaOne 端末/サーバの行フィルタ適用
