"""Command-line harness for the asset import engine (python -m asset_engine.cli)."""
