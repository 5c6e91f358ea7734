from __future__ import annotations

from pathlib import Path

import pytest

from asset_engine.cli.__main__ import main as cli_main

"""Exit code contract: 0 all rows valid, 2 some rows invalid, 1 fatal."""

pytestmark = pytest.mark.usefixtures("clean_logging")


def test_exit_code_fatal_startup(temp_workdir: Path, capsys):
    (temp_workdir / "config" / "engine.yml").write_text("unknown_key: 1\n", encoding="utf-8")
    code = cli_main([])
    assert code == 1
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_all_success(write_config: Path, write_rules: Path, telus_csv: Path, capsys):
    assert cli_main(["--input", str(telus_csv)]) == 0


def test_exit_code_partial_failure(write_config: Path, write_rules: Path, telus_partial_csv: Path, capsys):
    assert cli_main(["--input", str(telus_partial_csv)]) == 2


def test_unclassified_rows_are_not_failures(write_config: Path, telus_csv: Path, capsys):
    rules = Path("config/rules.yml")
    rules.write_text("categories: []\nrules: []\n", encoding="utf-8")
    code = cli_main(["--input", str(telus_csv)])
    assert code == 0
    assert "classified=0 unclassified=2" in capsys.readouterr().out


def test_exit_code_fatal_for_corrupt_workbook_in_golden_master_mode(temp_workdir: Path, capsys):
    broken = temp_workdir / "data" / "broken.xlsx"
    broken.write_bytes(b"not a zip")
    target = temp_workdir / "gm.json"
    code = cli_main(["--source", "telus", "--input", str(broken), "--golden-master", str(target)])
    assert code == 1
    assert "ERROR read:" in capsys.readouterr().out
    assert not target.exists()
