#!/usr/bin/env python3
"""Synthetic NinjaOne export generator for performance testing.

Produces a CSV (or XLSX) shaped like a NinjaOne device export: Display Name,
Role, RAM, Volumes, Serial Number, ... with a reproducible mix of laptops,
desktops and servers. The output feeds ``python -m asset_engine.cli --source
ninjaone --input <file>`` and the perf tests.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

ROLES = ["WINDOWS_LAPTOP", "WINDOWS_DESKTOP", "MAC_LAPTOP", "WINDOWS_SERVER", "TABLET"]
ROLE_WEIGHTS = [0.5, 0.25, 0.1, 0.1, 0.05]
MANUFACTURERS = ["Dell Inc.", "LENOVO", "HP", "Apple Inc."]
MODELS = ["Latitude 7440", "ThinkPad T14", "EliteBook 840", "Precision 7680", "OptiPlex 7010"]
RAM_GIB = [7.8, 15.8, 31.7, 63.7, 127.6]
DISK_GIB = [237.9, 476.8, 953.3, 1907.7]
OS_NAMES = ["Windows 11 Enterprise", "Windows 10 Pro", "macOS Sonoma", "Windows Server 2022 Standard"]


def _volumes(rng: np.random.Generator) -> str:
    main = rng.choice(DISK_GIB)
    text = f'Type: "Local Disk" Name: "C:" ({main} GiB)'
    if rng.random() < 0.2:
        text += '; Type: "Removable Disk" Name: "E:" (58.6 GiB)'
    return text


def generate_ninjaone_frame(rows: int, seed: int = 42) -> pd.DataFrame:
    """Build a NinjaOne-shaped DataFrame with `rows` devices (all text cells)."""
    rng = np.random.default_rng(seed)
    roles = rng.choice(ROLES, size=rows, p=ROLE_WEIGHTS)
    data = {
        "Display Name": [str(100000 + i) if i % 3 else f"CAL-WS{i:05d}" for i in range(rows)],
        "Role": roles.tolist(),
        "Manufacturer": rng.choice(MANUFACTURERS, size=rows).tolist(),
        "System Model": rng.choice(MODELS, size=rows).tolist(),
        "Serial Number": [f"SN{seed:02d}{i:08d}" for i in range(rows)],
        "RAM": [str(v) for v in rng.choice(RAM_GIB, size=rows)],
        "Volumes": [_volumes(rng) for _ in range(rows)],
        "OS Name": rng.choice(OS_NAMES, size=rows).tolist(),
        "Processor": ["Intel(R) Core(TM) i7-1365U"] * rows,
        "Last LoggedIn User": [f"BGC\\user{i % 500:03d}" if rng.random() < 0.8 else "" for i in range(rows)],
        "Warranty End Date": ["2027-03-15T00:00:00Z"] * rows,
        "Last Online": ["2024-05-01 08:30:00"] * rows,
    }
    return pd.DataFrame(data)


def write_dataset(output_path: Path, rows: int, seed: int = 42) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df = generate_ninjaone_frame(rows, seed)
    if output_path.suffix.lower() == ".xlsx":
        df.to_excel(output_path, index=False, engine="openpyxl")
    else:
        df.to_csv(output_path, index=False)
    return output_path


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a synthetic NinjaOne export for performance testing")
    parser.add_argument("output", type=Path, help="Output file (.csv or .xlsx)")
    parser.add_argument("--rows", type=int, default=20_000, help="Number of devices (default: 20,000)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1

    path = write_dataset(args.output, args.rows, args.seed)
    print(f"Created {path} with {args.rows:,} devices (seed={args.seed})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
