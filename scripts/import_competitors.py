#!/usr/bin/env python3
"""
Import competitors from a CSV file, same rules as the upload on the admin screen.

Usage (from project root):
  python scripts/import_competitors.py path/to/competitors.csv

CSV: UTF-8, header line first, then
  full_name,gender,level,city,mobile
"""
from __future__ import annotations

import os
import sys
from pathlib import Path

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from hifz import create_app
from hifz.utils.csv_import import CsvImportError
from hifz.utils.registry import import_competitors


def main(csv_path: str) -> int:
    path = Path(csv_path)
    if not path.is_file():
        print(f"File not found: {csv_path}")
        return 2

    text = path.read_text(encoding="utf-8-sig")
    app = create_app()
    with app.app_context():
        try:
            report = import_competitors(text)
        except CsvImportError as e:
            print(f"Import rejected: {e}")
            return 1

    stats = report.stats()
    print(f"Imported: {stats['success']}  Skipped (duplicates): {stats['skipped']}  Errors: {stats['errors']}")
    for err in report.error_rows:
        print(f"  row {err['row']:>4}  {err['name']}: {err['reason']}")
    return 0 if not report.errors else 1


if __name__ == "__main__":
    import argparse
    p = argparse.ArgumentParser(description="Import competitors from CSV.")
    p.add_argument("csv_path", help="CSV file: full_name,gender,level,city,mobile")
    args = p.parse_args()
    sys.exit(main(args.csv_path))
