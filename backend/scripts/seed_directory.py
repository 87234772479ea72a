#!/usr/bin/env python3
"""
Load the Aadhaar directory from a JSON or CSV file.

Each record needs "aadhaar" and "phone"; "fullname" is optional.

Usage:
    python scripts/seed_directory.py directory.json
    python scripts/seed_directory.py directory.csv --create-tables
"""
import argparse
import csv
import json
import os
import sys

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from aadhaar_auth.db import Base, get_engine, get_session_local
from aadhaar_auth import models  # noqa: F401
from aadhaar_auth.services.directory_service import DirectoryService


def read_rows(path: str):
    if path.lower().endswith(".csv"):
        with open(path, newline="", encoding="utf-8") as f:
            return list(csv.DictReader(f))
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return data if isinstance(data, list) else [data]


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the Aadhaar directory")
    parser.add_argument("path", help="JSON (list of objects) or CSV file")
    parser.add_argument("--create-tables", action="store_true", help="create tables before loading")
    args = parser.parse_args()

    if args.create_tables:
        Base.metadata.create_all(bind=get_engine())

    rows = read_rows(args.path)
    db = get_session_local()()
    try:
        added, updated, skipped = DirectoryService.upsert_entries(db, rows)
    finally:
        db.close()

    print(f"Directory seeded: {added} added, {updated} updated, {skipped} skipped")
    return 0 if not skipped else 1


if __name__ == "__main__":
    sys.exit(main())
