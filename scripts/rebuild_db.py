#!/usr/bin/env python3
"""
Rebuild the competition database: drop all tables and recreate them.
Competitors, evaluations, the live "currently judging" slots and users are
all erased. Run from project root:
    python scripts/rebuild_db.py [--yes]
"""
import os, sys

# Ensure project root (where 'hifz/' lives) is on sys.path
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from hifz import create_app
from hifz.extensions import db

def main(assume_yes: bool = False):
    app = create_app()
    with app.app_context():
        if not assume_yes:
            confirm = input("⚠️  This will ERASE all competitors and evaluations. Continue? (y/N): ").strip().lower()
            if confirm != "y":
                print("Cancelled.")
                return
        print("Dropping all tables...")
        db.drop_all()
        print("Creating tables...")
        db.create_all()
        print("✅ Database rebuilt successfully.")

if __name__ == "__main__":
    main(assume_yes="--yes" in sys.argv[1:])
