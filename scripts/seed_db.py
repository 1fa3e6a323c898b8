#!/usr/bin/env python3
"""
Seed the database with demo/test data.

Usage (from project root):
  python scripts/seed_db.py             # add/merge demo data
  python scripts/seed_db.py --fresh     # DROP & CREATE tables, then seed
  python scripts/seed_db.py --skip-demo # users only

The script is idempotent where possible: it checks for existing rows by unique
fields (username, competitor identity) before inserting.
"""

from __future__ import annotations

import os
import sys
import random
from datetime import datetime, timedelta

# Ensure project root (where 'hifz/' lives) is importable
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from hifz import create_app
from hifz.extensions import db
from hifz.models import User, Competitor, Evaluation, ActiveEvaluation
from hifz.utils.levels import LEVELS
from hifz.utils.registry import find_duplicate
from hifz.utils.scoring import compute_final_score

DEMO_NAMES = {
    "male": ["أحمد سالم", "محمد علي", "خالد سعيد", "يوسف ناصر", "عبدالله حمد", "سعود راشد"],
    "female": ["فاطمة أحمد", "مريم خالد", "عائشة محمد", "زينب سالم", "نورة علي", "هاجر يوسف"],
}
DEMO_CITIES = ["مسقط", "صلالة", "صحار", "نزوى", "صور"]

# ----------------------------- helpers -----------------------------

def get_or_create_user(username: str, role: str, password: str) -> User:
    u = User.query.filter_by(username=username).first()
    if not u:
        u = User(username=username, role=role)
        u.set_password(password)
        db.session.add(u)
        db.session.flush()
    return u

def get_or_create_competitor(full_name: str, gender: str, level: str, city: str, mobile: str) -> Competitor:
    c = find_duplicate(full_name, gender, level, city)
    if not c:
        c = Competitor(full_name=full_name, gender=gender, level=level, city=city,
                       mobile=mobile, status="not_evaluated")
        db.session.add(c)
        db.session.flush()
    return c

def add_evaluation(c: Competitor, evaluator: str, when: datetime) -> Evaluation:
    if c.evaluation:
        return c.evaluation
    counts = {
        "tanbih": random.randint(0, 5),
        "fateh": random.randint(0, 3),
        "tashkeel": random.randint(0, 4),
        "tajweed": random.randint(0, 6),
    }
    e = Evaluation(
        competitor_id=c.id,
        evaluator_name=evaluator,
        tanbih_count=counts["tanbih"],
        fateh_count=counts["fateh"],
        tashkeel_count=counts["tashkeel"],
        tajweed_count=counts["tajweed"],
        final_score=compute_final_score(**counts),
        created_at=when,
        updated_at=when,
    )
    db.session.add(e)
    c.status = "evaluated"
    return e

def set_active(level: str, c: Competitor) -> None:
    row = ActiveEvaluation.query.filter_by(level=level).first()
    if not row:
        row = ActiveEvaluation(level=level)
        db.session.add(row)
    row.competitor_id = c.id
    row.competitor_name = c.full_name
    row.updated_at = datetime.utcnow()

# ----------------------------- main seeding -----------------------------

def seed(fresh: bool = False, skip_demo: bool = False):
    app = create_app()
    with app.app_context():
        if fresh:
            ans = input("⚠️  This will DROP & CREATE all tables. Continue? (y/N): ").strip().lower()
            if ans != "y":
                print("Cancelled.")
                return
            print("Dropping tables...")
            db.drop_all()
            print("Creating tables...")
            db.create_all()

        print("Seeding users...")
        get_or_create_user("admin", "admin", "change-me-now")
        get_or_create_user("judge", "evaluator", "judge-pass")
        get_or_create_user("screen", "viewer", "screen-pass")

        if not skip_demo:
            print("Seeding demo competitors...")
            competitors = []
            n = 0
            for gender, names in DEMO_NAMES.items():
                for i, name in enumerate(names):
                    level = LEVELS[i % len(LEVELS)]
                    city = DEMO_CITIES[(i + n) % len(DEMO_CITIES)]
                    mobile = f"9{n:07d}"
                    competitors.append(get_or_create_competitor(name, gender, level, city, mobile))
                    n += 1

            print("Seeding demo evaluations...")
            now = datetime.utcnow()
            # roughly half judged, spread over the last two days
            for k, c in enumerate(random.sample(competitors, k=len(competitors) // 2)):
                ts = now - timedelta(hours=k * 3 + random.randint(0, 2))
                add_evaluation(c, "judge", ts)
                set_active(c.level, c)

        db.session.commit()
        print("\n✅ Seed complete!")
        print_counts()

def print_counts():
    print("Counts:")
    print(f"  Users:        {User.query.count()}")
    print(f"  Competitors:  {Competitor.query.count()}")
    print(f"  Evaluations:  {Evaluation.query.count()}")
    print(f"  Active slots: {ActiveEvaluation.query.count()}")

# ----------------------------- entrypoint -----------------------------

if __name__ == "__main__":
    import argparse
    p = argparse.ArgumentParser(description="Seed demo data.")
    p.add_argument("--fresh", action="store_true", help="Drop & recreate tables before seeding.")
    p.add_argument("--skip-demo", action="store_true", help="Skip demo data (users are still ensured).")
    args = p.parse_args()
    seed(fresh=args.fresh, skip_demo=args.skip_demo)
