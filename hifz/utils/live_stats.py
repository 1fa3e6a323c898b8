# hifz/utils/live_stats.py
from __future__ import annotations

import math
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

from hifz.utils.levels import LEVELS
from hifz.utils.time import is_same_local_day, to_local

TOP_CITIES = 10

MILESTONES = (
    (100, "complete", "اكتمل التقييم!"),
    (75, "final_stretch", "الشوط الأخير!"),
    (50, "halfway", "نصف الطريق!"),
)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class LiveStats:
    def __init__(self, total: int = 0, evaluated: int = 0, waiting: int = 0,
                 male: int = 0, female: int = 0,
                 levels: Optional[Dict[str, int]] = None,
                 cities: Optional[Dict[str, int]] = None,
                 evaluations_today: int = 0, current_hour: int = 0):
        self.total = total
        self.evaluated = evaluated
        self.waiting = waiting
        self.male = male
        self.female = female
        self.levels = levels if levels is not None else {level: 0 for level in LEVELS}
        self.cities = cities if cities is not None else {}
        self.evaluations_today = evaluations_today
        self.current_hour = current_hour

    def copy(self, **changes) -> "LiveStats":
        fields = self.as_dict()
        fields.update(changes)
        return LiveStats(**fields)

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "evaluated": self.evaluated,
            "waiting": self.waiting,
            "male": self.male,
            "female": self.female,
            "levels": dict(self.levels),
            "cities": dict(self.cities),
            "evaluations_today": self.evaluations_today,
            "current_hour": self.current_hour,
        }


def _get(item, name):
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def compute_live_stats(competitors: Iterable, evaluations: Iterable,
                       now: Optional[datetime] = None, tz=None) -> LiveStats:
    """
    Aggregate the whole competition. Accepts model rows or plain dicts.
    `evaluated` is the number of evaluation rows, not the number of
    competitors flagged as evaluated.
    """
    competitors = list(competitors)
    evaluations = list(evaluations)
    now = now or datetime.now(timezone.utc)

    total = len(competitors)
    evaluated = len(evaluations)

    genders = Counter(_get(c, "gender") for c in competitors)
    level_counts = Counter(_get(c, "level") for c in competitors)
    levels = {level: level_counts.get(level, 0) for level in LEVELS}

    # Counter keeps first-seen order, and sorted() is stable, so ties stay in that order
    city_counts = Counter(_get(c, "city") for c in competitors)
    top = sorted(city_counts.items(), key=lambda kv: kv[1], reverse=True)[:TOP_CITIES]
    cities = dict(top)

    today = sum(1 for e in evaluations if is_same_local_day(_get(e, "created_at"), now, tz))

    return LiveStats(
        total=total,
        evaluated=evaluated,
        waiting=total - evaluated,
        male=genders.get("male", 0),
        female=genders.get("female", 0),
        levels=levels,
        cities=cities,
        evaluations_today=today,
        current_hour=to_local(now, tz).hour,
    )


def progress_percentage(stats: LiveStats) -> int:
    if stats.total == 0:
        return 0
    return round_half_up(stats.evaluated / stats.total * 100)


def milestone(progress: int) -> Optional[dict]:
    # exactly 100 only; above 75 otherwise reads as the final stretch
    if progress == 100:
        key, message = MILESTONES[0][1:]
        return {"key": key, "message": message}
    for threshold, key, message in MILESTONES[1:]:
        if progress >= threshold:
            return {"key": key, "message": message}
    return None


def project_by_gender(stats: LiveStats, gender: str) -> LiveStats:
    """
    Approximate one gender's share by scaling every bucket by
    gender_count / total and rounding each bucket on its own. The buckets do
    not always add up to the projected total; that approximation is what the
    live screen shows.
    """
    if gender not in ("male", "female"):
        return stats

    gender_total = stats.male if gender == "male" else stats.female
    ratio = gender_total / stats.total if stats.total else 0
    evaluated = round_half_up(stats.evaluated * ratio)

    return stats.copy(
        total=gender_total,
        evaluated=evaluated,
        waiting=gender_total - evaluated,
        levels={level: round_half_up(count * ratio) for level, count in stats.levels.items()},
        cities={city: round_half_up(count * ratio) for city, count in stats.cities.items()},
    )


def live_snapshot(stats: LiveStats, gender: str = "all") -> dict:
    view = project_by_gender(stats, gender)
    progress = progress_percentage(view)
    return {
        "gender": gender if gender in ("male", "female") else "all",
        "stats": view.as_dict(),
        "progress": progress,
        "milestone": milestone(progress),
    }
