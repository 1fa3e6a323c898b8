# hifz/utils/scoring.py
"""
Evaluation scoring.

A recitation starts at 100 points and loses points per recorded mistake:

    tanbih    (prompted by the judge)      1   point
    fateh     (judge supplies the word)    2   points
    tashkeel  (vowel-mark error)           1   point
    tajweed   (recitation-rule error)      0.5 point

The result is floored at 0 and rounded to one decimal place.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional

BASE_SCORE = 100

ERROR_WEIGHTS: Dict[str, float] = {
    "tanbih": 1,
    "fateh": 2,
    "tashkeel": 1,
    "tajweed": 0.5,
}
ERROR_KINDS = tuple(ERROR_WEIGHTS)


class ScoringError(ValueError):
    pass


def _round1(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def total_deduction(tanbih: int = 0, fateh: int = 0, tashkeel: int = 0, tajweed: int = 0) -> float:
    return (
        tanbih * ERROR_WEIGHTS["tanbih"]
        + fateh * ERROR_WEIGHTS["fateh"]
        + tashkeel * ERROR_WEIGHTS["tashkeel"]
        + tajweed * ERROR_WEIGHTS["tajweed"]
    )


def compute_final_score(tanbih: int = 0, fateh: int = 0, tashkeel: int = 0, tajweed: int = 0) -> float:
    deduction = total_deduction(tanbih, fateh, tashkeel, tajweed)
    return _round1(max(0, BASE_SCORE - deduction))


def deduction_breakdown(counts: Dict[str, int]) -> Dict[str, dict]:
    """Per category: how many mistakes and how many points they cost."""
    out = {}
    for kind in ERROR_KINDS:
        n = int(counts.get(kind, 0) or 0)
        out[kind] = {"count": n, "points": n * ERROR_WEIGHTS[kind]}
    return out


# ---------- bands ----------
# Evaluation screen and certificates use three bands; the results listing
# uses five. They are independent on purpose and must not be merged.

EVALUATION_BANDS = (
    (95, "excellent", "green"),
    (90, "very_good", "yellow"),
)
EVALUATION_FALLBACK = ("needs_improvement", "red")

RESULT_BANDS = (
    (95, "excellent"),
    (90, "very_good"),
    (80, "good"),
    (60, "pass"),
)
RESULT_FALLBACK = "fail"
RESULT_BAND_NAMES = tuple(name for _, name in RESULT_BANDS) + (RESULT_FALLBACK,)

BAND_LABELS = {
    "excellent": "ممتاز",
    "very_good": "جيد جداً",
    "good": "جيد",
    "pass": "مقبول",
    "fail": "راسب",
    "needs_improvement": "يحتاج إلى تحسين",
}


def evaluation_band(score: float) -> tuple[str, str]:
    """-> (band, colour) for the evaluation screen / certificate."""
    for threshold, name, colour in EVALUATION_BANDS:
        if score >= threshold:
            return name, colour
    return EVALUATION_FALLBACK


def result_band(score: float) -> str:
    for threshold, name in RESULT_BANDS:
        if score >= threshold:
            return name
    return RESULT_FALLBACK


# ---------- counters ----------

class ErrorCounts:
    """The four mistake counters of one evaluation session."""

    def __init__(self, tanbih: int = 0, fateh: int = 0, tashkeel: int = 0, tajweed: int = 0):
        self.tanbih = tanbih
        self.fateh = fateh
        self.tashkeel = tashkeel
        self.tajweed = tajweed

    @classmethod
    def from_payload(cls, payload: Optional[dict]) -> "ErrorCounts":
        """
        Accepts either `tanbih` or `tanbih_count` style keys.
        Missing counters are 0; anything negative or non-integral is rejected.
        """
        payload = payload or {}
        values = {}
        for kind in ERROR_KINDS:
            raw = payload.get(kind, payload.get(f"{kind}_count", 0))
            if raw in (None, ""):
                raw = 0
            if isinstance(raw, bool):
                raise ScoringError(f"{kind} must be a non-negative integer")
            try:
                n = int(raw)
            except (TypeError, ValueError):
                raise ScoringError(f"{kind} must be a non-negative integer")
            if isinstance(raw, float) and raw != n:
                raise ScoringError(f"{kind} must be a non-negative integer")
            if n < 0:
                raise ScoringError(f"{kind} must be a non-negative integer")
            values[kind] = n
        return cls(**values)

    @classmethod
    def from_evaluation(cls, evaluation) -> "ErrorCounts":
        # no evaluation yet: a fresh session starting at 100
        if evaluation is None:
            return cls()
        return cls(
            tanbih=evaluation.tanbih_count,
            fateh=evaluation.fateh_count,
            tashkeel=evaluation.tashkeel_count,
            tajweed=evaluation.tajweed_count,
        )

    def _check_kind(self, kind: str) -> None:
        if kind not in ERROR_WEIGHTS:
            raise ScoringError(f"unknown error kind: {kind}")

    def increment(self, kind: str) -> int:
        self._check_kind(kind)
        setattr(self, kind, getattr(self, kind) + 1)
        return getattr(self, kind)

    def decrement(self, kind: str) -> int:
        self._check_kind(kind)
        setattr(self, kind, max(0, getattr(self, kind) - 1))
        return getattr(self, kind)

    @property
    def score(self) -> float:
        return compute_final_score(self.tanbih, self.fateh, self.tashkeel, self.tajweed)

    def as_dict(self) -> Dict[str, int]:
        return {kind: getattr(self, kind) for kind in ERROR_KINDS}

    def __eq__(self, other):
        if not isinstance(other, ErrorCounts):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self):
        return f"ErrorCounts({self.as_dict()!r}, score={self.score})"
