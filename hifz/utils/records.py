# hifz/utils/records.py
"""Row -> plain dict conversion shared by the REST resources and print views."""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy.orm import joinedload

from hifz.models import ActiveEvaluation, Competitor, Evaluation
from hifz.utils.time import isoformat


def serialize_competitor(c: Competitor) -> dict:
    return {
        "id": c.id,
        "full_name": c.full_name,
        "gender": c.gender,
        "level": c.level,
        "city": c.city,
        "mobile": c.mobile,
        "status": c.status,
        "created_at": isoformat(c.created_at),
    }


def serialize_evaluation(e: Optional[Evaluation]) -> Optional[dict]:
    if e is None:
        return None
    return {
        "id": e.id,
        "competitor_id": e.competitor_id,
        "evaluator_name": e.evaluator_name,
        "tanbih_count": e.tanbih_count,
        "fateh_count": e.fateh_count,
        "tashkeel_count": e.tashkeel_count,
        "tajweed_count": e.tajweed_count,
        "final_score": e.final_score,
        "created_at": isoformat(e.created_at),
        "updated_at": isoformat(e.updated_at),
    }


def serialize_result(e: Evaluation) -> dict:
    """An evaluation flattened together with its competitor."""
    c = e.competitor
    return {
        "id": e.id,
        "competitor_id": e.competitor_id,
        "full_name": c.full_name,
        "gender": c.gender,
        "level": c.level,
        "city": c.city,
        "mobile": c.mobile,
        "final_score": e.final_score,
        "tanbih_count": e.tanbih_count,
        "fateh_count": e.fateh_count,
        "tashkeel_count": e.tashkeel_count,
        "tajweed_count": e.tajweed_count,
        "evaluator_name": e.evaluator_name,
        "created_at": isoformat(e.created_at),
    }


def serialize_active(a: ActiveEvaluation) -> dict:
    return {
        "level": a.level,
        "competitor_id": a.competitor_id,
        "competitor_name": a.competitor_name,
        "updated_at": isoformat(a.updated_at),
    }


def load_competitor_records() -> List[dict]:
    """Newest registrations first; list views re-sort as needed."""
    query = Competitor.query.order_by(Competitor.created_at.desc(), Competitor.id.desc())
    return [serialize_competitor(c) for c in query.all()]


def load_result_records() -> List[dict]:
    rows = (
        Evaluation.query
        .options(joinedload(Evaluation.competitor))
        .order_by(Evaluation.final_score.desc(), Evaluation.id.asc())
        .all()
    )
    return [serialize_result(e) for e in rows if e.competitor is not None]
