# hifz/utils/judging.py
from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from hifz.extensions import db
from hifz.models import ActiveEvaluation, Competitor, Evaluation
from hifz.utils.scoring import ErrorCounts


def mark_active(competitor: Competitor) -> bool:
    """
    Point the level's "currently judging" slot at this competitor.
    Best effort: a failure is logged and the judge carries on. The slot is
    never cleared afterwards, so it shows the last competitor opened.
    """
    try:
        row = ActiveEvaluation.query.filter_by(level=competitor.level).first()
        if row is None:
            row = ActiveEvaluation(level=competitor.level)
            db.session.add(row)
        row.competitor_id = competitor.id
        row.competitor_name = competitor.full_name
        row.updated_at = datetime.utcnow()
        db.session.commit()
        return True
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.warning("active evaluation update failed for level %r: %s", competitor.level, exc)
        return False


def open_for_evaluation(competitor: Competitor) -> Optional[Evaluation]:
    """Announce the competitor on the live screen and return any earlier evaluation."""
    mark_active(competitor)
    return Evaluation.query.filter_by(competitor_id=competitor.id).first()


def save_evaluation(competitor: Competitor, counts: ErrorCounts,
                    evaluator_name: str) -> Tuple[Evaluation, bool]:
    """
    Two separate writes:
      1. insert or update the competitor's evaluation (commit),
      2. flag the competitor as evaluated (commit).
    If step 1 fails the error propagates. If step 2 fails the evaluation stays
    saved, the status stays stale, and the second element of the return value
    is False. There is no compensating rollback of step 1.
    """
    now = datetime.utcnow()
    evaluation = Evaluation.query.filter_by(competitor_id=competitor.id).first()
    if evaluation is None:
        evaluation = Evaluation(competitor_id=competitor.id, created_at=now)
        db.session.add(evaluation)

    evaluation.evaluator_name = evaluator_name
    evaluation.tanbih_count = counts.tanbih
    evaluation.fateh_count = counts.fateh
    evaluation.tashkeel_count = counts.tashkeel
    evaluation.tajweed_count = counts.tajweed
    evaluation.final_score = counts.score
    evaluation.updated_at = now

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("saving evaluation for competitor %s failed", competitor.id)
        raise

    try:
        competitor.status = "evaluated"
        db.session.commit()
        status_updated = True
    except SQLAlchemyError as exc:
        db.session.rollback()
        status_updated = False
        current_app.logger.error(
            "evaluation %s saved but competitor %s status update failed: %s",
            evaluation.id, competitor.id, exc,
        )

    current_app.logger.info(
        "evaluation saved competitor=%s score=%s by=%r status_updated=%s",
        competitor.id, evaluation.final_score, evaluator_name, status_updated,
    )
    return evaluation, status_updated
