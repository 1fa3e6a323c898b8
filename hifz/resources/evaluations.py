# hifz/resources/evaluations.py
from __future__ import annotations

from flask import current_app, request
from flask_login import current_user
from flask_restful import Resource
from sqlalchemy.exc import SQLAlchemyError

from hifz.extensions import db
from hifz.models import ActiveEvaluation, Competitor
from hifz.utils.judging import open_for_evaluation, save_evaluation
from hifz.utils.listing import COMPETITOR_SORT_FIELDS, ListingError, ListState, evaluation_view_options
from hifz.utils.records import (
    load_competitor_records,
    serialize_active,
    serialize_competitor,
    serialize_evaluation,
)
from hifz.utils.rest_auth import json_area_required
from hifz.utils.scoring import ErrorCounts, ScoringError, deduction_breakdown, evaluation_band


def _scored(evaluation) -> dict:
    counts = ErrorCounts.from_evaluation(evaluation)
    band, color = evaluation_band(counts.score)
    return {
        "counts": counts.as_dict(),
        "final_score": counts.score,
        "band": band,
        "band_color": color,
        "breakdown": deduction_breakdown(counts.as_dict()),
    }


class EvaluationQueueResource(Resource):
    method_decorators = [json_area_required("evaluate")]

    def get(self):
        """
        The judges' pick list. Same query args as /api/competitors, but `q`
        is a plain substring of the name.
        """
        try:
            state = ListState.from_args(
                request.args,
                COMPETITOR_SORT_FIELDS,
                **evaluation_view_options(current_app.config.get("PAGE_SIZE", 50)),
            )
        except ListingError as exc:
            return {"error": "validation_error", "detail": str(exc)}, 400

        view = state.view(load_competitor_records())
        return {
            "competitors": view.items,
            "meta": view.meta(),
            "state": state.describe(),
        }, 200


class EvaluationResource(Resource):
    method_decorators = [json_area_required("evaluate")]

    def get(self, competitor_id: int):
        c = db.session.get(Competitor, competitor_id)
        if not c:
            return {"error": "not_found"}, 404
        return {
            "competitor": serialize_competitor(c),
            "evaluation": serialize_evaluation(c.evaluation),
            **_scored(c.evaluation),
        }, 200

    def put(self, competitor_id: int):
        """
        Body: { "tanbih": n, "fateh": n, "tashkeel": n, "tajweed": n }
        (the *_count spellings are accepted too). The evaluator name is the
        logged-in user unless "evaluator_name" is given.
        """
        c = db.session.get(Competitor, competitor_id)
        if not c:
            return {"error": "not_found"}, 404

        payload = request.get_json(silent=True) or {}
        try:
            counts = ErrorCounts.from_payload(payload)
        except ScoringError as exc:
            return {"error": "validation_error", "detail": str(exc)}, 400

        evaluator_name = str(payload.get("evaluator_name") or "").strip() or current_user.username
        try:
            evaluation, status_updated = save_evaluation(c, counts, evaluator_name)
        except SQLAlchemyError:
            return {"error": "store_error", "detail": "حدث خطأ أثناء حفظ التقييم"}, 500

        return {
            "ok": True,
            "status_updated": status_updated,
            "evaluation": serialize_evaluation(evaluation),
            **_scored(evaluation),
        }, 200


class EvaluationOpenResource(Resource):
    method_decorators = [json_area_required("evaluate")]

    def post(self, competitor_id: int):
        c = db.session.get(Competitor, competitor_id)
        if not c:
            return {"error": "not_found"}, 404
        existing = open_for_evaluation(c)
        return {
            "ok": True,
            "competitor": serialize_competitor(c),
            "evaluation": serialize_evaluation(existing),
            **_scored(existing),
        }, 200


class ActiveEvaluationListResource(Resource):
    method_decorators = [json_area_required("live")]

    def get(self):
        rows = ActiveEvaluation.query.order_by(ActiveEvaluation.level.asc()).all()
        return {"active": {row.level: serialize_active(row) for row in rows}}, 200
