# hifz/resources/live.py
from __future__ import annotations

from flask import current_app, request
from flask_restful import Resource

from hifz.models import ActiveEvaluation, Competitor, Evaluation
from hifz.utils.live_stats import compute_live_stats, live_snapshot
from hifz.utils.records import serialize_active
from hifz.utils.rest_auth import json_area_required

LIVE_GENDERS = ("all", "male", "female")


class LiveStatsResource(Resource):
    method_decorators = [json_area_required("live")]

    def get(self):
        """
        Whole-competition statistics, recomputed on every call.
        ?gender=male|female scales the buckets by that gender's share.
        """
        gender = (request.args.get("gender") or "all").strip().lower()
        if gender not in LIVE_GENDERS:
            return {"error": "validation_error", "detail": "gender must be all, male or female"}, 400

        competitors = Competitor.query.with_entities(
            Competitor.gender, Competitor.level, Competitor.city
        ).order_by(Competitor.created_at.asc(), Competitor.id.asc()).all()
        evaluations = Evaluation.query.with_entities(Evaluation.created_at).all()

        stats = compute_live_stats(
            [{"gender": g, "level": lvl, "city": city} for g, lvl, city in competitors],
            [{"created_at": created_at} for (created_at,) in evaluations],
        )
        active = ActiveEvaluation.query.order_by(ActiveEvaluation.level.asc()).all()

        return {
            **live_snapshot(stats, gender),
            "active": {row.level: serialize_active(row) for row in active},
            "refresh_seconds": current_app.config.get("LIVE_REFRESH_SECONDS", 5),
        }, 200
