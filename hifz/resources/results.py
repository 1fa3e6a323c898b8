# hifz/resources/results.py
from __future__ import annotations

from flask import current_app, request
from flask_restful import Resource

from hifz.utils.listing import (
    RESULT_SORT_FIELDS,
    ListingError,
    ListState,
    result_view_options,
    top_winners,
)
from hifz.utils.records import load_result_records
from hifz.utils.rest_auth import json_area_required
from hifz.utils.scoring import BAND_LABELS, result_band


def _with_band(record: dict) -> dict:
    band = result_band(record.get("final_score") or 0)
    return {**record, "band": band, "band_label": BAND_LABELS[band]}


class ResultListResource(Resource):
    method_decorators = [json_area_required("results")]

    def get(self):
        """Query args: q, gender, level, band, sort, direction, page."""
        try:
            state = ListState.from_args(
                request.args,
                RESULT_SORT_FIELDS,
                **result_view_options(current_app.config.get("PAGE_SIZE", 50)),
            )
        except ListingError as exc:
            return {"error": "validation_error", "detail": str(exc)}, 400

        view = state.view(load_result_records())
        return {
            "results": [_with_band(r) for r in view.items],
            "meta": view.meta(),
            "state": state.describe(),
        }, 200


class WinnersResource(Resource):
    method_decorators = [json_area_required("results")]

    def get(self):
        gender = (request.args.get("gender") or "").strip() or None
        winners = top_winners(load_result_records(), gender=gender)
        return {"winners": winners}, 200
