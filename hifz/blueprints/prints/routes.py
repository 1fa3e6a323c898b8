# hifz/blueprints/prints/routes.py
"""
Printable documents. Each page calls window.print() on load; the rows come
straight from the store with the same search/filter/sort rules as the lists.
"""
from __future__ import annotations

from flask import Blueprint, abort, current_app, render_template, request

from hifz.utils.listing import (
    COMPETITOR_SORT_FIELDS,
    RESULT_SORT_FIELDS,
    ListingError,
    ListState,
    SelectionSet,
    competitor_view_options,
    result_view_options,
    top_winners,
)
from hifz.utils.levels import GENDERS
from hifz.utils.perms import area_required
from hifz.utils.records import load_competitor_records, load_result_records
from hifz.utils.scoring import deduction_breakdown, evaluation_band

prints_bp = Blueprint("prints", __name__)


def _state_or_400(sortable, options) -> ListState:
    try:
        return ListState.from_args(request.args, sortable, **options)
    except ListingError as exc:
        current_app.logger.debug("print view rejected args %s: %s", dict(request.args), exc)
        abort(400)


def _with_breakdown(record: dict) -> dict:
    counts = {
        "tanbih": record.get("tanbih_count"),
        "fateh": record.get("fateh_count"),
        "tashkeel": record.get("tashkeel_count"),
        "tajweed": record.get("tajweed_count"),
    }
    band, colour = evaluation_band(record.get("final_score") or 0)
    return {**record, "breakdown": deduction_breakdown(counts), "band": band, "band_color": colour}


def _parse_ids(raw: str) -> list[int]:
    ids = []
    for part in (raw or "").split(","):
        part = part.strip()
        if part.isdigit():
            ids.append(int(part))
    return ids


@prints_bp.route("/competitors")
@area_required("competitors")
def competitors():
    state = _state_or_400(COMPETITOR_SORT_FIELDS, competitor_view_options())
    rows = state.filtered(load_competitor_records())
    return render_template("print/competitors.html", rows=rows, state=state.describe())


@prints_bp.route("/results")
@area_required("results")
def results():
    state = _state_or_400(RESULT_SORT_FIELDS, result_view_options())
    rows = [_with_breakdown(r) for r in state.filtered(load_result_records())]
    return render_template("print/results.html", rows=rows, state=state.describe())


@prints_bp.route("/certificates")
@area_required("results")
def certificates():
    """?ids=<result id>,<result id>,... one page per id, in the given order."""
    selection = SelectionSet(_parse_ids(request.args.get("ids", "")))
    if not len(selection):
        abort(400)
    by_id = {r["id"]: r for r in load_result_records()}
    rows = [_with_breakdown(by_id[i]) for i in selection if i in by_id]
    if not rows:
        abort(404)
    return render_template("print/certificates.html", rows=rows)


@prints_bp.route("/winners")
@area_required("results")
def winners():
    """Top three per level, one group per gender; ?gender=male|female keeps one group."""
    gender = (request.args.get("gender") or "").strip()
    if gender and gender not in GENDERS:
        abort(400)
    genders = [gender] if gender else list(GENDERS)
    table = top_winners(load_result_records(), gender=gender or None)
    return render_template("print/winners.html", winners=table, genders=genders, gender=gender)
