# hifz/resources/competitors.py
from __future__ import annotations

from typing import List

from flask import current_app, request
from flask_restful import Resource
from sqlalchemy.exc import IntegrityError

from hifz.extensions import db
from hifz.models import Competitor
from hifz.utils.csv_import import CsvImportError, is_valid_mobile
from hifz.utils.levels import GENDERS, LEVELS
from hifz.utils.listing import (
    COMPETITOR_SORT_FIELDS,
    DELETE_MODES,
    ListingError,
    ListState,
    SelectionSet,
    competitor_view_options,
    resolve_delete_targets,
)
from hifz.utils.records import load_competitor_records, serialize_competitor, serialize_evaluation
from hifz.utils.registry import (
    DuplicateCompetitor,
    RegistrationError,
    delete_competitors,
    find_duplicate,
    import_competitors,
    register_competitor,
)
from hifz.utils.rest_auth import json_area_required


def _confirmation_ok(payload: dict) -> bool:
    secret = str(current_app.config.get("DELETE_CONFIRMATION_SECRET", "9999"))
    return str(payload.get("confirm") or "").strip() == secret


def _text(value) -> str:
    return "" if value is None else str(value).strip()


def _parse_ids(values) -> List[int]:
    ids: List[int] = []
    for v in values or []:
        try:
            n = int(v)
        except (TypeError, ValueError):
            continue
        if n > 0 and n not in ids:
            ids.append(n)
    return ids


class CompetitorListResource(Resource):
    @json_area_required("competitors")
    def get(self):
        """
        Query args: q, gender, level, status, sort, direction, page.
        Search, filters, sort and page are applied in that order over all rows.
        """
        try:
            state = ListState.from_args(
                request.args,
                COMPETITOR_SORT_FIELDS,
                **competitor_view_options(current_app.config.get("PAGE_SIZE", 50)),
            )
        except ListingError as exc:
            return {"error": "validation_error", "detail": str(exc)}, 400

        view = state.view(load_competitor_records())
        return {
            "competitors": view.items,
            "meta": view.meta(),
            "state": state.describe(),
        }, 200

    @json_area_required("register")
    def post(self):
        payload = request.get_json(silent=True) or {}
        try:
            c = register_competitor(
                _text(payload.get("full_name")),
                _text(payload.get("gender")),
                _text(payload.get("level")),
                _text(payload.get("city")),
                _text(payload.get("mobile")),
            )
        except DuplicateCompetitor as exc:
            return {"error": "duplicate", "detail": str(exc)}, 409
        except RegistrationError as exc:
            return {"error": "validation_error", "detail": str(exc)}, 400
        return {"ok": True, "competitor": serialize_competitor(c)}, 201


class CompetitorItemResource(Resource):
    @json_area_required("competitors")
    def get(self, competitor_id: int):
        c = db.session.get(Competitor, competitor_id)
        if not c:
            return {"error": "not_found"}, 404
        data = serialize_competitor(c)
        data["evaluation"] = serialize_evaluation(c.evaluation)
        return data, 200

    @json_area_required("register")
    def patch(self, competitor_id: int):
        c = db.session.get(Competitor, competitor_id)
        if not c:
            return {"error": "not_found"}, 404

        payload = request.get_json(silent=True) or {}

        full_name = _text(payload.get("full_name") or c.full_name)
        gender = _text(payload.get("gender") or c.gender)
        level = _text(payload.get("level") or c.level)
        city = _text(payload.get("city") or c.city)
        mobile = _text(payload.get("mobile") or c.mobile)

        if not full_name or not city:
            return {"error": "validation_error", "detail": "full_name and city are required"}, 400
        if gender not in GENDERS:
            return {"error": "validation_error", "detail": "gender must be male or female"}, 400
        if level not in LEVELS:
            return {"error": "validation_error", "detail": "level must be one of the competition levels"}, 400
        if not is_valid_mobile(mobile):
            return {"error": "validation_error", "detail": "رقم الهاتف يجب أن يحتوي على 8-15 رقماً فقط"}, 400

        if find_duplicate(full_name, gender, level, city, exclude_id=c.id):
            return {"error": "duplicate", "detail": "هذا المتسابق مسجل مسبقاً بنفس البيانات"}, 409

        c.full_name = full_name
        c.gender = gender
        c.level = level
        c.city = city
        c.mobile = mobile
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            return {"error": "duplicate", "detail": "هذا المتسابق مسجل مسبقاً بنفس البيانات"}, 409
        return {"ok": True, "competitor": serialize_competitor(c)}, 200

    @json_area_required("delete")
    def delete(self, competitor_id: int):
        payload = request.get_json(silent=True) or {}
        if not _confirmation_ok(payload):
            return {"error": "invalid_confirmation", "detail": "رمز التأكيد غير صحيح"}, 400
        if not db.session.get(Competitor, competitor_id):
            return {"error": "not_found"}, 404

        deleted, failed = delete_competitors([competitor_id])
        if not deleted:
            return {"error": "store_error", "detail": "delete failed", "failed_ids": failed}, 500
        return {"ok": True, "deleted": deleted}, 200


class CompetitorBulkDeleteResource(Resource):
    method_decorators = [json_area_required("delete")]

    def post(self):
        """
        Body: { "mode": "single"|"selected"|"all", "ids": [..], "confirm": "<secret>" }
        "single" takes the first id, "selected" all given ids, "all" every competitor.
        """
        payload = request.get_json(silent=True) or {}
        mode = _text(payload.get("mode"))
        if mode not in DELETE_MODES:
            return {"error": "validation_error", "detail": f"mode must be one of {', '.join(DELETE_MODES)}"}, 400
        if not _confirmation_ok(payload):
            return {"error": "invalid_confirmation", "detail": "رمز التأكيد غير صحيح"}, 400

        ids = _parse_ids(payload.get("ids"))
        all_ids = []
        if mode == "all":
            all_ids = [row.id for row in db.session.query(Competitor.id).order_by(Competitor.id.asc())]

        try:
            targets = resolve_delete_targets(
                mode,
                competitor_id=ids[0] if ids else None,
                selection=SelectionSet(ids),
                all_ids=all_ids,
            )
        except ListingError as exc:
            return {"error": "validation_error", "detail": str(exc)}, 400

        deleted, failed = delete_competitors(targets)
        current_app.logger.info("bulk delete mode=%s deleted=%s failed=%s", mode, deleted, len(failed))
        return {
            "ok": not failed,
            "summary": {"requested": len(targets), "deleted": deleted, "failed": len(failed)},
            "failed_ids": failed,
        }, 200


class CompetitorImportResource(Resource):
    method_decorators = [json_area_required("register")]

    def post(self):
        """
        CSV import. Either a multipart upload under "file" or JSON { "csv": "<text>" }.
        Returns { ok, stats: {success, skipped, errors}, errors: [{row, name, reason}] }.
        """
        upload = request.files.get("file")
        if upload is not None:
            try:
                text = upload.read().decode("utf-8-sig")
            except UnicodeDecodeError:
                return {"error": "validation_error", "detail": "file must be UTF-8 encoded"}, 400
        else:
            payload = request.get_json(silent=True) or {}
            text = payload.get("csv")
            if not isinstance(text, str):
                return {"error": "validation_error", "detail": "csv text or file upload required"}, 400

        try:
            report = import_competitors(text)
        except CsvImportError as exc:
            return {"error": "validation_error", "detail": str(exc)}, 400

        return {"ok": True, **report.as_dict()}, 200
