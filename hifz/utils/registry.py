# hifz/utils/registry.py
"""Competitor registration, CSV import (store side) and deletion."""
from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from hifz.extensions import db
from hifz.models import Competitor
from hifz.utils.csv_import import (
    ImportReport,
    RowOutcome,
    is_valid_mobile,
    iter_rows,
)
from hifz.utils.levels import GENDERS, LEVELS


class RegistrationError(ValueError):
    pass


class DuplicateCompetitor(RegistrationError):
    pass


def find_duplicate(full_name: str, gender: str, level: str, city: str,
                   exclude_id: Optional[int] = None) -> Optional[Competitor]:
    """Same name, gender, level and city. The mobile number does not count."""
    query = Competitor.query.filter(
        Competitor.full_name == full_name,
        Competitor.gender == gender,
        Competitor.level == level,
        Competitor.city == city,
    )
    if exclude_id is not None:
        query = query.filter(Competitor.id != exclude_id)
    return query.first()


def validate_competitor_fields(full_name: str, gender: str, level: str,
                               city: str, mobile: str) -> None:
    if not full_name or not gender or not level or not city or not mobile:
        raise RegistrationError("يرجى ملء جميع الحقول")
    if gender not in GENDERS:
        raise RegistrationError("gender must be male or female")
    if level not in LEVELS:
        raise RegistrationError("level must be one of the competition levels")
    if not is_valid_mobile(mobile):
        raise RegistrationError("رقم الهاتف يجب أن يحتوي على 8-15 رقماً فقط")


def register_competitor(full_name: str, gender: str, level: str,
                        city: str, mobile: str) -> Competitor:
    full_name = (full_name or "").strip()
    city = (city or "").strip()
    mobile = (mobile or "").strip()
    validate_competitor_fields(full_name, gender, level, city, mobile)

    if find_duplicate(full_name, gender, level, city):
        raise DuplicateCompetitor("هذا المتسابق مسجل مسبقاً بنفس البيانات")

    competitor = Competitor(
        full_name=full_name,
        gender=gender,
        level=level,
        city=city,
        mobile=mobile,
        status="not_evaluated",
    )
    db.session.add(competitor)
    try:
        db.session.commit()
    except IntegrityError:
        # lost a race against a concurrent insert of the same identity
        db.session.rollback()
        raise DuplicateCompetitor("هذا المتسابق مسجل مسبقاً بنفس البيانات")
    current_app.logger.info("competitor registered id=%s level=%r", competitor.id, level)
    return competitor


def _store_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def import_competitors(text: str) -> ImportReport:
    """
    Run a CSV import. Rows are handled one by one in file order; a failing
    row is reported and the import moves on to the next one.
    Raises CsvImportError when the file has no data rows.
    """
    report = ImportReport()

    for outcome in iter_rows(text):
        if outcome.kind == RowOutcome.INVALID:
            report.add_error(outcome.row, outcome.name, outcome.reason)
            continue
        if outcome.kind == RowOutcome.DUPLICATE:
            report.skipped += 1
            continue

        rec = outcome.record
        if find_duplicate(rec["full_name"], rec["gender"], rec["level"], rec["city"]):
            report.skipped += 1
            continue

        db.session.add(Competitor(status="not_evaluated", **rec))
        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            message = _store_message(exc)
            current_app.logger.warning("import row %s (%r) failed: %s", outcome.row, outcome.name, message)
            report.add_error(outcome.row, outcome.name, message)
            continue
        report.success += 1

    current_app.logger.info("competitor import finished: %s", report.stats())
    return report


def delete_competitors(ids: Iterable[int]) -> Tuple[int, List[int]]:
    """
    Delete one row at a time. A failure is logged and counted; the loop
    carries on and nothing is retried. Returns (deleted, failed_ids).
    """
    deleted = 0
    failed: List[int] = []
    for competitor_id in ids:
        try:
            competitor = db.session.get(Competitor, competitor_id)
            if competitor is None:
                failed.append(competitor_id)
                current_app.logger.warning("delete competitor %s: not found", competitor_id)
                continue
            db.session.delete(competitor)
            db.session.commit()
            deleted += 1
        except SQLAlchemyError as exc:
            db.session.rollback()
            failed.append(competitor_id)
            current_app.logger.error("delete competitor %s failed: %s", competitor_id, _store_message(exc))
    return deleted, failed
