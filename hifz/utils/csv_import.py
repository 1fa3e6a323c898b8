# hifz/utils/csv_import.py
"""
Row-level normalization for competitor CSV files.

Format: UTF-8, one header line (ignored), then
    full_name,gender,level,city,mobile
No quoting or escaping. Blank lines are dropped before rows are numbered, so
the first data row is row 2.

This module never touches the database; the store-side half of the import
(cross-store duplicates, inserts) lives in hifz.utils.registry.
"""
from __future__ import annotations

import re
from typing import Dict, Iterator, List, Optional

from hifz.utils.levels import DEFAULT_LEVEL, LEVELS

MOBILE_RE = re.compile(r"^\d{8,15}$")

MALE_TOKENS = {"ذكر", "male", "m"}
FEMALE_TOKENS = {"أنثى", "انثى", "female", "f"}

# The one spelling variant seen in the wild: the fifth level's portion
# written without its diacritics.
AMMA_PLAIN = "جزء عم"
AMMA_MARKED = "جزء عمَّ"

UNNAMED = "غير محدد"
REASON_INCOMPLETE = "بيانات ناقصة - يجب أن يحتوي السطر على 5 أعمدة"
REASON_GENDER = "الجنس غير صحيح: {}"
REASON_MOBILE = "رقم الهاتف غير صحيح: {}"


class CsvImportError(ValueError):
    """The file as a whole cannot be imported."""


def normalize_gender(token: str) -> Optional[str]:
    t = (token or "").strip()
    lowered = t.lower()
    if t in MALE_TOKENS or lowered in MALE_TOKENS:
        return "male"
    if t in FEMALE_TOKENS or lowered in FEMALE_TOKENS:
        return "female"
    return None


def _mark_amma(text: str) -> str:
    # idempotent: strip the marks first so an already-marked value is not doubled
    return text.replace(AMMA_MARKED, AMMA_PLAIN).replace(AMMA_PLAIN, AMMA_MARKED)


def normalize_level(raw: str) -> str:
    """
    Map free-form level text onto one of the canonical levels.
    Unrecognised input falls back to the fifth level without any error.
    """
    value = (raw or "").strip()
    if value in LEVELS:
        return value

    marked = _mark_amma(value)
    if marked in LEVELS:
        return marked

    input_parts = [p.strip() for p in value.split("|")]
    if len(input_parts) == 2:
        input_prefix = input_parts[0].split(":")[0].strip()
        input_portion = _mark_amma(input_parts[1])
        for level in LEVELS:
            level_parts = [p.strip() for p in level.split("|")]
            level_prefix = level_parts[0].split(":")[0].strip()
            if level_prefix == input_prefix and _mark_amma(level_parts[1]) == input_portion:
                return level

    return DEFAULT_LEVEL


def is_valid_mobile(value: str) -> bool:
    return bool(MOBILE_RE.match(value or ""))


def identity_key(full_name: str, gender: str, level: str, city: str) -> tuple:
    """Duplicate key. The mobile number is not part of it."""
    return (full_name, gender, level, city)


class RowOutcome:
    """What the normalizer decided about one data row."""

    VALID = "valid"
    INVALID = "invalid"
    DUPLICATE = "duplicate"

    def __init__(self, row: int, name: str, kind: str,
                 record: Optional[Dict[str, str]] = None,
                 reason: Optional[str] = None):
        self.row = row
        self.name = name
        self.kind = kind
        self.record = record
        self.reason = reason

    def error(self) -> dict:
        return {"row": self.row, "name": self.name, "reason": self.reason}

    def __repr__(self):
        return f"RowOutcome(row={self.row}, kind={self.kind!r}, name={self.name!r})"


def split_lines(text: str) -> List[str]:
    lines = [line for line in (text or "").split("\n") if line.strip()]
    if len(lines) < 2:
        raise CsvImportError("الملف فارغ أو غير صالح")
    return lines


def normalize_row(row_number: int, line: str) -> RowOutcome:
    cols = line.strip().split(",")
    if len(cols) < 5:
        return RowOutcome(row_number, cols[0] or UNNAMED, RowOutcome.INVALID,
                          reason=REASON_INCOMPLETE)

    full_name = cols[0].strip()
    gender_raw = cols[1].strip()
    level_raw = cols[2].strip()
    city = cols[3].strip()
    mobile = cols[4].strip()

    gender = normalize_gender(gender_raw)
    if gender is None:
        return RowOutcome(row_number, full_name, RowOutcome.INVALID,
                          reason=REASON_GENDER.format(gender_raw))

    level = normalize_level(level_raw)

    if not is_valid_mobile(mobile):
        return RowOutcome(row_number, full_name, RowOutcome.INVALID,
                          reason=REASON_MOBILE.format(mobile))

    return RowOutcome(
        row_number,
        full_name,
        RowOutcome.VALID,
        record={
            "full_name": full_name,
            "gender": gender,
            "level": level,
            "city": city,
            "mobile": mobile,
        },
    )


def iter_rows(text: str) -> Iterator[RowOutcome]:
    """
    Yields one outcome per data row, in file order. A row whose identity key
    already appeared earlier in the same file comes back as DUPLICATE.
    """
    lines = split_lines(text)
    seen = set()
    for idx, line in enumerate(lines[1:], start=2):
        outcome = normalize_row(idx, line)
        if outcome.kind == RowOutcome.VALID:
            rec = outcome.record
            key = identity_key(rec["full_name"], rec["gender"], rec["level"], rec["city"])
            if key in seen:
                outcome.kind = RowOutcome.DUPLICATE
            else:
                seen.add(key)
        yield outcome


class ImportReport:
    def __init__(self):
        self.success = 0
        self.skipped = 0
        self.errors = 0
        self.error_rows: List[dict] = []

    def add_error(self, row: int, name: str, reason: str) -> None:
        self.errors += 1
        self.error_rows.append({"row": row, "name": name, "reason": reason})

    def stats(self) -> dict:
        return {"success": self.success, "skipped": self.skipped, "errors": self.errors}

    def as_dict(self) -> dict:
        return {"stats": self.stats(), "errors": list(self.error_rows)}
