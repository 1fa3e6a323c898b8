# hifz/utils/levels.py
"""Competition vocabulary: the five levels and the display labels used on
screens, in sort keys and on printed documents."""
from __future__ import annotations

LEVELS = (
    "المستوى الأول: المرحلة الجامعية | الحج والمؤمنون",
    "المستوى الثاني: الصفوف 10-12 | الشعراء والنمل",
    "المستوى الثالث: الصفوف 7-9 | العنكبوت والروم",
    "المستوى الرابع: الصفوف 4-6 | جزء تبارك",
    "المستوى الخامس: الصفوف 1-3 | جزء عمَّ",
)

# Imports that cannot be matched to a level land here.
DEFAULT_LEVEL = LEVELS[-1]

GENDERS = ("male", "female")
ROLES = ("admin", "evaluator", "viewer")

GENDER_LABELS = {"male": "ذكر", "female": "أنثى"}
STATUS_LABELS = {"evaluated": "تم التقييم", "not_evaluated": "لم يتم التقييم"}
ROLE_LABELS = {"admin": "المدير العام", "evaluator": "المقيّم", "viewer": "المشاهد"}


def gender_label(gender: str | None) -> str:
    # anything that is not "male" reads as female, same as the screens always did
    return GENDER_LABELS["male"] if gender == "male" else GENDER_LABELS["female"]


def status_label(status: str | None) -> str:
    return STATUS_LABELS["evaluated"] if status == "evaluated" else STATUS_LABELS["not_evaluated"]


def role_label(role: str | None) -> str:
    return ROLE_LABELS.get(role or "", role or "")


def level_prefix(level: str | None) -> str:
    """`المستوى الأول: ... | ...` -> `المستوى الأول` (used in compact tables)."""
    return (level or "").split(":")[0].strip()
