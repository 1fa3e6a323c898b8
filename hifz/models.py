# hifz/models.py
from __future__ import annotations
from datetime import datetime

from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin

from sqlalchemy import CheckConstraint, UniqueConstraint
from hifz.extensions import db


# =================
# User (auth/roles)
# =================
class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default="viewer")  # viewer|evaluator|admin

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'evaluator', 'viewer')", name="ck_user_role"),
    )

    def set_password(self, raw: str) -> None:
        self.password_hash = generate_password_hash(raw)

    def check_password(self, raw: str) -> bool:
        return check_password_hash(self.password_hash, raw)


# ============
# Competitor
# ============
class Competitor(db.Model):
    __tablename__ = "competitors"

    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(200), nullable=False)
    gender = db.Column(db.String(10), nullable=False)
    level = db.Column(db.String(120), nullable=False, index=True)
    city = db.Column(db.String(120), nullable=False)
    mobile = db.Column(db.String(15), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="not_evaluated")
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    # one evaluation per competitor
    evaluation = db.relationship(
        "Evaluation",
        back_populates="competitor",
        uselist=False,
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        # mobile is deliberately not part of the identity
        UniqueConstraint("full_name", "gender", "level", "city", name="uq_competitor_identity"),
        CheckConstraint("gender IN ('male', 'female')", name="ck_competitor_gender"),
        CheckConstraint("status IN ('not_evaluated', 'evaluated')", name="ck_competitor_status"),
    )


# ============
# Evaluation
# ============
class Evaluation(db.Model):
    __tablename__ = "evaluations"

    id = db.Column(db.Integer, primary_key=True)
    competitor_id = db.Column(
        db.Integer,
        db.ForeignKey("competitors.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    evaluator_name = db.Column(db.String(50), nullable=False)
    tanbih_count = db.Column(db.Integer, nullable=False, default=0)
    fateh_count = db.Column(db.Integer, nullable=False, default=0)
    tashkeel_count = db.Column(db.Integer, nullable=False, default=0)
    tajweed_count = db.Column(db.Integer, nullable=False, default=0)
    final_score = db.Column(db.Float, nullable=False, default=100.0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    competitor = db.relationship("Competitor", back_populates="evaluation")

    __table_args__ = (
        CheckConstraint(
            "tanbih_count >= 0 AND fateh_count >= 0 AND tashkeel_count >= 0 AND tajweed_count >= 0",
            name="ck_evaluation_counts",
        ),
        CheckConstraint("final_score >= 0", name="ck_evaluation_score"),
    )


# =========================
# ActiveEvaluation (per-level "currently judging" signal)
# =========================
class ActiveEvaluation(db.Model):
    __tablename__ = "active_evaluations"

    id = db.Column(db.Integer, primary_key=True)
    level = db.Column(db.String(120), unique=True, nullable=False)
    # plain column, not a FK: the row outlives the competitor it points at
    competitor_id = db.Column(db.Integer, nullable=True)
    competitor_name = db.Column(db.String(200), nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
