# hifz/blueprints/auth/routes.py
from flask import Blueprint, render_template, request, redirect, url_for, flash
from flask_login import login_required, current_user, login_user, logout_user

from hifz.extensions import db
from hifz.models import User
from hifz.utils.frontend_api import api_json


auth_bp = Blueprint("auth", __name__)


def _safe_next(target: str | None) -> str | None:
    # only same-site relative paths
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return None


@auth_bp.route("/login", methods=["GET", "POST"])
def login():  # endpoint: auth.login
    if current_user.is_authenticated:
        return redirect(url_for("main.index"))

    if request.method == "POST":
        username = (request.form.get("username") or "").strip()
        password = request.form.get("password") or ""

        resp, payload = api_json(
            "POST",
            "/api/auth/login",
            json={"username": username, "password": password},
        )

        if resp.status_code == 200:
            user_info = payload.get("user") or {}
            user_obj = db.session.get(User, user_info["id"]) if user_info.get("id") else None
            if user_obj:
                login_user(user_obj)
            flash("تم تسجيل الدخول", "success")
            return redirect(_safe_next(request.args.get("next")) or url_for("main.index"))

        flash(payload.get("error") or "اسم المستخدم أو كلمة المرور غير صحيحة", "warning")

    return render_template("login.html")


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():  # endpoint: auth.logout
    api_json("POST", "/api/auth/logout")
    logout_user()
    flash("تم تسجيل الخروج", "success")
    return redirect(url_for("auth.login"))


@auth_bp.route("/change_password", methods=["GET", "POST"])
@login_required
def change_password():
    if request.method == "POST":
        resp, payload = api_json(
            "POST",
            "/api/auth/password",
            json={
                "current_password": request.form.get("current_password") or "",
                "new_password": request.form.get("new_password") or "",
                "confirm_password": request.form.get("confirm_password") or "",
            },
        )

        if resp.status_code == 200:
            flash("تم تغيير كلمة المرور", "success")
            return redirect(url_for("main.index"))

        flash(payload.get("error") or "Could not change password.", "warning")

    return render_template("change_password.html")
