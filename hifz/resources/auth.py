# hifz/resources/auth.py
from __future__ import annotations
from flask import request
from flask_restful import Resource
from flask_login import login_user, logout_user, current_user
from sqlalchemy.exc import IntegrityError

from hifz.extensions import db
from hifz.models import User
from hifz.utils.levels import ROLES, role_label
from hifz.utils.rest_auth import json_login_required, json_area_required

# ---------- helpers ----------
def _validate_new_password(username: str, pw1: str, pw2: str) -> str | None:
    if not pw1 or not pw2:
        return "Please fill in all fields."
    if pw1 != pw2:
        return "New passwords do not match."
    if len(pw1) < 8:
        return "New password must be at least 8 characters."
    if username.lower() in pw1.lower():
        return "Password should not contain your username."
    return None

def _json():
    if not request.is_json:
        return None, {"error": "Content-Type must be application/json"}, 415
    data = request.get_json(silent=True)
    if data is None:
        return None, {"error": "Malformed JSON"}, 400
    return data, None, None

def _serialize_user(u: User) -> dict:
    # the session object screens rely on: {id, username, role}
    return {"id": u.id, "username": u.username, "role": u.role, "role_label": role_label(u.role)}


# ---------- resources ----------
class AuthLogin(Resource):
    def post(self):
        data, err_resp, err_code = _json()
        if err_resp:
            return err_resp, err_code

        username = str(data.get("username") or "").strip()
        password = data.get("password") or ""
        if not username or not password:
            return {"error": "username and password required"}, 400

        user = User.query.filter_by(username=username).first()
        if not user or not user.check_password(password):
            return {"error": "اسم المستخدم أو كلمة المرور غير صحيحة"}, 401

        login_user(user)
        return {"ok": True, "user": _serialize_user(user)}, 200


class AuthLogout(Resource):
    method_decorators = [json_login_required]

    def post(self):
        logout_user()
        return {"ok": True}, 200


class AuthChangePassword(Resource):
    method_decorators = [json_login_required]

    def post(self):
        data, err_resp, err_code = _json()
        if err_resp:
            return err_resp, err_code

        cur = data.get("current_password") or ""
        new = data.get("new_password") or ""
        new2 = data.get("confirm_password") or ""

        if not current_user.check_password(cur):
            return {"error": "Current password is incorrect"}, 400

        err = _validate_new_password(current_user.username, new, new2)
        if err:
            return {"error": err}, 400

        current_user.set_password(new)
        db.session.commit()
        return {"ok": True}, 200


class UserList(Resource):
    # admin-only for creating/listing users
    method_decorators = [json_area_required("users")]

    def get(self):
        users = User.query.order_by(User.username.asc()).all()
        return {"users": [_serialize_user(u) for u in users]}, 200

    def post(self):
        """
        Create a user (admin).
        Body: { "username": "...", "password": "...", "role": "admin|evaluator|viewer" }
        """
        data, err_resp, err_code = _json()
        if err_resp:
            return err_resp, err_code

        username = str(data.get("username") or "").strip()
        password = data.get("password") or ""
        role = str(data.get("role") or "viewer").strip()

        if not username or not password or role not in ROLES:
            return {"error": "Invalid form data"}, 400
        if User.query.filter_by(username=username).first():
            return {"error": "Username already exists"}, 409

        # reuse same password rules
        err = _validate_new_password(username, password, password)
        if err:
            return {"error": err}, 400

        u = User(username=username, role=role)
        u.set_password(password)
        db.session.add(u)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            return {"error": "Username already exists"}, 409

        return {"ok": True, "user": _serialize_user(u)}, 201


class UserItem(Resource):
    # admin-only: get/patch/delete a specific user
    method_decorators = [json_area_required("users")]

    def get(self, user_id: int):
        u = db.session.get(User, user_id)
        if not u:
            return {"error": "not_found"}, 404
        return _serialize_user(u), 200

    def patch(self, user_id: int):
        """
        Update username/role and/or reset password (optional).
        Body can include: username, role (admin|evaluator|viewer),
        new_password, confirm_password
        """
        u = db.session.get(User, user_id)
        if not u:
            return {"error": "not_found"}, 404
        data, err_resp, err_code = _json()
        if err_resp:
            return err_resp, err_code

        new_username = str(data.get("username") or u.username).strip()
        new_role = str(data.get("role") or u.role).strip()

        if new_role not in ROLES:
            return {"error": "Invalid role"}, 400

        # enforce unique username if changed
        if new_username != u.username and User.query.filter_by(username=new_username).first():
            return {"error": "Username already exists"}, 409

        # the last admin cannot demote themselves out of the system
        if u.role == "admin" and new_role != "admin" and User.query.filter_by(role="admin").count() == 1:
            return {"error": "At least one admin is required"}, 400

        u.username = new_username
        u.role = new_role

        npw = data.get("new_password")
        cpw = data.get("confirm_password")
        if npw or cpw:
            err = _validate_new_password(new_username, npw or "", cpw or "")
            if err:
                return {"error": err}, 400
            u.set_password(npw)

        db.session.commit()
        return {"ok": True, "user": _serialize_user(u)}, 200

    def delete(self, user_id: int):
        u = db.session.get(User, user_id)
        if not u:
            return {"error": "not_found"}, 404
        if u.id == current_user.id:
            return {"error": "You cannot delete your own account"}, 400
        db.session.delete(u)
        db.session.commit()
        return {"ok": True}, 200


class Me(Resource):
    method_decorators = [json_login_required]

    def get(self):
        return _serialize_user(current_user), 200
