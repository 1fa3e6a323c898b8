# hifz/utils/rest_auth.py
from flask import current_app
from flask_login import current_user
from functools import wraps

from hifz.utils.perms import can_access

def json_login_required(fn):
    """Like @login_required but returns JSON 401 instead of redirect."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            return {"error": "unauthorized"}, 401
        return fn(*args, **kwargs)
    return wrapper

def json_area_required(area: str):
    """Role gate for REST: JSON 401/403 on failure."""
    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                return {"error": "unauthorized"}, 401
            role = getattr(current_user, "role", None)
            if not can_access(role, area):
                current_app.logger.debug("[json_area_required] role=%r denied area=%r", role, area)
                return {"error": "forbidden", "area": area}, 403
            return fn(*args, **kwargs)
        return wrapper
    return deco
