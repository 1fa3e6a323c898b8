# hifz/utils/perms.py
from functools import wraps
from flask import request, redirect, url_for, abort, current_app
from flask_login import current_user

# Which roles may enter which part of the system.
AREA_ROLES = {
    "register": {"admin"},
    "delete": {"admin"},
    "users": {"admin"},
    "competitors": {"admin", "evaluator"},
    "evaluate": {"admin", "evaluator"},
    "results": {"admin", "evaluator", "viewer"},
    "live": {"admin", "evaluator", "viewer"},
}


def _norm(role) -> str:
    return (role or "").strip().lower()


def can_access(role, area: str) -> bool:
    """Pure authorization check; usable from views, resources and scripts alike."""
    allowed = AREA_ROLES.get(area)
    if allowed is None:
        raise KeyError(f"unknown area: {area}")
    return _norm(role) in allowed


def area_required(area: str):
    """
    If NOT authenticated -> redirect to login (?next=...).
    If authenticated but role not allowed -> 403.
    """
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                current_app.logger.debug(
                    "[area_required] redirect → login: endpoint=%s next=%s",
                    request.endpoint, request.url
                )
                return redirect(url_for("auth.login", next=request.url))

            user_role = _norm(getattr(current_user, "role", ""))
            ok = can_access(user_role, area)

            current_app.logger.debug(
                "[area_required] user=%r role=%r area=%r ok=%s endpoint=%s path=%s",
                getattr(current_user, "username", None),
                user_role, area, ok, request.endpoint, request.path
            )

            if not ok:
                abort(403)
            return view(*args, **kwargs)
        return wrapped
    return decorator


def inject_perms():
    """In templates: {{ can('evaluate') }}."""
    def can(area):
        if not current_user.is_authenticated:
            return False
        return can_access(getattr(current_user, "role", ""), area)

    return dict(can=can)
