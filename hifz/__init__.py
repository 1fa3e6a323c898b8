# hifz/__init__.py
from flask import Flask, request, current_app, render_template
from flask_restful import Api
from flask_login import current_user
from .extensions import db, login_manager
from .resources import register_resources
from hifz.utils.levels import gender_label, status_label, role_label, level_prefix
from hifz.utils.scoring import BAND_LABELS, result_band
from .utils.perms import inject_perms
import logging
import os


def _wants_json() -> bool:
    return request.path.startswith("/api") or request.accept_mimetypes.best == "application/json"


def create_app(config_object="config.Config") -> Flask:
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_object(config_object)

    app.jinja_env.filters["gender_label"] = gender_label
    app.jinja_env.filters["status_label"] = status_label
    app.jinja_env.filters["role_label"] = role_label
    app.jinja_env.filters["level_prefix"] = level_prefix
    app.jinja_env.filters["result_band"] = result_band
    app.jinja_env.filters["band_label"] = lambda band: BAND_LABELS.get(band, band)

    os.makedirs(app.instance_path, exist_ok=True)

    if not app.config.get("SQLALCHEMY_DATABASE_URI"):
        db_path = os.path.join(app.instance_path, "hifz.db")
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{db_path}"

    # REST API
    api = Api(app)
    register_resources(api)

    # logging …
    for h in list(app.logger.handlers):
        app.logger.removeHandler(h)
    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
    app.logger.addHandler(handler)
    app.logger.setLevel(logging.DEBUG)
    logging.getLogger("werkzeug").setLevel(logging.INFO)

    @app.before_request
    def _log_req():
        app.logger.debug(
            "REQ %s %s endpoint=%s auth=%s role=%s",
            request.method, request.path, request.endpoint,
            getattr(current_user, "is_authenticated", False),
            getattr(current_user, "role", None),
        )

    db.init_app(app)
    login_manager.init_app(app)
    login_manager.login_view = "auth.login"
    login_manager.login_message = "يرجى تسجيل الدخول أولاً"
    login_manager.login_message_category = "warning"

    app.context_processor(inject_perms)

    # Ensure models are imported
    from . import models  # noqa: F401

    # ---- Blueprints (HTML) ----
    from .blueprints.auth.routes import auth_bp
    from .blueprints.main.routes import main_bp
    from .blueprints.prints.routes import prints_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(main_bp)
    app.register_blueprint(prints_bp, url_prefix="/print")

    with app.app_context():
        db.create_all()

    @app.errorhandler(403)
    def forbidden(e):
        app.logger.warning(
            "403 Forbidden at %s (endpoint=%s) auth=%s role=%s",
            request.path, request.endpoint,
            getattr(current_user, "is_authenticated", False),
            getattr(current_user, "role", None),
        )
        if _wants_json():
            return {"error": "forbidden"}, 403
        return render_template("403.html"), 403

    @app.errorhandler(404)
    def not_found(e):
        if _wants_json():
            return {"error": "not_found"}, 404
        return render_template("404.html"), 404

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    @app.get("/api")
    def api_root():
        return {
            "service": "Hifz competition API",
            "version": current_app.config.get("APP_VERSION", "v1"),
        }, 200

    @app.context_processor
    def inject_current_app():
        return dict(
            current_app=current_app,
            competition_title=current_app.config.get("COMPETITION_TITLE", ""),
        )

    return app
