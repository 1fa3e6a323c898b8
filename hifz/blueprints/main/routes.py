from flask import Blueprint, render_template, current_app
from flask_login import login_required

from hifz.models import ActiveEvaluation, Competitor, Evaluation
from hifz.utils.levels import LEVELS
from hifz.utils.live_stats import compute_live_stats, live_snapshot

main_bp = Blueprint('main', __name__)


@main_bp.route("/")
@login_required
def index():
    """Role-aware dashboard: the tiles shown depend on can(area)."""
    stats = compute_live_stats(Competitor.query.all(), Evaluation.query.all())
    active = {row.level: row for row in ActiveEvaluation.query.all()}
    return render_template(
        "index.html",
        snapshot=live_snapshot(stats),
        levels=LEVELS,
        active=active,
        refresh_seconds=current_app.config.get("LIVE_REFRESH_SECONDS", 5),
    )
