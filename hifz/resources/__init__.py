# hifz/resources/__init__.py
from flask_restful import Api

from .auth import (
    AuthLogin,
    AuthLogout,
    AuthChangePassword,
    UserList,
    UserItem,
    Me,
)
from .competitors import (
    CompetitorListResource,
    CompetitorItemResource,
    CompetitorBulkDeleteResource,
    CompetitorImportResource,
)
from .evaluations import (
    EvaluationQueueResource,
    EvaluationResource,
    EvaluationOpenResource,
    ActiveEvaluationListResource,
)
from .results import ResultListResource, WinnersResource
from .live import LiveStatsResource


def register_resources(api: Api) -> None:
    # Auth
    api.add_resource(AuthLogin,          "/api/auth/login")
    api.add_resource(AuthLogout,         "/api/auth/logout")
    api.add_resource(AuthChangePassword, "/api/auth/password")
    api.add_resource(Me,                 "/api/auth/me")

    # Users (admin)
    api.add_resource(UserList, "/api/users")
    api.add_resource(UserItem, "/api/users/<int:user_id>")

    # Competitors
    api.add_resource(CompetitorListResource,       "/api/competitors")
    api.add_resource(CompetitorItemResource,       "/api/competitors/<int:competitor_id>")
    api.add_resource(CompetitorBulkDeleteResource, "/api/competitors/delete")
    api.add_resource(CompetitorImportResource,     "/api/competitors/import")

    # Evaluations
    api.add_resource(EvaluationQueueResource, "/api/evaluations/competitors")
    api.add_resource(EvaluationResource,      "/api/competitors/<int:competitor_id>/evaluation")
    api.add_resource(EvaluationOpenResource,  "/api/competitors/<int:competitor_id>/evaluation/open")

    # Results
    api.add_resource(ResultListResource, "/api/results")
    api.add_resource(WinnersResource,    "/api/results/winners")

    # Live screen
    api.add_resource(LiveStatsResource,            "/api/live")
    api.add_resource(ActiveEvaluationListResource, "/api/active-evaluations")
