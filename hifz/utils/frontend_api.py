# hifz/utils/frontend_api.py
"""HTML views reuse the REST resources by calling them in-process."""
from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from flask import current_app, request


def _server_name() -> str:
    if current_app.config.get("SERVER_NAME"):
        return current_app.config["SERVER_NAME"].split(":")[0]
    host = request.host.split(":")[0] if request.host else "localhost"
    return host or "localhost"


def api_request(method: str,
                path: str,
                *,
                params: Optional[Dict[str, Any]] = None,
                json: Optional[Dict[str, Any]] = None,
                data: Optional[Dict[str, Any]] = None):
    """Call an internal API endpoint carrying the browser's session cookie."""
    if not path.startswith("/"):
        path = "/" + path

    with current_app.test_client() as client:
        server_name = _server_name()
        for name, value in request.cookies.items():
            client.set_cookie(name, value, domain=server_name, path="/")

        response = client.open(
            path,
            method=method.upper(),
            query_string=params,
            json=json,
            data=data,
            follow_redirects=False,
        )
        current_app.logger.debug("internal %s %s -> %s", method.upper(), path, response.status_code)
        return response


def api_json(method: str,
             path: str,
             *,
             params: Optional[Dict[str, Any]] = None,
             json: Optional[Dict[str, Any]] = None,
             data: Optional[Dict[str, Any]] = None) -> Tuple[Any, Dict[str, Any]]:
    resp = api_request(method, path, params=params, json=json, data=data)
    payload = resp.get_json(silent=True) or {}
    return resp, payload
