import pytest

from hifz.utils.perms import can_access


@pytest.mark.parametrize("role, area, allowed", [
    ("admin", "register", True),
    ("admin", "delete", True),
    ("evaluator", "register", False),
    ("evaluator", "delete", False),
    ("evaluator", "competitors", True),
    ("evaluator", "evaluate", True),
    ("viewer", "evaluate", False),
    ("viewer", "competitors", False),
    ("viewer", "results", True),
    ("viewer", "live", True),
    ("Admin ", "users", True),
    (None, "live", False),
])
def test_can_access(role, area, allowed):
    assert can_access(role, area) is allowed


def test_unknown_area_is_an_error():
    with pytest.raises(KeyError):
        can_access("admin", "billing")


def test_rest_gates(viewer, evaluator, add_competitor):
    cid = add_competitor()
    assert viewer.get("/api/competitors").status_code == 403
    assert viewer.get("/api/results").status_code == 200
    assert viewer.get("/api/live").status_code == 200
    assert viewer.put(f"/api/competitors/{cid}/evaluation", json={}).status_code == 403
    assert evaluator.get("/api/competitors").status_code == 200
    assert evaluator.post("/api/competitors/import", json={"csv": "x"}).status_code == 403
    assert evaluator.post("/api/competitors/delete", json={"mode": "all", "confirm": "9999"}).status_code == 403


def test_anonymous_gets_401_json(client):
    resp = client.get("/api/results")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "unauthorized"}


def test_html_forbidden_page(viewer):
    resp = viewer.get("/print/competitors")
    assert resp.status_code == 403
