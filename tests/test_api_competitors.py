import io

from hifz.extensions import db
from hifz.models import Competitor, Evaluation
from hifz.utils.levels import LEVELS

HEADER = "full_name,gender,level,city,mobile"


def _payload(**kw):
    data = {"full_name": "سالم أحمد", "gender": "male", "level": LEVELS[0],
            "city": "مسقط", "mobile": "91234567"}
    data.update(kw)
    return data


# ---------- registration ----------

def test_register_competitor(admin):
    resp = admin.post("/api/competitors", json=_payload(full_name="  سالم أحمد "))
    assert resp.status_code == 201
    body = resp.get_json()["competitor"]
    assert body["full_name"] == "سالم أحمد"
    assert body["status"] == "not_evaluated"


def test_duplicate_key_ignores_mobile(admin):
    assert admin.post("/api/competitors", json=_payload()).status_code == 201
    resp = admin.post("/api/competitors", json=_payload(mobile="99999999"))
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "duplicate"
    # a different city is a different competitor
    assert admin.post("/api/competitors", json=_payload(city="صحار")).status_code == 201


def test_register_validation(admin):
    assert admin.post("/api/competitors", json=_payload(mobile="12ab5678")).status_code == 400
    assert admin.post("/api/competitors", json=_payload(level="level 9")).status_code == 400
    assert admin.post("/api/competitors", json=_payload(gender="x")).status_code == 400
    resp = admin.post("/api/competitors", json=_payload(city=""))
    assert resp.get_json()["error"] == "validation_error"


def test_non_string_fields_are_validated_not_crashed(admin, add_competitor):
    resp = admin.post("/api/competitors", json=_payload(gender=1))
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_error"
    assert admin.post("/api/competitors", json=_payload(mobile=96812345)).status_code == 201

    cid = add_competitor()
    resp = admin.patch(f"/api/competitors/{cid}", json={"level": ["x"]})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_error"


def test_evaluator_cannot_register(evaluator):
    assert evaluator.post("/api/competitors", json=_payload()).status_code == 403


# ---------- listing ----------

def test_list_search_filter_and_sort(admin, add_competitor):
    add_competitor("محمد علي", gender="male", city="صحار")
    add_competitor("فاطمة سالم", gender="female", city="مسقط")
    add_competitor("علي محمد حسن", gender="male", city="نزوى")

    body = admin.get("/api/competitors").get_json()
    assert body["meta"]["total"] == 3
    assert body["meta"]["page_buttons"] == []
    assert [c["full_name"] for c in body["competitors"]] == sorted(c["full_name"] for c in body["competitors"])

    body = admin.get("/api/competitors", query_string={"q": "محمد علي"}).get_json()
    assert {c["full_name"] for c in body["competitors"]} == {"محمد علي", "علي محمد حسن"}

    body = admin.get("/api/competitors", query_string={"gender": "female"}).get_json()
    assert [c["full_name"] for c in body["competitors"]] == ["فاطمة سالم"]

    body = admin.get("/api/competitors", query_string={"sort": "city", "direction": "desc"}).get_json()
    assert [c["city"] for c in body["competitors"]] == ["نزوى", "مسقط", "صحار"]


def test_list_rejects_bad_sort(admin):
    resp = admin.get("/api/competitors", query_string={"sort": "mobile"})
    assert resp.status_code == 400


def test_list_paginates(admin, app):
    with app.app_context():
        for i in range(120):
            db.session.add(Competitor(full_name=f"n{i:03d}", gender="male", level=LEVELS[0],
                                      city="c", mobile="91234567"))
        db.session.commit()
    body = admin.get("/api/competitors", query_string={"page": 3}).get_json()
    assert body["meta"]["total_pages"] == 3
    assert len(body["competitors"]) == 20
    body = admin.get("/api/competitors", query_string={"page": 99}).get_json()
    assert body["meta"]["page"] == 3


# ---------- editing ----------

def test_patch_rechecks_duplicate(admin, add_competitor):
    add_competitor("أ", city="مسقط")
    cid = add_competitor("ب", city="مسقط")
    resp = admin.patch(f"/api/competitors/{cid}", json={"full_name": "أ"})
    assert resp.status_code == 409
    resp = admin.patch(f"/api/competitors/{cid}", json={"city": "صور"})
    assert resp.status_code == 200
    assert resp.get_json()["competitor"]["city"] == "صور"


def test_get_missing_competitor(admin):
    assert admin.get("/api/competitors/999").status_code == 404


# ---------- deletion ----------

def test_delete_requires_confirmation(admin, add_competitor, app):
    cid = add_competitor()
    resp = admin.delete(f"/api/competitors/{cid}", json={"confirm": "1234"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "invalid_confirmation"
    assert admin.delete(f"/api/competitors/{cid}", json={"confirm": "9999"}).status_code == 200
    with app.app_context():
        assert db.session.get(Competitor, cid) is None


def test_delete_cascades_to_evaluation(admin, add_competitor, app):
    cid = add_competitor()
    admin.put(f"/api/competitors/{cid}/evaluation", json={"tanbih": 1})
    admin.delete(f"/api/competitors/{cid}", json={"confirm": "9999"})
    with app.app_context():
        assert Evaluation.query.count() == 0


def test_bulk_delete_modes(admin, add_competitor, app):
    ids = [add_competitor() for _ in range(4)]

    resp = admin.post("/api/competitors/delete", json={"mode": "selected", "ids": ids[:2], "confirm": "9999"})
    assert resp.get_json()["summary"] == {"requested": 2, "deleted": 2, "failed": 0}

    resp = admin.post("/api/competitors/delete", json={"mode": "selected", "ids": [], "confirm": "9999"})
    assert resp.status_code == 400

    resp = admin.post("/api/competitors/delete", json={"mode": "single", "ids": [12345], "confirm": "9999"})
    body = resp.get_json()
    assert body["ok"] is False
    assert body["failed_ids"] == [12345]

    resp = admin.post("/api/competitors/delete", json={"mode": "all", "confirm": "9999"})
    assert resp.get_json()["summary"]["deleted"] == 2
    with app.app_context():
        assert Competitor.query.count() == 0


def test_bulk_delete_wrong_secret(admin, add_competitor):
    add_competitor()
    resp = admin.post("/api/competitors/delete", json={"mode": "all", "confirm": "0000"})
    assert resp.status_code == 400


# ---------- import ----------

def test_import_end_to_end(admin, app):
    csv_text = "\n".join([
        HEADER,
        f"أحمد,أنثى,{LEVELS[0]},مسقط,91234567",
        f"خالد,x,{LEVELS[0]},مسقط,91234567",
        f"أحمد,أنثى,{LEVELS[0]},مسقط,99999999",
    ])
    resp = admin.post("/api/competitors/import", json={"csv": csv_text})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["stats"] == {"success": 1, "skipped": 1, "errors": 1}
    assert body["errors"] == [{"row": 3, "name": "خالد", "reason": "الجنس غير صحيح: x"}]
    with app.app_context():
        assert Competitor.query.count() == 1


def test_import_skips_rows_already_stored(admin, add_competitor):
    add_competitor("أحمد", gender="female", level=LEVELS[0], city="مسقط")
    csv_text = f"{HEADER}\nأحمد,f,{LEVELS[0]},مسقط,90000000\nسعيد,m,غير معروف,صور,90000001\n"
    body = admin.post("/api/competitors/import", json={"csv": csv_text}).get_json()
    assert body["stats"] == {"success": 1, "skipped": 1, "errors": 0}


def test_import_unknown_level_defaults_to_fifth(admin, app):
    csv_text = f"{HEADER}\nسعيد,m,غير معروف,صور,90000001"
    admin.post("/api/competitors/import", json={"csv": csv_text})
    with app.app_context():
        assert Competitor.query.one().level == LEVELS[4]


def test_import_multipart_upload(admin):
    data = f"{HEADER}\nسعيد,ذكر,{LEVELS[1]},صور,90000001\n".encode("utf-8")
    resp = admin.post(
        "/api/competitors/import",
        data={"file": (io.BytesIO(data), "competitors.csv")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    assert resp.get_json()["stats"]["success"] == 1


def test_import_empty_file_rejected(admin):
    resp = admin.post("/api/competitors/import", json={"csv": HEADER + "\n"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_error"
