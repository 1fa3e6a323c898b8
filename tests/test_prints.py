from hifz.utils.levels import LEVELS


def test_print_competitors_applies_filters(admin, add_competitor):
    add_competitor("سالم", gender="male")
    add_competitor("مريم", gender="female")
    html = admin.get("/print/competitors", query_string={"gender": "female"}).get_data(as_text=True)
    assert "window.print()" in html
    assert "مريم" in html
    assert "سالم" not in html
    assert "أنثى" in html


def test_print_results_shows_breakdown(admin, add_competitor):
    cid = add_competitor("سالم", level=LEVELS[3], mobile="96812345")
    admin.put(f"/api/competitors/{cid}/evaluation", json={"fateh": 3})
    resp = admin.get("/print/results")
    assert resp.status_code == 200
    html = resp.get_data(as_text=True)
    assert "سالم" in html
    assert "band-very_good" in html
    assert "3 (-6)" in html
    assert "96812345" in html


def test_certificates_one_page_per_result(admin, add_competitor):
    ids = []
    for name in ("سالم", "مريم"):
        cid = add_competitor(name)
        body = admin.put(f"/api/competitors/{cid}/evaluation", json={"tajweed": 2}).get_json()
        ids.append(body["evaluation"]["id"])

    html = admin.get("/print/certificates", query_string={"ids": ",".join(map(str, ids))}).get_data(as_text=True)
    assert html.count('class="certificate') == 2
    assert "99.0" in html
    assert "score-green" in html


def test_certificates_need_ids(admin):
    assert admin.get("/print/certificates").status_code == 400
    assert admin.get("/print/certificates", query_string={"ids": "77"}).status_code == 404


def test_print_winners_groups_by_level_and_gender(admin, add_competitor):
    for name, tanbih in (("سالم", 0), ("خالد", 2), ("ناصر", 4), ("يوسف", 6)):
        cid = add_competitor(name, gender="male", level=LEVELS[1])
        admin.put(f"/api/competitors/{cid}/evaluation", json={"tanbih": tanbih})
    fid = add_competitor("مريم", gender="female", level=LEVELS[1], mobile="96855555")
    admin.put(f"/api/competitors/{fid}/evaluation", json={"fateh": 1})

    resp = admin.get("/print/winners")
    assert resp.status_code == 200
    html = resp.get_data(as_text=True)
    assert "window.print()" in html
    assert html.count('class="level"') == len(LEVELS)
    assert html.index("سالم") < html.index("خالد") < html.index("ناصر")
    assert "يوسف" not in html
    assert "96855555" in html
    assert "لا يوجد فائزات" in html

    html = admin.get("/print/winners", query_string={"gender": "female"}).get_data(as_text=True)
    assert "مريم" in html
    assert "سالم" not in html
    assert "gender-male" not in html


def test_print_winners_rejects_unknown_gender(viewer):
    assert viewer.get("/print/winners", query_string={"gender": "kids"}).status_code == 400


def test_prints_require_login(client):
    resp = client.get("/print/results")
    assert resp.status_code == 302
