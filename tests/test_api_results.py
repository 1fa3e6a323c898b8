from hifz.utils.levels import LEVELS


def _judge(client, cid, **counts):
    resp = client.put(f"/api/competitors/{cid}/evaluation", json=counts)
    assert resp.status_code == 200
    return resp.get_json()


def test_results_sorted_by_score_desc(admin, viewer, add_competitor):
    a = add_competitor("أ")
    b = add_competitor("ب")
    c = add_competitor("ج")
    _judge(admin, a, fateh=10)     # 80
    _judge(admin, b)               # 100
    _judge(admin, c, tajweed=13)   # 93.5
    add_competitor("لم يقيم")

    body = viewer.get("/api/results").get_json()
    assert [r["full_name"] for r in body["results"]] == ["ب", "ج", "أ"]
    assert [r["band"] for r in body["results"]] == ["excellent", "very_good", "good"]
    assert body["meta"]["total"] == 3

    body = viewer.get("/api/results", query_string={"sort": "final_score", "direction": "asc"}).get_json()
    assert [r["final_score"] for r in body["results"]] == [80.0, 93.5, 100.0]

    body = viewer.get("/api/results", query_string={"band": "good"}).get_json()
    assert [r["full_name"] for r in body["results"]] == ["أ"]


def test_winners_top_three_per_level_and_gender(admin, viewer, add_competitor):
    scores = [0, 1, 2, 3]
    for i, tanbih in enumerate(scores):
        cid = add_competitor(f"m{i}", gender="male", level=LEVELS[1])
        _judge(admin, cid, tanbih=tanbih)
    fid = add_competitor("f0", gender="female", level=LEVELS[1])
    _judge(admin, fid, tanbih=5)

    winners = viewer.get("/api/results/winners").get_json()["winners"]
    assert [w["full_name"] for w in winners[LEVELS[1]]["male"]] == ["m0", "m1", "m2"]
    assert [w["full_name"] for w in winners[LEVELS[1]]["female"]] == ["f0"]
    assert winners[LEVELS[0]]["male"] == []

    only_female = viewer.get("/api/results/winners", query_string={"gender": "female"}).get_json()["winners"]
    assert list(only_female[LEVELS[1]]) == ["female"]


def test_live_snapshot(admin, viewer, add_competitor):
    ids = [add_competitor(gender="male") for _ in range(3)] + [add_competitor(gender="female")]
    for cid in ids[:2]:
        _judge(admin, cid)

    body = viewer.get("/api/live").get_json()
    assert body["stats"]["total"] == 4
    assert body["stats"]["evaluated"] == 2
    assert body["progress"] == 50
    assert body["milestone"]["key"] == "halfway"
    assert body["refresh_seconds"] == 5
    assert body["stats"]["evaluations_today"] == 2

    male = viewer.get("/api/live", query_string={"gender": "male"}).get_json()
    assert male["gender"] == "male"
    assert male["stats"]["total"] == 3
    # 2 * 3/4 = 1.5 rounds half up
    assert male["stats"]["evaluated"] == 2


def test_live_all_done(admin, viewer, add_competitor):
    cid = add_competitor()
    _judge(admin, cid)
    body = viewer.get("/api/live").get_json()
    assert body["progress"] == 100
    assert body["milestone"]["key"] == "complete"


def test_live_rejects_unknown_gender(viewer):
    assert viewer.get("/api/live", query_string={"gender": "kids"}).status_code == 400


def test_live_with_no_competitors(viewer):
    body = viewer.get("/api/live").get_json()
    assert body["progress"] == 0
    assert body["milestone"] is None
