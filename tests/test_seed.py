def test_seed_creates_zero_records_once(client):
    resp = client.post("/api/seed/from-applications")
    assert resp.status_code == 200
    # the profile without a rollNo is skipped
    assert resp.json() == {"created": 3}

    totals = {r["rollNo"]: r["points"] for r in client.get("/api/points/all").json()}
    assert totals == {"R1": 0, "R2": 0, "R3": 0}

    resp = client.post("/api/seed/from-applications")
    assert resp.json() == {"created": 0}


def test_seed_leaves_existing_totals_alone(client):
    client.post("/api/points/add", json={"rollNo": "R1", "points": 15})

    resp = client.post("/api/seed/from-applications")
    assert resp.json() == {"created": 2}
    assert client.get("/api/points/roll/R1").json()["points"] == 15
    assert client.get("/api/points/roll/R3").json()["points"] == 0
