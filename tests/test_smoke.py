def test_health(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_empty_round_has_no_quizzes(client):
    resp = client.get("/api/v1/quizzes")
    assert resp.status_code == 200
    assert resp.json() == {"roundId": None, "length": 0}
