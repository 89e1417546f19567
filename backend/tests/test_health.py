def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_root_carries_request_id(client):
    resp = client.get("/")
    assert resp.json() == {"message": "Mongol Shop API"}
    assert len(resp.headers["X-Request-ID"]) == 8
