"""Tests for root and health endpoints"""


def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["message"] == "AI Resume Analyzer"


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
