"""
Tests for the Flask API
"""

import pytest

from app import create_app
from detection.models import NormalizedSignal

from conftest import FakeEnricher


@pytest.fixture
def provider(nordvpn_signal):
    return FakeEnricher("maxmind", result=nordvpn_signal)


@pytest.fixture
def client(make_analyzer, provider):
    app = create_app(make_analyzer([provider]))
    app.config["TESTING"] = True
    return app.test_client()


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_providers(client):
    assert client.get("/api/providers").get_json() == {"maxmind": True}


def test_analyze(client):
    resp = client.post("/api/analyze", json={"ipAddress": "185.159.157.10"})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["cached"] is False
    assert body["source"] == "live"
    a = body["analysis"]
    assert a["ipAddress"] == "185.159.157.10"
    assert a["riskScore"] == 70
    assert a["threatLevel"] == "high"
    assert a["vpnProvider"] == "NordVPN"
    assert a["isVpn"] is True
    assert body["whois"]["ipAddress"] == "185.159.157.10"

    again = client.post("/api/analyze", json={"ipAddress": "185.159.157.10"}).get_json()
    assert again["cached"] is True
    assert again["analysis"]["id"] == a["id"]


def test_analyze_validation(client, provider):
    resp = client.post("/api/analyze", json={})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Validation failed"

    resp = client.post("/api/analyze", json={"ipAddress": "300.1.1.1"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid IP address"
    assert provider.calls == []


def test_bulk_analyze(client):
    resp = client.post("/api/bulk-analyze", json={"ips": ["185.159.157.10", "nope"]})
    assert resp.status_code == 200
    body = resp.get_json()
    assert [a["ipAddress"] for a in body["analyses"]] == ["185.159.157.10"]
    assert body["errors"][0]["ipAddress"] == "nope"


def test_surrounding_whitespace_rejected_by_both_endpoints(client, provider):
    resp = client.post("/api/analyze", json={"ipAddress": " 8.8.8.8"})
    assert resp.status_code == 400

    body = client.post("/api/bulk-analyze", json={"ips": [" 8.8.8.8", "1.1.1.1 "]}).get_json()
    assert body["analyses"] == []
    assert [e["ipAddress"] for e in body["errors"]] == [" 8.8.8.8", "1.1.1.1 "]
    assert provider.calls == []


def test_non_object_json_body_is_rejected(client):
    for path in ("/api/analyze", "/api/bulk-analyze"):
        resp = client.post(path, json=["8.8.8.8"])
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Validation failed"
    assert client.post("/api/analyze", json="8.8.8.8").status_code == 400


def test_bulk_analyze_validation(client):
    assert client.post("/api/bulk-analyze", json={"ips": []}).status_code == 400
    assert client.post("/api/bulk-analyze", json={"ips": "8.8.8.8"}).status_code == 400
    too_many = [f"10.0.0.{i}" for i in range(101)]
    assert client.post("/api/bulk-analyze", json={"ips": too_many}).status_code == 400


def test_list_get_delete(client):
    created = client.post("/api/analyze", json={"ipAddress": "185.159.157.10"}).get_json()
    analysis_id = created["analysis"]["id"]

    listed = client.get("/api/analyses").get_json()
    assert [a["id"] for a in listed] == [analysis_id]

    detail = client.get(f"/api/analyses/{analysis_id}").get_json()
    assert detail["analysis"]["id"] == analysis_id
    assert detail["whois"]["ipAddress"] == "185.159.157.10"

    assert client.delete(f"/api/analyses/{analysis_id}").get_json() == {"success": True}
    assert client.get(f"/api/analyses/{analysis_id}").status_code == 404
    assert client.delete(f"/api/analyses/{analysis_id}").status_code == 404


def test_stats(client):
    client.post("/api/analyze", json={"ipAddress": "185.159.157.10"})
    assert client.get("/api/stats").get_json() == {
        "totalScans": 1,
        "threatsDetected": 1,
        "cleanIps": 0,
        "vpnsDetected": 1,
    }


def test_whois(client):
    assert client.get("/api/whois/not-an-ip").status_code == 400
    assert client.get("/api/whois/8.8.8.8").get_json()["message"] == "No WHOIS data found"
    client.post("/api/analyze", json={"ipAddress": "185.159.157.10"})
    record = client.get("/api/whois/185.159.157.10").get_json()
    assert record["netRange"] == "185.159.157.0/24"


def test_dashboard(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"VPN / Proxy Detector" in resp.data


def test_mock_source_when_no_providers(make_analyzer):
    app = create_app(make_analyzer([FakeEnricher("maxmind", result=NormalizedSignal())]))
    body = app.test_client().post("/api/analyze", json={"ipAddress": "8.8.8.8"}).get_json()
    assert body["source"] == "mock"
    assert 0 <= body["analysis"]["riskScore"] <= 100
