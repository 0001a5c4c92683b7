"""Tests for /health endpoint and check_codecs utility."""

from unittest.mock import patch

from routers.health import check_codecs


def test_check_codecs_reports_all_formats():
    results = check_codecs()
    for name in ("jpeg", "png", "webp", "tiff", "avif", "pypdf"):
        assert name in results
    assert results["jpeg"] is True
    assert results["png"] is True
    assert results["pypdf"] is True


def test_check_codecs_missing_feature():
    with patch("routers.health.features.check", return_value=False):
        results = check_codecs()
    assert results["webp"] is False
    assert results["pypdf"] is True


def test_health_endpoint_ok(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] in ("ok", "degraded")
    assert "codecs" in data
    assert data["version"] == "0.1.0"


def test_health_endpoint_degraded(client):
    with patch("routers.health.check_codecs", return_value={"jpeg": True, "avif": False}):
        resp = client.get("/health")
    assert resp.json()["status"] == "degraded"


def test_health_endpoint_all_ok(client):
    with patch("routers.health.check_codecs", return_value={"jpeg": True, "pypdf": True}):
        resp = client.get("/health")
    assert resp.json()["status"] == "ok"
