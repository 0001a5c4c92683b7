"""Tests for job history routes and storage.jobs."""

from unittest.mock import AsyncMock, patch

from conftest import make_image

from config import settings
from exceptions import BackpressureError, TranscodeError
from storage.jobs import job_store
from transcoders.image import image_transcoder
from utils.concurrency import transcode_gate


def _compress(client, headers, name="a.png"):
    resp = client.post(
        "/compress-image",
        files={"file": (name, make_image("PNG"), "image/png")},
        headers=headers,
    )
    assert resp.status_code == 200
    return resp.json()


def test_get_own_job(client, auth_headers):
    created = _compress(client, auth_headers)
    resp = client.get(f"/jobs/{created['job_id']}", headers=auth_headers)
    assert resp.status_code == 200
    job = resp.json()
    assert job["status"] == "completed"
    assert job["type"] == "image-compress"
    assert job["input_name"] == "a.png"
    assert job["output_path"] == created["download_url"]
    assert job["compressed_size"] == created["compressed_size"]


def test_other_clients_job_is_404(client, auth_headers, other_headers):
    created = _compress(client, auth_headers)
    resp = client.get(f"/jobs/{created['job_id']}", headers=other_headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


def test_my_jobs_newest_first(client, auth_headers, other_headers):
    _compress(client, auth_headers, "first.png")
    _compress(client, auth_headers, "second.png")
    _compress(client, other_headers, "theirs.png")

    resp = client.get("/my-jobs", headers=auth_headers)
    assert resp.status_code == 200
    names = [j["input_name"] for j in resp.json()]
    assert names == ["second.png", "first.png"]


def test_my_jobs_limit(client, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "job_history_limit", 2)
    for i in range(3):
        _compress(client, auth_headers, f"{i}.png")
    assert len(client.get("/my-jobs", headers=auth_headers).json()) == 2


def test_clear_history(client, auth_headers, other_headers):
    _compress(client, auth_headers)
    _compress(client, other_headers)

    resp = client.delete("/clear-history", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["removed"] == 1
    assert client.get("/my-jobs", headers=auth_headers).json() == []
    assert len(client.get("/my-jobs", headers=other_headers).json()) == 1


def test_jobs_require_auth(client):
    assert client.get("/my-jobs").status_code == 401


def test_failed_transcode_marks_job_failed(client, auth_headers):
    with patch.object(
        image_transcoder, "transcode", AsyncMock(side_effect=TranscodeError("boom"))
    ):
        resp = client.post(
            "/compress-image",
            files={"file": ("a.png", make_image("PNG"), "image/png")},
            headers=auth_headers,
        )
    assert resp.status_code == 422
    jobs = job_store.recent(10)
    assert len(jobs) == 1
    assert jobs[0].status == "failed"


def test_full_queue_marks_job_failed(client, auth_headers):
    with patch.object(
        transcode_gate,
        "acquire",
        AsyncMock(side_effect=BackpressureError("Transcode queue full", retry_after=5)),
    ):
        resp = client.post(
            "/compress-image",
            files={"file": ("a.png", make_image("PNG"), "image/png")},
            headers=auth_headers,
        )
    assert resp.status_code == 503
    assert resp.json()["retry_after"] == 5

    jobs = client.get("/my-jobs", headers=auth_headers).json()
    assert [(j["status"], j["type"]) for j in jobs] == [("failed", "image-compress")]
