"""
HTTP tests for the Flask app using the test client.
The vision recognizer is replaced with a fake; no network calls are made.
"""

import io

import pytest

import flask_app
from docscan import runner
from docscan.ingest import MAX_UPLOAD_BYTES
from docscan.recognize import RecognitionResult


class _FakeRecognizer:
    def __init__(self, result):
        self.result = result
        self.calls = 0

    def recognize(self, image_bytes, mime_type, prompt_kind):
        self.calls += 1
        return self.result


@pytest.fixture
def client():
    flask_app.app.config["TESTING"] = True
    with flask_app.app.test_client() as client:
        yield client


@pytest.fixture
def fake_recognizer(monkeypatch):
    """Install a fake recognizer behind the runner and set a key so requests reach it."""
    monkeypatch.setenv("GROQ_API_KEY", "gsk_test")

    def _install(result):
        fake = _FakeRecognizer(result)
        monkeypatch.setattr(runner, "VisionRecognizer", lambda: fake)
        return fake

    return _install


def _file(make_image, name="page.png", mime="image/png", data=None):
    payload = data if data is not None else make_image(1300, 900)
    return (io.BytesIO(payload), name, mime)


def _post(client, path, files):
    return client.post(path, data={"image": files}, content_type="multipart/form-data")


def test_health_without_key(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "ok"
    assert body["api_key_set"] is False
    assert body["provider"] is None
    assert "auto_hydration" in body["features"]


def test_health_with_key(client, monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "gsk_test")
    body = client.get("/api/health").get_json()
    assert body["api_key_set"] is True
    assert body["provider"] == "groq"


def test_curriculum_without_file(client):
    response = client.post("/api/scan-curriculum", data={}, content_type="multipart/form-data")
    assert response.status_code == 400
    assert response.get_json() == {"success": False, "error": "No image(s) uploaded"}


@pytest.mark.parametrize("path", ["/api/scan-cor", "/api/scan-grades", "/api/scan-timetable"])
def test_single_scan_without_file(client, path):
    response = client.post(path, data={}, content_type="multipart/form-data")
    assert response.status_code == 400
    assert response.get_json()["error"] == "No image uploaded"


def test_disallowed_type(client, make_image):
    response = _post(client, "/api/scan-curriculum", [_file(make_image, "page.gif", "image/gif")])
    assert response.status_code == 400
    assert response.get_json()["error"] == "Only JPG, PNG, and WEBP images are allowed"


def test_too_many_curriculum_images(client, make_image):
    response = _post(client, "/api/scan-curriculum", [_file(make_image) for _ in range(3)])
    assert response.status_code == 400
    assert response.get_json()["success"] is False


def test_missing_api_key(client, make_image):
    response = _post(client, "/api/scan-curriculum", [_file(make_image)])
    assert response.status_code == 500
    assert response.get_json()["error"] == "GROQ_API_KEY not set. Add it to your .env file."


def test_oversized_file(client, monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "gsk_test")
    data = b"\0" * (MAX_UPLOAD_BYTES + 1)
    response = _post(client, "/api/scan-cor", [(io.BytesIO(data), "huge.png", "image/png")])
    assert response.status_code == 413
    assert response.get_json()["success"] is False


def test_curriculum_scan_returns_report(client, make_image, fake_recognizer, catalog):
    fake = fake_recognizer(RecognitionResult(
        ok=True,
        data={"subjects": [{"subjectCode": code.lower()} for code in catalog.codes]},
    ))

    response = _post(client, "/api/scan-curriculum", [_file(make_image, "p1.png"), _file(make_image, "p2.png")])

    assert response.status_code == 200
    body = response.get_json()
    assert fake.calls == 2
    assert body["success"] is True
    assert body["quality"] == "excellent"
    assert body["total_subjects_found"] == 54
    assert body["images_processed"] == 2
    assert body["validation"]["missing_courses"] == []
    assert body["image_summary"]["total_images"] == 2
    assert [r["original_file"] for r in body["image_results"]] == ["p1.png", "p2.png"]
    cs122 = next(s for s in body["subjects"] if s["subject_code"] == "CS 122")
    assert cs122["semester"] == "Summer"


def test_curriculum_scan_reports_failure_with_200(client, make_image, fake_recognizer):
    fake_recognizer(RecognitionResult(ok=False, error="Invalid API key. Check your .env file.", status_code=401))

    response = _post(client, "/api/scan-curriculum", [_file(make_image)])

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is False
    assert body["quality"] == "poor"
    assert body["image_results"][0]["validation"]["issues"] == ["Invalid API key. Check your .env file."]


def test_cor_scan(client, make_image, fake_recognizer):
    fake_recognizer(RecognitionResult(ok=True, data={
        "program": "BS Computer Science",
        "courses": [{"subjectCode": "CS 119", "subjectName": "Networks and Communications", "units": 3}],
    }))

    response = _post(client, "/api/scan-cor", [_file(make_image, "cor.jpg", "image/jpeg")])

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["total_courses_found"] == 1
    assert body["courses"][0]["subject_code"] == "CS 119"


def test_single_scan_failure_uses_recognizer_status(client, make_image, fake_recognizer):
    fake_recognizer(RecognitionResult(
        ok=False,
        error="Rate limited. Wait 1 minute and try again (max 30 req/min).",
        status_code=429,
    ))

    response = _post(client, "/api/scan-grades", [_file(make_image)])

    assert response.status_code == 429
    assert response.get_json() == {
        "success": False,
        "error": "Rate limited. Wait 1 minute and try again (max 30 req/min).",
    }


def test_single_scan_failure_without_status_is_500(client, make_image, fake_recognizer):
    fake_recognizer(RecognitionResult(ok=False, error="Could not parse AI response as JSON"))
    response = _post(client, "/api/scan-timetable", [_file(make_image)])
    assert response.status_code == 500


def test_unexpected_error_returns_json_500(client, make_image, monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "gsk_test")

    def broken(staged):
        raise OSError("disk full")

    monkeypatch.setattr(flask_app, "process_curriculum", broken)

    response = _post(client, "/api/scan-curriculum", [_file(make_image)])

    assert response.status_code == 500
    assert response.get_json() == {"success": False, "error": "disk full"}


def test_unknown_route_keeps_its_status(client):
    response = client.get("/api/nope")
    assert response.status_code == 404
    assert response.get_json()["success"] is False
