# File: tests/test_api.py
import json

import pytest
from fastapi.testclient import TestClient

from app.main import app


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


def _events(response) -> list:
    """Decode an SSE body into event dicts."""
    return [
        json.loads(line[len("data: "):])
        for line in response.text.splitlines()
        if line.startswith("data: ")
    ]


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_compare_streams_progress_then_result(client):
    body = {
        "file1": {"https://old.example.com/a/": ["/x", "/y"], "/a#top": ["/w"]},
        "file2": {"https://new.example.com/a": ["/x", "/n"]},
    }

    response = client.post("/compare", json=body)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")

    events = _events(response)
    progress = [e for e in events if e["type"] == "progress"]
    fractions = [e["fraction"] for e in progress]
    assert fractions == sorted(fractions)
    assert progress[-1]["progress"] == 100

    assert events[-1]["type"] == "result"
    data = events[-1]["data"]
    assert data["differences"] == {"a": {"missing": ["w", "y"], "extra": ["n"], "redirected": []}}
    assert data["summary"]["missing_count"] == 2
    assert data["oldSite"] == body["file1"]
    assert data["newSite"] == body["file2"]


def test_compare_reports_validation_error(client):
    response = client.post("/compare", json={"file1": {"/a": "oops"}, "file2": {"/a": ["/x"]}})

    events = _events(response)
    assert events[-1]["type"] == "error"
    assert "'/a'" in events[-1]["message"]
    assert events[-1]["context"] == "site=old page=/a"
    assert not [e for e in events if e["type"] == "result"]


def test_compare_reports_empty_new_sitemap(client):
    events = _events(client.post("/compare", json={"file1": {"/a": ["/x"]}, "file2": {}}))

    assert events[-1]["type"] == "error"
    assert events[-1]["context"] == "site=new"


def test_export_json_report(client):
    differences = {
        "a": {"missing": ["y"], "extra": [], "redirected": []},
        "b": {"missing": [], "extra": ["n"], "redirected": []},
    }

    response = client.post("/export", data={"differences": json.dumps(differences)})

    assert response.status_code == 200
    assert "missing_links.json" in response.headers["content-disposition"]
    assert response.json() == {"a": ["y"]}


def test_export_csv_report(client):
    differences = {"a": {"missing": ["y", "z"]}, "b": {"missing": ["q"]}}

    response = client.post("/export", data={"differences": json.dumps(differences), "format": "csv"})

    assert response.status_code == 200
    lines = response.text.strip().splitlines()
    assert lines[0] == "Page,Missing Link"
    assert lines[1:] == ["a,y", "a,z", "b,q"]


@pytest.mark.parametrize(
    "form, message",
    [
        ({"differences": "{not json"}, "Invalid JSON data"),
        ({"differences": json.dumps({"a": {"missing": []}})}, "No missing links"),
        ({"differences": json.dumps({"a": {"missing": ["y"]}}), "format": "pdf"}, "Unknown format"),
        ({"differences": json.dumps(["a"])}, "must be an object"),
    ],
)
def test_export_rejects_bad_input(client, form, message):
    response = client.post("/export", data=form)

    assert response.status_code == 400
    assert message in response.json()["error"]
