from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from photoshare.main import create_app
from photoshare.models.database import GuestSearch
from photoshare.services.search_service import FaceMatcher, NullFaceMatcher
from helpers import make_image


def _probe(content=None, mime="image/jpeg"):
    return {"guestPhoto": ("selfie.jpg", content if content is not None else make_image(), mime)}


def test_search_logs_one_row_and_returns_no_matches(client, db, event, upload_root):
    response = client.post(f"/api/photos/search/{event['event_slug']}", files=_probe())

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["matches"] == []
    assert body["message"] == "Face recognition processing started"

    searches = db.query(GuestSearch).all()
    assert len(searches) == 1
    assert searches[0].id == body["searchId"]
    assert searches[0].event_id == event["id"]
    assert searches[0].matches_found == 0
    assert searches[0].ip_address
    assert list((upload_root / "temp").iterdir()) == []


def test_search_with_corrupt_image_still_logged_and_cleaned(client, db, event, upload_root):
    response = client.post(
        f"/api/photos/search/{event['event_slug']}",
        files=_probe(content=b"definitely not a jpeg"),
    )

    assert response.status_code == 200
    assert db.query(GuestSearch).count() == 1
    assert list((upload_root / "temp").iterdir()) == []


def test_search_unknown_or_inactive_event(client, db, event, deactivate_event, upload_root):
    assert client.post("/api/photos/search/unknown", files=_probe()).status_code == 404

    deactivate_event(event["id"])
    response = client.post(f"/api/photos/search/{event['event_slug']}", files=_probe())

    assert response.status_code == 404
    assert db.query(GuestSearch).count() == 0
    assert list((upload_root / "temp").iterdir()) == []


def test_search_without_photo(client, event):
    response = client.post(f"/api/photos/search/{event['event_slug']}")

    assert response.status_code == 400
    assert response.json() == {"error": "No photo uploaded"}


def test_search_rejects_non_image(client, db, event):
    response = client.post(
        f"/api/photos/search/{event['event_slug']}",
        files=_probe(content=b"text", mime="text/plain"),
    )

    assert response.status_code == 400
    assert db.query(GuestSearch).count() == 0


def test_null_matcher_returns_nothing(tmp_path):
    assert NullFaceMatcher().match(tmp_path / "probe.jpg", 1) == []


class RecordingMatcher(FaceMatcher):
    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.seen = []

    def match(self, probe_path: Path, event_id: int):
        self.seen.append((probe_path.exists(), event_id))
        if self.error:
            raise self.error
        return self.results


@pytest.fixture
def matcher_client(settings):
    def _build(matcher):
        return TestClient(create_app(settings, matcher=matcher))
    return _build


def test_search_uses_pluggable_matcher(matcher_client, upload_root_for):
    matcher = RecordingMatcher(results=[(11, 0.93), (12, 0.71)])
    with matcher_client(matcher) as client:
        event_id = client.post(
            "/api/events", json={"event_name": "Kim Wedding", "event_slug": "kim-wedding"}
        ).json()["event"]["id"]

        body = client.post("/api/photos/search/kim-wedding", files=_probe()).json()

        assert body["matches"] == [
            {"photo_id": 11, "confidence": 0.93},
            {"photo_id": 12, "confidence": 0.71},
        ]
        assert matcher.seen == [(True, event_id)]
        with client.app.state.session_factory() as session:
            assert session.query(GuestSearch).one().matches_found == 2
        assert list((upload_root_for(client) / "temp").iterdir()) == []


def test_probe_removed_when_matcher_fails(matcher_client, upload_root_for):
    matcher = RecordingMatcher(error=RuntimeError("model crashed"))
    with matcher_client(matcher) as client:
        client.post("/api/events", json={"event_name": "Kim Wedding", "event_slug": "kim-wedding"})

        response = client.post("/api/photos/search/kim-wedding", files=_probe())

        assert response.status_code == 500
        assert response.json() == {"error": "Search failed"}
        assert list((upload_root_for(client) / "temp").iterdir()) == []


@pytest.fixture
def upload_root_for():
    return lambda client: client.app.state.file_service.upload_path


def test_search_with_empty_photo_is_still_logged(client, db, event, upload_root):
    response = client.post(f"/api/photos/search/{event['event_slug']}", files=_probe(content=b""))

    assert response.status_code == 200
    assert response.json()["matches"] == []
    assert db.query(GuestSearch).filter(GuestSearch.event_id == event["id"]).count() == 1
    assert list((upload_root / "temp").iterdir()) == []
