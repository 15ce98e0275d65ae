import pytest

from photoshare.client import PhotoShareClient, PhotoShareClientError


class FakeResponse:
    def __init__(self, status_code, payload, reason="OK"):
        self.status_code = status_code
        self._payload = payload
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.responses.pop(0)


def test_login_stores_token_for_later_requests():
    session = FakeSession(
        FakeResponse(200, {"success": True, "token": "abc", "admin": {"id": 1}}),
        FakeResponse(200, {"admin": {"id": 1, "username": "admin"}}),
    )
    client = PhotoShareClient("http://localhost:5000/", session=session)

    client.login("admin", "secret")
    profile = client.get_profile()

    assert profile["username"] == "admin"
    method, url, kwargs = session.calls[1]
    assert (method, url) == ("GET", "http://localhost:5000/api/admin/profile")
    assert kwargs["headers"] == {"Authorization": "Bearer abc"}
    assert kwargs["timeout"] == 30


def test_error_response_raises_with_message():
    session = FakeSession(FakeResponse(404, {"error": "Event not found"}, reason="Not Found"))
    client = PhotoShareClient("http://api", session=session)

    with pytest.raises(PhotoShareClientError) as exc:
        client.get_event("missing")

    assert exc.value.status_code == 404
    assert exc.value.message == "Event not found"


def test_unauthorized_clears_token():
    session = FakeSession(FakeResponse(401, None, reason="Unauthorized"))
    client = PhotoShareClient("http://api", token="stale", session=session)

    with pytest.raises(PhotoShareClientError) as exc:
        client.get_profile()

    assert exc.value.message == "Unauthorized"
    assert client.token is None


def test_upload_sends_every_file_under_photos_field(tmp_path):
    paths = []
    for name in ("one.jpg", "two.png"):
        path = tmp_path / name
        path.write_bytes(b"data")
        paths.append(path)
    session = FakeSession(FakeResponse(201, {"photos": [], "uploadBatch": "batch-1"}))

    PhotoShareClient("http://api", session=session).upload_photos(3, paths)

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", "http://api/api/photos/upload/3")
    assert [(field, part[0], part[2]) for field, part in kwargs["files"]] == [
        ("photos", "one.jpg", "image/jpeg"),
        ("photos", "two.png", "image/png"),
    ]


def test_event_photos_query_params():
    session = FakeSession(FakeResponse(200, {"photos": [], "pagination": {}}))

    PhotoShareClient("http://api", session=session).get_event_photos(1, status="ready", limit=10)

    assert session.calls[0][2]["params"] == {"limit": 10, "offset": 0, "status": "ready"}
