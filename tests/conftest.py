import pytest
from fastapi.testclient import TestClient

from photoshare.config.settings import Settings
from photoshare.main import create_app
from photoshare.models.database import Event


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        upload_path=str(tmp_path / "uploads"),
        jwt_secret="test-secret",
        log_level="WARNING",
        _env_file=None,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(app, client):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def upload_root(app):
    return app.state.file_service.upload_path


@pytest.fixture
def admin(app, client):
    with app.state.session_factory() as session:
        created = app.state.auth_service.create_admin(
            session, "admin", "admin123", email="admin@example.com"
        )
        return {"id": created.id, "username": created.username, "password": "admin123"}


@pytest.fixture
def auth_headers(client, admin):
    response = client.post(
        "/api/admin/login",
        json={"username": admin["username"], "password": admin["password"]},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def event(client):
    response = client.post(
        "/api/events",
        json={"event_name": "Smith & Johnson Wedding", "event_slug": "smith-johnson-wedding"},
    )
    assert response.status_code == 201
    return response.json()["event"]


@pytest.fixture
def deactivate_event(app, client):
    def _deactivate(event_id: int):
        with app.state.session_factory() as session:
            session.get(Event, event_id).is_active = False
            session.commit()
    return _deactivate
