from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import mimetypes

import requests
import structlog

logger = structlog.get_logger()

DEFAULT_TIMEOUT = 30  # секунд, загрузки бывают долгими

PathLike = Union[str, Path]


class PhotoShareClientError(Exception):
    """Ошибочный ответ API"""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class PhotoShareClient:
    """HTTP-клиент для API событий и фотографий"""

    def __init__(
            self,
            base_url: str,
            token: Optional[str] = None,
            timeout: float = DEFAULT_TIMEOUT,
            session: Optional[requests.Session] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api{path}"

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        response = self.session.request(
            method,
            self._url(path),
            headers=self._headers(),
            timeout=self.timeout,
            **kwargs
        )

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.status_code == 401:
            # Токен больше не действует
            self.token = None

        if not response.ok:
            message = payload.get("error") if isinstance(payload, dict) else None
            logger.warning("API request failed", method=method, path=path, status_code=response.status_code)
            raise PhotoShareClientError(response.status_code, message or response.reason)

        return payload

    @staticmethod
    def _file_part(field: str, path: PathLike):
        path = Path(path)
        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return (field, (path.name, path.read_bytes(), mime_type))

    # Auth
    def login(self, username: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/admin/login", json={"username": username, "password": password})
        self.token = data["token"]
        return data

    def get_profile(self) -> Dict[str, Any]:
        return self._request("GET", "/admin/profile")["admin"]

    # Events
    def list_events(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/events")["events"]

    def get_event(self, slug: str) -> Dict[str, Any]:
        return self._request("GET", f"/events/{slug}")["event"]

    def create_event(
            self,
            event_name: str,
            event_slug: str,
            event_date: Optional[str] = None,
            description: Optional[str] = None
    ) -> Dict[str, Any]:
        body = {
            "event_name": event_name,
            "event_slug": event_slug,
            "event_date": event_date,
            "description": description,
        }
        return self._request("POST", "/events", json=body)["event"]

    def update_event(self, event_id: int, **changes) -> Dict[str, Any]:
        return self._request("PUT", f"/events/{event_id}", json=changes)["event"]

    def delete_event(self, event_id: int) -> Dict[str, Any]:
        return self._request("DELETE", f"/events/{event_id}")

    # Photos
    def upload_photos(self, event_id: int, paths: List[PathLike]) -> Dict[str, Any]:
        files = [self._file_part("photos", p) for p in paths]
        return self._request("POST", f"/photos/upload/{event_id}", files=files)

    def get_event_photos(
            self,
            event_id: int,
            status: Optional[str] = None,
            limit: int = 50,
            offset: int = 0
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"limit": limit, "offset": offset}
        if status:
            params["status"] = status
        return self._request("GET", f"/photos/event/{event_id}", params=params)

    def search_photos(self, event_slug: str, guest_photo: PathLike) -> Dict[str, Any]:
        files = [self._file_part("guestPhoto", guest_photo)]
        return self._request("POST", f"/photos/search/{event_slug}", files=files)

    def check_health(self) -> Dict[str, Any]:
        return self._request("GET", "/health")
