"""
Client for the local dev writer service.

Usage:
    client = DevWriterClient("http://localhost:8787")
    events, venues, partners = client.fetch_all()
    client.add_event({"title": "...", "date": "2025-03-01", "time": "7 PM", "venueId": "tower"})
"""

import base64
from pathlib import Path

import requests

from musicboard.config import DEFAULT_DEV_PORT


class DevWriterError(Exception):
    """The dev writer answered with {"ok": false}."""


class DevWriterClient:
    def __init__(self, base_url: str = f"http://localhost:{DEFAULT_DEV_PORT}", timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()

    def _request(self, method: str, path: str, payload: dict | None = None) -> dict:
        resp = self.session.request(
            method, self.base_url + path, json=payload, timeout=self.timeout,
        )
        try:
            out = resp.json()
        except ValueError:
            resp.raise_for_status()
            raise DevWriterError(f"Non-JSON response from {path}") from None
        if not out.get("ok"):
            raise DevWriterError(out.get("error") or f"Request to {path} failed ({resp.status_code})")
        return out

    def _get(self, path: str):
        return self._request("GET", path).get("data")

    def _post(self, path: str, payload: dict):
        return self._request("POST", path, payload).get("data")

    def health(self) -> bool:
        return bool(self._request("GET", "/api/health").get("ok"))

    def fetch_all(self) -> tuple[list, list, list]:
        return self._get("/api/events"), self._get("/api/venues"), self._get("/api/partners")

    def add_event(self, event: dict) -> list:
        return self._post("/api/events", event)

    def update_event(self, event: dict) -> list:
        return self._post("/api/events/update", event)

    def delete_event(self, event_id: str) -> list:
        return self._post("/api/events/delete", {"id": event_id})

    def add_venue(self, venue_id: str, name: str, link: str) -> list:
        return self._post("/api/venues", {"id": venue_id, "name": name, "link": link})

    def add_partner(self, partner_id: str, name: str, link: str) -> list:
        return self._post("/api/partners", {"id": partner_id, "name": name, "link": link})

    def list_flyers(self) -> list[str]:
        return self._get("/api/flyers")

    def upload_flyer(self, path: Path) -> str:
        """Upload a local image file. Returns its public path, e.g. '/flyers/show.png'."""
        payload = {
            "filename": path.name,
            "dataBase64": base64.b64encode(path.read_bytes()).decode("ascii"),
        }
        return self._request("POST", "/api/flyers/upload", payload)["path"]
