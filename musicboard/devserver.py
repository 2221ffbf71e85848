"""
Local-only maintainer service for editing the JSON data files.

Every response is a JSON envelope: {"ok": true, "data": ...} on success,
{"ok": false, "error": "..."} otherwise. Requests are handled one at a
time, so whole-file rewrites never interleave.
"""

import json
import logging
from http.server import BaseHTTPRequestHandler, HTTPServer

import musicboard.store as store
from musicboard.config import DataFiles

logger = logging.getLogger("musicboard.devserver")

MAX_BODY_SIZE = 20 * 1024 * 1024  # 20 MB, base64 flyers included


class DevWriterServer(HTTPServer):
    allow_reuse_address = True

    def __init__(self, address: tuple[str, int], files: DataFiles):
        super().__init__(address, DevWriterHandler)
        self.files = files


class DevWriterHandler(BaseHTTPRequestHandler):
    server: DevWriterServer

    # --- Routing ---

    def do_OPTIONS(self):
        self._json_response(200, {"ok": True})

    def do_GET(self):
        files = self.server.files
        routes = {
            "/api/health": None,
            "/api/events": store.get_events,
            "/api/venues": store.get_venues,
            "/api/partners": store.get_partners,
            "/api/flyers": store.list_flyers,
        }
        if self.path not in routes:
            return self._not_found()
        fn = routes[self.path]
        if fn is None:
            return self._json_response(200, {"ok": True})
        self._run(lambda: {"ok": True, "data": fn(files)})

    def do_POST(self):
        files = self.server.files
        routes = {
            "/api/events": store.add_event,
            "/api/events/update": store.update_event,
            "/api/events/delete": store.delete_event,
            "/api/venues": store.add_venue,
            "/api/venues/add": store.add_venue,
            "/api/partners": store.add_partner,
            "/api/partners/add": store.add_partner,
        }
        if self.path != "/api/flyers/upload" and self.path not in routes:
            return self._not_found()

        body = self._read_json()
        if body is None:
            return self._json_response(400, {"ok": False, "error": "Invalid JSON"})

        if self.path == "/api/flyers/upload":
            return self._run(lambda: {"ok": True, "path": store.save_flyer(files, body)})
        fn = routes[self.path]
        self._run(lambda: {"ok": True, "data": fn(files, body)})

    # --- Helpers ---

    def _run(self, action) -> None:
        try:
            payload = action()
        except store.StoreError as exc:
            return self._json_response(400, {"ok": False, "error": str(exc)})
        except Exception:
            logger.exception("Unhandled error for %s %s", self.command, self.path)
            return self._json_response(500, {"ok": False, "error": "Internal error"})
        self._json_response(200, payload)

    def _read_json(self) -> dict | None:
        try:
            length = int(self.headers.get("Content-Length", 0))
        except ValueError:
            return None
        if length < 0 or length > MAX_BODY_SIZE:
            return None
        raw = self.rfile.read(length) if length else b""
        try:
            data = json.loads(raw.decode("utf-8") or "{}")
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None
        return data if isinstance(data, dict) else None

    def _not_found(self) -> None:
        self._json_response(404, {"ok": False, "error": "Not found"})

    def _json_response(self, status: int, data: dict) -> None:
        body = json.dumps(data).encode("utf-8")
        self.send_response(status)
        self._send_cors_headers()
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _send_cors_headers(self) -> None:
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Methods", "GET,POST,OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")

    def log_request(self, code="-", size="-"):
        logger.info("%s %s -> %s", self.command, self.path, code)

    def log_message(self, format, *args):
        logger.debug(format, *args)


def run(files: DataFiles, host: str, port: int) -> None:
    with DevWriterServer((host, port), files) as httpd:
        logger.info("Dev writer running on http://%s:%d", host, httpd.server_port)
        for label, path in (
            ("events", files.events),
            ("venues", files.venues),
            ("partners", files.partners),
            ("flyers", files.flyers),
        ):
            logger.info("  %s: %s", label, path)
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            logger.info("Dev writer stopped.")
