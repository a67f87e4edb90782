"""
Base for the backend API clients.

All calls are blocking (run from worker threads, never from the Tk thread).
Reads raise ApiError so a caller can tell "empty" from "failed"; a failed
refresh must leave the previous snapshot on screen.
"""

import requests

from .config import log
from .constants import API_TIMEOUT, HEALTH_TIMEOUT
from . import http_client


class ApiError(Exception):
    """A backend call failed (transport error or non-2xx status)."""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


class ApiClient:
    """Shared plumbing: base URL, bearer token, JSON helpers."""

    name = "server"
    health_path = "/api/health"
    health_timeout = HEALTH_TIMEOUT

    def __init__(self, base_url, token=None):
        self.base_url = base_url.rstrip("/")
        self.token = token

    # ─── Auth ────────────────────────────────────────────────

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def set_token(self, token):
        self.token = token

    def clear_token(self):
        self.token = None

    def _headers(self):
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, path):
        return f"{self.base_url}{path}"

    # ─── Requests ────────────────────────────────────────────

    def _request(self, method, path, *, params=None, json=None, timeout=API_TIMEOUT, ok=(200, 201)):
        url = self._url(path)
        try:
            resp = http_client.http.request(
                method, url, params=params, json=json,
                headers=self._headers(), timeout=timeout,
            )
        except requests.RequestException as e:
            log.warning("%s %s network error: %s", method, path, e)
            raise ApiError(f"Cannot reach {self.name}: {e}") from e

        if resp.status_code not in ok:
            log.warning("%s %s failed: HTTP %d — %s", method, path, resp.status_code, resp.text[:200])
            raise ApiError(f"{self.name} returned {resp.status_code}", status=resp.status_code)
        return resp

    def _json(self, resp, path):
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise ApiError(f"Invalid JSON from {path}") from e

    def _get_json(self, path, params=None, timeout=API_TIMEOUT):
        return self._json(self._request("GET", path, params=params, timeout=timeout), path)

    def _get_list(self, path, params=None):
        data = self._get_json(path, params=params)
        if data is None:
            return []
        if not isinstance(data, list):
            raise ApiError(f"Expected a list from {path}")
        return data

    def _get_dict(self, path, params=None):
        data = self._get_json(path, params=params)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ApiError(f"Expected an object from {path}")
        return data

    def _post_json(self, path, body=None, params=None):
        return self._json(self._request("POST", path, params=params, json=body), path)

    def _send_ok(self, method, path, *, body=None, params=None, what="request"):
        """Fire a mutation and report success as a bool (never raises)."""
        try:
            self._request(method, path, params=params, json=body)
            return True
        except ApiError as e:
            log.warning("%s failed: %s", what, e)
            return False

    # ─── Health ──────────────────────────────────────────────

    def is_server_reachable(self) -> bool:
        try:
            resp = http_client.http.get(self._url(self.health_path), timeout=self.health_timeout)
            return resp.status_code == 200
        except requests.RequestException as e:
            log.debug("%s not reachable: %s", self.name, e)
            return False
