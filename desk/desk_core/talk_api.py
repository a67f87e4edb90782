"""
HeronixTalkApiClient — the messaging server, reduced to what the shell uses:
login/logout, session validation, presence heartbeat and health.
"""

import platform

from .config import log
from .api import ApiClient, ApiError
from .constants import DESK_VERSION, HEALTH_TIMEOUT


class HeronixTalkApiClient(ApiClient):
    name = "Talk server"
    health_path = "/api/system/health"

    def __init__(self, base_url, token=None, fallback_urls=()):
        super().__init__(base_url, token)
        self.fallback_urls = [u.strip().rstrip("/") for u in fallback_urls if u and u.strip()]
        self.current_user = None

    def _headers(self):
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["X-Session-Token"] = self.token
        return headers

    def authenticate(self, username, password) -> bool:
        """
        Log in on the primary URL. Fallback URLs are tried only when a server
        cannot be reached; any HTTP answer other than success ends the attempt.
        """
        body = {
            "username": username,
            "password": password,
            "clientType": "heronix-teacher",
            "clientVersion": DESK_VERSION,
            "deviceName": platform.system(),
            "rememberMe": True,
        }
        primary = self.base_url
        for url in [primary] + self.fallback_urls:
            self.base_url = url
            try:
                data = self._post_json("/api/auth/login", body) or {}
            except ApiError as e:
                if e.status is not None:
                    log.warning("Talk authentication failed via %s: %s", url, e)
                    self.base_url = primary
                    return False
                log.debug("Talk login via %s failed: %s", url, e)
                continue
            if not data.get("success") or not data.get("sessionToken"):
                # Credentials were rejected, another server will not disagree.
                log.warning("Talk authentication failed: %s", data.get("message"))
                self.base_url = primary
                return False
            self.token = data["sessionToken"]
            self.current_user = data.get("user")
            if url != primary:
                log.info("Talk authentication successful via fallback %s", url)
            else:
                log.info("Talk authentication successful for %s", username)
            return True
        self.base_url = primary
        log.warning("Talk server unreachable on all configured URLs")
        return False

    def logout(self):
        if not self.token:
            return
        try:
            self._request("POST", "/api/auth/logout", timeout=HEALTH_TIMEOUT)
            log.info("Talk logout successful")
        except ApiError as e:
            log.warning("Talk logout error: %s", e)
        finally:
            self.token = None
            self.current_user = None

    def validate_session(self) -> bool:
        if not self.token:
            return False
        try:
            self._request("GET", "/api/auth/validate", ok=(200,))
            return True
        except ApiError as e:
            log.debug("Talk session validation failed: %s", e)
            return False

    def send_heartbeat(self):
        """Presence ping. Best effort, never raises."""
        if not self.token:
            return
        try:
            self._request("POST", "/api/presence/heartbeat", timeout=HEALTH_TIMEOUT)
        except ApiError as e:
            log.debug("Talk heartbeat failed: %s", e)
