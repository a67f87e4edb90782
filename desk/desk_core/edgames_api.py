"""
EdGamesApiClient — the Ed-Games server's device management endpoints.

Approve/reject/revoke return bool; the caller shows the outcome and
re-fetches the lists. Reads raise ApiError.
"""

from .config import log
from .api import ApiClient, ApiError
from .constants import PING_TIMEOUT, DEVICE_PENDING, DEVICE_APPROVED
from .models import DeviceRegistration, DeviceStats


class EdGamesApiClient(ApiClient):
    name = "Ed-Games server"
    health_path = "/api/ping"
    health_timeout = PING_TIMEOUT

    def authenticate(self, username, password) -> bool:
        try:
            data = self._post_json("/api/teacher/login", {"username": username, "password": password}) or {}
        except ApiError as e:
            log.warning("Ed-Games authentication failed: %s", e)
            return False
        token = data.get("token")
        if not token:
            log.warning("Ed-Games authentication returned no token")
            return False
        self.token = token
        log.info("Ed-Games authentication successful")
        return True

    # ─── Lists ───────────────────────────────────────────────

    def get_pending_devices(self):
        rows = self._get_list("/api/device/management/pending")
        return [DeviceRegistration.from_payload(r, DEVICE_PENDING) for r in rows]

    def get_active_devices(self):
        rows = self._get_list("/api/device/management/active")
        return [DeviceRegistration.from_payload(r, DEVICE_APPROVED) for r in rows]

    def get_devices_by_student(self, student_id):
        rows = self._get_list(f"/api/device/management/student/{student_id}")
        return [DeviceRegistration.from_payload(r) for r in rows]

    def get_device_stats(self):
        return DeviceStats.from_payload(self._get_dict("/api/device/management/stats"))

    # ─── Transitions ─────────────────────────────────────────

    def approve_device(self, device_id, student_id) -> bool:
        ok = self._send_ok(
            "POST", f"/api/device/management/{device_id}/approve",
            body={"studentId": student_id}, what=f"Approve device {device_id}",
        )
        if ok:
            log.info("Device %s approved for student %s", device_id, student_id)
        return ok

    def reject_device(self, device_id, reason=None) -> bool:
        ok = self._send_ok(
            "POST", f"/api/device/management/{device_id}/reject",
            params={"reason": reason} if reason else None, what=f"Reject device {device_id}",
        )
        if ok:
            log.info("Device %s rejected", device_id)
        return ok

    def revoke_device(self, device_id, reason=None) -> bool:
        ok = self._send_ok(
            "POST", f"/api/device/management/{device_id}/revoke",
            params={"reason": reason} if reason else None, what=f"Revoke device {device_id}",
        )
        if ok:
            log.info("Device %s revoked", device_id)
        return ok
