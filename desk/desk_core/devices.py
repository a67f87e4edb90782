"""
Device management screen: pending / active / all registrations and stats.

Transitions are remote-authoritative. The client checks the local table,
sends the request, and on success re-fetches; on failure the lists on
screen stay exactly as they were.
"""

from datetime import datetime

from .config import log
from .constants import (
    DEVICE_APPROVED, DEVICE_REJECTED, DEVICE_REVOKED, DEVICE_STATUS_FILTERS,
    DEFAULT_REJECT_REASON, DEFAULT_REVOKE_REASON,
)
from .controller import ViewController
from .models import DeviceStats, can_transition_device
from .validation import clean_student_id


class DeviceManagementController(ViewController):

    status_filters = DEVICE_STATUS_FILTERS

    def __init__(self, edgames_api, runner):
        super().__init__(runner)
        self._api = edgames_api
        self.pending = []
        self.active = []
        self.all_devices = []
        self.stats = DeviceStats()
        self.server_online = None
        self.search_text = ""
        self.status_filter = "All"

    # ─── Refresh ─────────────────────────────────────────────

    def refresh_devices(self):
        self.status_message = "Refreshing devices..."
        self._changed()

        def fetch():
            return (
                self._api.get_pending_devices(),
                self._api.get_active_devices(),
                self._api.get_device_stats(),
            )

        self._runner.submit(self._key("refresh"), fetch, self._on_refreshed, self._on_refresh_failed)

    def _on_refreshed(self, result):
        pending, active, stats = result
        self.pending = list(pending)
        self.active = list(active)
        self.all_devices = self.pending + self.active
        self.stats = stats
        self.status_message = f"Devices refreshed at {datetime.now():%m/%d/%Y %H:%M}"
        log.info("Devices refreshed: %d pending, %d active", len(self.pending), len(self.active))
        self._changed()

    def _on_refresh_failed(self, exc):
        self.status_message = "Error refreshing devices"
        self._error("Refresh Error", f"Failed to refresh devices from server: {self._describe(exc)}")

    def check_server_status(self):
        self._runner.submit(self._key("ping"), self._api.is_server_reachable, self._on_server_status)

    def _on_server_status(self, online):
        self.server_online = online
        self._changed()

    @property
    def server_status_label(self):
        if self.server_online is None:
            return "Ed-Games Server: ● Checking..."
        return "Ed-Games Server: ● Online" if self.server_online else "Ed-Games Server: ● Offline"

    # ─── Filters ─────────────────────────────────────────────

    def set_search(self, text):
        self.search_text = text or ""
        self._changed()

    def set_status_filter(self, status):
        self.status_filter = status or "All"
        self._changed()

    def visible_pending(self):
        return [d for d in self.pending if d.matches(self.search_text)]

    def visible_active(self):
        return [d for d in self.active if d.matches(self.search_text)]

    def visible_all(self):
        rows = [d for d in self.all_devices if d.matches(self.search_text)]
        if self.status_filter != "All":
            rows = [d for d in rows if d.status == self.status_filter]
        return rows

    # ─── Transitions ─────────────────────────────────────────

    def approve(self, device, student_id) -> bool:
        """Bind a pending device to a student. Blank student id: nothing is sent."""
        sid = clean_student_id(student_id)
        if sid is None:
            return False
        if not self._allowed(device, DEVICE_APPROVED, "approve"):
            return False
        self._set_status(f"Approving device {device.device_id}...")
        self._runner.submit(
            self._key(f"approve.{device.device_id}"),
            lambda: self._api.approve_device(device.device_id, sid),
            lambda ok: self._on_result(
                ok, "Device approved successfully", f"Device {device.device_name} approved for student {sid}",
                "Failed to approve device",
            ),
            lambda e: self._on_failed("Failed to approve device", e),
        )
        return True

    def reject(self, device, reason=None) -> bool:
        if not self._allowed(device, DEVICE_REJECTED, "reject"):
            return False
        why = (reason or "").strip() or DEFAULT_REJECT_REASON
        self._set_status(f"Rejecting device {device.device_id}...")
        self._runner.submit(
            self._key(f"reject.{device.device_id}"),
            lambda: self._api.reject_device(device.device_id, why),
            lambda ok: self._on_result(
                ok, "Device rejected", f"Device {device.device_name} has been rejected", "Failed to reject device",
            ),
            lambda e: self._on_failed("Failed to reject device", e),
        )
        return True

    def revoke(self, device, reason=None) -> bool:
        if not self._allowed(device, DEVICE_REVOKED, "revoke"):
            return False
        why = (reason or "").strip() or DEFAULT_REVOKE_REASON
        self._set_status(f"Revoking device {device.device_id}...")
        self._runner.submit(
            self._key(f"revoke.{device.device_id}"),
            lambda: self._api.revoke_device(device.device_id, why),
            lambda ok: self._on_result(
                ok, "Device revoked", f"Device {device.device_name} has been revoked", "Failed to revoke device",
            ),
            lambda e: self._on_failed("Failed to revoke device", e),
        )
        return True

    def _allowed(self, device, target, verb):
        if can_transition_device(device.status, target):
            return True
        status = device.status.lower()
        article = "an" if status and status[0] in "aeiou" else "a"
        self._set_status(f"Cannot {verb} {article} {status} device")
        return False

    def _on_result(self, ok, status, info, failure):
        if not ok:
            self.status_message = failure
            self._error("Error", f"{failure}. Please try again.")
            return
        self.status_message = status
        self._info("Success", info)
        self.refresh_devices()

    def _on_failed(self, failure, exc):
        self.status_message = failure
        self._error("Error", f"{failure}: {self._describe(exc)}")
