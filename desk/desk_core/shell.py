"""
ShellController — main window chrome: teacher header, connectivity and
server status icons, sync status card, manual sync.

Health checks run every HEALTH_CHECK_SEC (first one immediately). Each
server is probed independently; one being down never hides the others.
"""

from datetime import datetime

from .config import log
from .constants import HEALTH_CHECK_SEC, BUSY_MESSAGE
from .controller import ViewController
from .tasks import RepeatingJob


class ShellController(ViewController):

    def __init__(self, session, network, admin_api, edgames_api, talk_api, sync_service,
                 runner, root, interval_sec=HEALTH_CHECK_SEC):
        super().__init__(runner)
        self._session = session
        self._network = network
        self._admin = admin_api
        self._edgames = edgames_api
        self._talk = talk_api
        self._sync = sync_service
        self.online = None
        self.sis_online = None
        self.edgames_online = None
        self.talk_online = None
        self.pending_count = 0
        self.last_sync_time = 0.0
        self.syncing = False
        self.session_warning = ""
        self._job = RepeatingJob(root, interval_sec, self.check_status, name="health-check")

    def start(self):
        self._job.start(run_now=True)

    def close(self):
        self._job.stop()
        super().close()

    # ─── Labels ──────────────────────────────────────────────

    @property
    def teacher_label(self):
        return self._session.teacher_name if self._session.is_logged_in() else "Guest User"

    @property
    def network_label(self):
        if self.online is None:
            return "Checking..."
        return "Online" if self.online else "Offline"

    @property
    def pending_label(self):
        return f"Pending: {self.pending_count}"

    @property
    def last_sync_label(self):
        if self.last_sync_time > 0:
            return f"Last sync: {datetime.fromtimestamp(self.last_sync_time):%H:%M:%S}"
        return "Last sync: Never"

    # ─── Health tick ─────────────────────────────────────────

    def check_status(self):
        self._runner.submit(self._key("health"), self._probe, self._on_probe, self._on_probe_failed)
        self._update_session_warning()

    def _probe(self):
        """Worker side. is_server_reachable() never raises, so every probe runs."""
        status = {
            "online": self._network.is_network_available(),
            "sis": self._admin.is_server_reachable(),
            "edgames": self._edgames.is_server_reachable(),
            "talk": self._talk.is_server_reachable(),
            "pending": self._sync.pending_items_count(),
            "last_sync": self._sync.last_sync_time,
        }
        if status["talk"]:
            self._talk.send_heartbeat()
        return status

    def _on_probe(self, status):
        self.online = status["online"]
        self.sis_online = status["sis"]
        self.edgames_online = status["edgames"]
        self.talk_online = status["talk"]
        self.pending_count = status["pending"]
        self.last_sync_time = status["last_sync"]
        log.debug(
            "Health: network=%s sis=%s edgames=%s talk=%s pending=%d",
            self.online, self.sis_online, self.edgames_online, self.talk_online, self.pending_count,
        )
        self._changed()

    def refresh_pending(self):
        """Re-read the pending count after a local change was queued."""
        self.pending_count = self._sync.pending_items_count()
        self._changed()

    def _on_probe_failed(self, exc):
        log.warning("Health check failed: %s", exc)
        self._changed()

    def _update_session_warning(self):
        if self._session.is_logged_in() and self._session.is_expiring_soon():
            self.session_warning = f"Session expires in {self._session.minutes_until_expiry()} min"
        else:
            self.session_warning = ""

    # ─── Sync ────────────────────────────────────────────────

    def sync_now(self):
        if self.syncing:
            return
        self.syncing = True
        self.status_message = "Syncing with main server..."
        self._changed()

        def run():
            pushed = self._sync.sync_now()
            return pushed, self._sync.pending_items_count(), self._sync.last_sync_time

        if self._runner.submit(self._key("sync"), run, self._on_synced, self._on_sync_failed) is None:
            self.syncing = False
            self._set_status(BUSY_MESSAGE)

    def _on_synced(self, result):
        pushed, pending, last_sync = result
        self.syncing = False
        self.pending_count = pending
        self.last_sync_time = last_sync
        if self._network.last_known_status is False:
            self.online = False
            self.status_message = f"Offline - {pending} changes kept locally"
        else:
            self.status_message = "Sync completed successfully"
        log.info("Manual sync pushed %d items (%d pending)", pushed, pending)
        self._changed()

    def _on_sync_failed(self, exc):
        self.syncing = False
        message = self._describe(exc)
        self.status_message = f"Sync failed: {message}"
        self._error("Sync Error", f"Failed to sync with main server:\n{message}")
