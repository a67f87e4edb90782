"""
AutoSyncService — pushes pending local changes to the SIS on a timer.

Changes are written to the PendingStore first, so nothing is lost while
offline. Every syncIntervalSec an APScheduler job pushes the oldest
syncBatchSize items to POST {admin}{syncApiPath}/{entity}. Items the
server does not accept stay pending for the next pass. No conflict
resolution and no backoff: the next tick simply tries again.
"""

import threading
import time

import requests
from apscheduler.schedulers.background import BackgroundScheduler

from .config import log
from .constants import API_TIMEOUT, SYNC_INTERVAL_SEC
from .network import PendingStore
from . import http_client


class AutoSyncService:

    def __init__(self, config, network_monitor, store=None, admin_client=None, scheduler=None):
        self.enabled = bool(config.get("syncEnabled", True))
        self.interval_sec = int(config.get("syncIntervalSec", SYNC_INTERVAL_SEC))
        self.batch_size = int(config.get("syncBatchSize", 100))
        self.server_url = config["adminServerUrl"].rstrip("/")
        self.api_path = "/" + config.get("syncApiPath", "/api/teacher-sync").strip("/")
        self.network = network_monitor
        self.store = store or PendingStore()
        self._admin = admin_client
        self._scheduler = scheduler
        self._lock = threading.Lock()

        self.is_running = False
        self.last_sync_time = 0.0       # epoch seconds, 0 = never
        self.total_synced_items = 0
        self.failed_sync_attempts = 0

    # ─── Lifecycle ───────────────────────────────────────────

    def start(self):
        if not self.enabled:
            log.info("Auto-sync is disabled in configuration")
            return
        if self.is_running:
            return
        if self._scheduler is None:
            self._scheduler = BackgroundScheduler(daemon=True)
        self._scheduler.add_job(
            self.perform_sync,
            trigger="interval",
            seconds=self.interval_sec,
            id="auto_sync",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        if not self._scheduler.running:
            self._scheduler.start()
        self.is_running = True
        log.info(
            "Auto-sync started (every %ds, batch %d, target %s%s)",
            self.interval_sec, self.batch_size, self.server_url, self.api_path,
        )

    def shutdown(self):
        if not self.is_running:
            return
        self.is_running = False
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        log.info("Auto-sync stopped (%d items synced this session)", self.total_synced_items)

    # ─── Sync passes ─────────────────────────────────────────

    def perform_sync(self) -> int:
        """One pass. Returns the number of items pushed (0 when skipped)."""
        if not self.enabled:
            return 0
        if not self.network.is_network_available():
            log.debug("Network unavailable - skipping sync (changes kept locally)")
            return 0

        with self._lock:
            try:
                return self._push_batch()
            except Exception as e:
                self.failed_sync_attempts += 1
                log.error(
                    "Sync failed (attempt %d): %s - changes kept locally",
                    self.failed_sync_attempts, e, exc_info=True,
                )
                return 0

    def sync_now(self) -> int:
        log.info("Manual sync triggered")
        return self.perform_sync()

    def _push_batch(self):
        items = self.store.items()
        if not items:
            self.last_sync_time = time.time()
            return 0

        batch, rest = items[:self.batch_size], items[self.batch_size:]
        synced = 0
        failed = []
        for entry in batch:
            if self._send(entry["entity"], entry.get("payload")):
                synced += 1
            else:
                failed.append(entry)

        self.store.replace(failed + rest)
        self.total_synced_items += synced
        self.last_sync_time = time.time()
        if failed:
            self.failed_sync_attempts += 1
        if synced or failed:
            log.info("Sync pass: %d pushed, %d failed, %d pending", synced, len(failed), len(failed) + len(rest))
        return synced

    def _send(self, entity, payload) -> bool:
        url = f"{self.server_url}{self.api_path}/{entity}"
        headers = {}
        if self._admin is not None and self._admin.token:
            headers["Authorization"] = f"Bearer {self._admin.token}"
        try:
            resp = http_client.http.post(url, json=payload, headers=headers, timeout=API_TIMEOUT)
        except requests.RequestException as e:
            log.warning("Failed to send %s to server: %s", entity, e)
            return False
        if 200 <= resp.status_code < 300:
            return True
        log.warning("Server rejected %s: HTTP %d", entity, resp.status_code)
        return False

    # ─── Local changes ───────────────────────────────────────

    def queue_change(self, entity, payload) -> bool:
        with self._lock:
            return self.store.add(entity, payload)

    # ─── Status ──────────────────────────────────────────────

    def pending_items_count(self) -> int:
        return self.store.count()

    def statistics(self):
        return {
            "enabled": self.enabled,
            "running": self.is_running,
            "lastSyncTime": self.last_sync_time,
            "totalSyncedItems": self.total_synced_items,
            "failedAttempts": self.failed_sync_attempts,
            "networkAvailable": self.network.last_known_status,
            "pendingItems": self.pending_items_count(),
        }
