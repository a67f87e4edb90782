"""
Network utilities — connectivity monitoring and the pending-change log.

Connectivity: an HTTP probe of the SIS health endpoint. Reachable SIS is
what "online" means to this client; a working LAN with the SIS down is
still offline.

Pending store: JSON-lines file of local changes not yet pushed to the SIS.
AutoSyncService drains it.
"""

import json
import math
import time

import requests

from .config import log, PENDING_SYNC_FILE
from .constants import HEALTH_TIMEOUT
from . import http_client


# ─── Connectivity ────────────────────────────────────────────────

class NetworkMonitor:

    def __init__(self, server_url, clock=time.time):
        self.server_url = server_url.rstrip("/")
        self._clock = clock
        self.last_known_status = None       # None until the first probe
        self._last_success = None
        self._last_failure = None

    def is_network_available(self) -> bool:
        try:
            resp = http_client.http.get(f"{self.server_url}/api/health", timeout=HEALTH_TIMEOUT)
            available = 200 <= resp.status_code < 300
        except requests.RequestException as e:
            log.debug("Health probe failed: %s", e)
            available = False

        now = self._clock()
        if available:
            self._last_success = now
        else:
            self._last_failure = now

        if available != self.last_known_status:
            if available:
                log.info("Network connection restored")
            elif self.last_known_status is not None:
                log.warning("Network connection lost")
            else:
                log.info("Starting offline")
        self.last_known_status = available
        return available

    def seconds_since_last_success(self) -> float:
        if self._last_success is None:
            return math.inf
        return self._clock() - self._last_success

    def seconds_since_last_failure(self) -> float:
        if self._last_failure is None:
            return math.inf
        return self._clock() - self._last_failure

    def reset(self):
        self.last_known_status = None
        self._last_success = None
        self._last_failure = None


# ─── Pending changes (local persistence) ─────────────────────────

class PendingStore:
    """
    Append-only JSONL of {"entity", "payload", "ts"}. Order is push order.
    All access is serialized by the sync service; the store itself is not locked.
    """

    def __init__(self, path=PENDING_SYNC_FILE):
        self.path = path

    def add(self, entity, payload) -> bool:
        """Save a change. A back-to-back duplicate of the last entry is skipped."""
        entry = {"entity": entity, "payload": payload, "ts": time.time()}
        items = self.items()
        if items and items[-1].get("entity") == entity and items[-1].get("payload") == payload:
            log.debug("Skipping duplicate pending %s change", entity)
            return False
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
        log.info("Queued pending %s change", entity)
        return True

    def items(self):
        """All well-formed entries in order. Corrupt lines are logged and skipped."""
        try:
            if not self.path.exists():
                return []
            lines = self.path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            log.warning("Cannot read pending store %s: %s", self.path, e)
            return []

        items = []
        for line in lines:
            if not line.strip():
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                log.warning("Dropping corrupt pending entry: %s", line[:80])
                continue
            if isinstance(entry, dict) and entry.get("entity"):
                items.append(entry)
        return items

    def count(self) -> int:
        return len(self.items())

    def replace(self, remaining):
        """Rewrite the store with only `remaining` (in order)."""
        if not remaining:
            self.clear()
            return
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text("".join(json.dumps(e) + "\n" for e in remaining), encoding="utf-8")
        tmp.replace(self.path)

    def clear(self):
        self.path.unlink(missing_ok=True)
