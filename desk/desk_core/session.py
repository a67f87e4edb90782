"""
SessionManager — who is logged in, and for how long.

A session expires after SESSION_TIMEOUT_HOURS without activity. Every read
of current_teacher counts as activity.
"""

import time

from .config import log
from .constants import SESSION_TIMEOUT_HOURS, SESSION_WARNING_MIN

_TIMEOUT_SEC = SESSION_TIMEOUT_HOURS * 3600


class SessionManager:

    def __init__(self, clock=time.time):
        self._clock = clock
        self._teacher = None
        self._login_time = 0.0
        self._last_activity = 0.0

    def login(self, teacher):
        now = self._clock()
        self._teacher = teacher
        self._login_time = now
        self._last_activity = now
        log.info("Teacher logged in: %s (%s)", teacher.full_name, teacher.employee_id)

    def logout(self):
        if self._teacher is not None:
            log.info(
                "Teacher logged out: %s (%s) - session %d min",
                self._teacher.full_name, self._teacher.employee_id, self.session_minutes(),
            )
        self._teacher = None
        self._login_time = 0.0
        self._last_activity = 0.0

    # ─── Accessors ───────────────────────────────────────────

    @property
    def current_teacher(self):
        if self._teacher is not None:
            self.touch()
        return self._teacher

    @property
    def teacher_id(self):
        return self._teacher.server_id if self._teacher else None

    @property
    def employee_id(self):
        return self._teacher.employee_id if self._teacher else None

    @property
    def teacher_name(self):
        return self._teacher.full_name if self._teacher else "Guest"

    # ─── Expiry ──────────────────────────────────────────────

    def is_expired(self) -> bool:
        if self._teacher is None:
            return True
        return self._clock() - self._last_activity > _TIMEOUT_SEC

    def is_logged_in(self) -> bool:
        if self._teacher is None:
            return False
        if self.is_expired():
            log.warning("Session expired for %s", self._teacher.employee_id)
            self.logout()
            return False
        return True

    def touch(self):
        if self._teacher is not None:
            self._last_activity = self._clock()

    def session_minutes(self) -> int:
        if self._teacher is None:
            return 0
        return int((self._clock() - self._login_time) // 60)

    def minutes_until_expiry(self) -> int:
        if self._teacher is None:
            return 0
        remaining = self._last_activity + _TIMEOUT_SEC - self._clock()
        return max(0, int(remaining // 60))

    def is_expiring_soon(self) -> bool:
        return self._teacher is not None and self.minutes_until_expiry() <= SESSION_WARNING_MIN
