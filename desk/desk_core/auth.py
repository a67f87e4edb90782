"""
AuthenticationService — one login for all backends.

The SIS login is required. Ed-Games and Talk tokens and the roster cache
refresh are best effort: a failure there is logged and the teacher still
gets in, with those features reporting their own errors later.
"""

from dataclasses import dataclass

from .config import log
from .api import ApiError
from .models import Teacher
from .roster import refresh_cache


@dataclass
class LoginResult:
    success: bool
    message: str = ""
    teacher: Teacher = None
    edgames_connected: bool = False
    talk_connected: bool = False
    students_cached: int = 0


class AuthenticationService:

    def __init__(self, session, admin_api, edgames_api, talk_api, roster_cache):
        self._session = session
        self._admin = admin_api
        self._edgames = edgames_api
        self._talk = talk_api
        self._cache = roster_cache

    def login(self, employee_id, password) -> LoginResult:
        """Blocking. Never raises for bad credentials or a down server."""
        employee_id = (employee_id or "").strip()
        if not employee_id or not password:
            return LoginResult(False, "Please enter your employee ID and password.")

        log.info("Attempting login for %s", employee_id)
        if not self._admin.authenticate(employee_id, password):
            if not self._admin.is_server_reachable():
                return LoginResult(False, "Cannot reach the SIS server. Check your connection.")
            return LoginResult(False, "Invalid employee ID or password.")

        teacher = self._resolve_teacher(employee_id)
        self._session.login(teacher)

        result = LoginResult(True, f"Welcome, {teacher.full_name}", teacher)
        result.edgames_connected = self._edgames.authenticate(employee_id, password)
        result.talk_connected = self._talk.authenticate(employee_id, password)
        try:
            result.students_cached = len(refresh_cache(self._cache, self._admin))
        except (ApiError, OSError) as e:
            log.warning("Roster cache refresh failed: %s", e)
        return result

    def _resolve_teacher(self, employee_id):
        """Teacher identity from the schedule, falling back to the login response."""
        name = self._admin.teacher_name
        server_id = self._admin.teacher_id
        try:
            schedule = self._admin.get_teacher_schedule(employee_id)
        except ApiError as e:
            log.warning("Schedule lookup failed for %s: %s", employee_id, e)
            schedule = None
        if schedule:
            server_id = schedule.get("teacherId", server_id)
            name = schedule.get("fullName") or " ".join(
                p for p in (schedule.get("firstName"), schedule.get("lastName")) if p
            ) or name
            if self._admin.teacher_id is None:
                self._admin.teacher_id = server_id
        return Teacher(employee_id=employee_id, full_name=name or employee_id, server_id=server_id)

    def logout(self):
        self._talk.logout()
        self._admin.clear_token()
        self._edgames.clear_token()
        self._admin.teacher_id = None
        self._admin.teacher_name = ""
        self._session.logout()
