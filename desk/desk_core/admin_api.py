"""
AdminApiClient — the SIS (student information system) server.

Students, schedules, rosters, behavior incidents and sync status.
"""

from .config import log
from .api import ApiClient, ApiError
from .constants import API_TIMEOUT
from .models import Student, ClassRoster


class AdminApiClient(ApiClient):
    name = "SIS server"
    health_path = "/api/health"

    def __init__(self, base_url, token=None):
        super().__init__(base_url, token)
        self.teacher_id = None
        self.teacher_name = ""

    # ─── Auth ────────────────────────────────────────────────

    def authenticate(self, employee_id, password) -> bool:
        """POST credentials; keeps the token on success. Never raises."""
        try:
            resp = self._request(
                "POST", "/api/teacher/auth/login",
                json={"employeeId": employee_id, "password": password},
                timeout=API_TIMEOUT, ok=(200,),
            )
            data = self._json(resp, "/api/teacher/auth/login") or {}
        except ApiError as e:
            log.error("SIS authentication failed for %s: %s", employee_id, e)
            return False

        token = data.get("token")
        if not token:
            log.error("SIS authentication for %s returned no token", employee_id)
            return False
        self.token = token
        self.teacher_id = data.get("teacherId")
        self.teacher_name = data.get("teacherName") or ""
        log.info("SIS authentication successful for %s", employee_id)
        return True

    # ─── Students ────────────────────────────────────────────

    def get_students(self):
        return [Student.from_dto(d) for d in self._get_list("/api/teacher/students")]

    def get_student(self, student_id):
        data = self._get_dict(f"/api/teacher/students/{student_id}")
        return Student.from_dto(data) if data else None

    # ─── Schedule & rosters ──────────────────────────────────

    def get_teacher_schedule(self, employee_id):
        """Raw schedule dict, or None when the SIS has no schedule for this teacher."""
        try:
            return self._get_dict("/api/teacher/schedule", params={"employeeId": employee_id}) or None
        except ApiError as e:
            if e.status == 404:
                log.warning("No schedule found for teacher %s", employee_id)
                return None
            raise

    def get_class_roster(self, employee_id, period):
        """Roster for one period; None for a free period (empty body or 404)."""
        try:
            data = self._get_json(
                "/api/teacher/roster", params={"employeeId": employee_id, "period": period},
            )
        except ApiError as e:
            if e.status == 404:
                log.warning("No roster found for teacher %s period %s", employee_id, period)
                return None
            raise
        if not data:
            log.debug("No class scheduled for period %s", period)
            return None
        return ClassRoster.from_dto(period, data)

    def get_all_rosters(self, employee_id):
        """{period: ClassRoster} for every scheduled period; {} on 404."""
        try:
            data = self._get_dict("/api/teacher/rosters", params={"employeeId": employee_id})
        except ApiError as e:
            if e.status == 404:
                log.warning("No rosters found for teacher %s", employee_id)
                return {}
            raise
        rosters = {}
        for key, dto in data.items():
            if not dto:
                continue
            try:
                period = int(key)
            except (TypeError, ValueError):
                log.debug("Skipping roster with non-numeric period %r", key)
                continue
            rosters[period] = ClassRoster.from_dto(period, dto)
        return rosters

    # ─── Behavior & sync ─────────────────────────────────────

    def create_behavior_incident(self, payload):
        """Submit a discipline incident. Raises ApiError on failure."""
        data = self._post_json("/api/teacher/behavior-incidents", payload)
        log.info("Behavior incident submitted for student %s", payload.get("studentId"))
        return data

    def get_sync_status(self):
        return self._get_dict("/api/teacher/sync/status")
