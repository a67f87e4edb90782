"""
Discipline ticket screen: pick a student, describe the incident, submit.

Students come from the local roster cache, falling back to the SIS when
the cache is empty. Period rosters narrow the student list. Submission is
fire-and-forget: one POST, no local record beyond the session's recent list.
"""

from datetime import datetime

from .config import log
from .constants import (
    BEHAVIOR_POSITIVE, BEHAVIOR_NEGATIVE, POSITIVE_CATEGORIES, NEGATIVE_CATEGORIES,
    SEVERITY_LEVELS, REFERRAL_SEVERITIES, LOCATIONS, RECENT_SUBMISSIONS_LIMIT, ALL_STUDENTS,
    BUSY_MESSAGE,
)
from .controller import ViewController
from .models import RecentSubmission
from .roster import load_students
from .templates import TEMPLATES
from .validation import ValidationError, validate_incident_form

PLACEHOLDER_HINT = "Fill in the [bracketed] placeholders with specific details."


class DisciplineTicketController(ViewController):

    templates = TEMPLATES
    severity_levels = SEVERITY_LEVELS
    locations = LOCATIONS

    def __init__(self, admin_api, roster_cache, session, runner, clock=datetime.now):
        super().__init__(runner)
        self._api = admin_api
        self._cache = roster_cache
        self._session = session
        self._clock = clock

        self.all_students = []
        self.student_source = None
        self.period_rosters = {}
        self.period_filter = ALL_STUDENTS
        self.search_text = ""
        self.selected_student = None
        self.recent_submissions = []
        self.feedback_error = False
        self.submitting = False
        self._reset_fields()

    def _reset_fields(self):
        now = self._clock()
        self.selected_template = None
        self.behavior_type = BEHAVIOR_NEGATIVE
        self.categories = list(NEGATIVE_CATEGORIES)
        self.category = None
        self.severity = None
        self.severity_enabled = True
        self.location = "CLASSROOM"
        self.incident_date = now.date()
        self.incident_time = now.strftime("%H:%M")
        self.description = ""
        self.intervention = ""
        self.parent_contacted = False
        self.admin_referral = False
        self.admin_referral_enabled = True
        self.placeholder_hint = ""

    # ─── Loading ─────────────────────────────────────────────

    def start(self):
        self.load_students()
        self.load_rosters()

    def load_students(self):
        self._runner.submit(
            self._key("students"),
            lambda: load_students(self._cache, self._api),
            self._on_students,
            self._on_students_failed,
        )

    def _on_students(self, result):
        students, source = result
        self.all_students = list(students)
        self.student_source = source
        self._changed()

    def _on_students_failed(self, exc):
        log.error("Failed to load students: %s", exc)
        self._feedback("Could not load student list. Check server connection.", True)

    def load_rosters(self):
        employee_id = self._session.employee_id
        if not employee_id:
            log.warning("No employee ID available, skipping roster load")
            return
        self._runner.submit(
            self._key("rosters"),
            lambda: self._api.get_all_rosters(employee_id),
            self._on_rosters,
            lambda e: log.error("Failed to load period rosters: %s", e),
        )

    def _on_rosters(self, rosters):
        if not rosters:
            return
        self.period_rosters = dict(rosters)
        if self.period_filter not in self.period_options:
            self.period_filter = ALL_STUDENTS
        log.info("Loaded %d period rosters", len(rosters))
        self._changed()

    # ─── Student list ────────────────────────────────────────

    @property
    def period_options(self):
        return [ALL_STUDENTS] + [self.period_rosters[p].label for p in sorted(self.period_rosters)]

    def selected_roster(self):
        if self.period_filter == ALL_STUDENTS:
            return None
        for roster in self.period_rosters.values():
            if roster.label == self.period_filter:
                return roster
        return None

    def set_period_filter(self, label):
        self.period_filter = label or ALL_STUDENTS
        self._changed()

    def set_search(self, text):
        self.search_text = text or ""
        self._changed()

    def visible_students(self):
        roster = self.selected_roster()
        students = self.all_students
        if roster is not None:
            students = [s for s in students if roster.contains(s)]
        query = self.search_text.strip().lower()
        if query:
            students = [
                s for s in students
                if query in s.full_name.lower() or query in s.student_id.lower()
            ]
        return students

    def select_student(self, student):
        self.selected_student = student
        log.info("Student selected: %s (%s)", student.full_name, student.student_id)
        self._changed()

    # ─── Form fields ─────────────────────────────────────────

    def apply_template(self, template):
        self.selected_template = template
        self.behavior_type = BEHAVIOR_NEGATIVE
        self.categories = list(NEGATIVE_CATEGORIES)
        self.severity_enabled = True
        self.admin_referral_enabled = True
        self.category = template.category
        self.severity = template.default_severity
        self.description = template.description_template
        self.intervention = template.suggested_intervention
        self.admin_referral = template.requires_admin_referral
        self.placeholder_hint = PLACEHOLDER_HINT if template.has_placeholders else ""
        log.info("Template selected: %s", template.display_name)
        self._feedback(f"Template applied: {template.display_name}", False)

    def set_behavior_type(self, behavior_type):
        self.behavior_type = behavior_type
        self.category = None
        if behavior_type == BEHAVIOR_POSITIVE:
            self.categories = list(POSITIVE_CATEGORIES)
            self.severity = None
            self.severity_enabled = False
            self.admin_referral = False
            self.admin_referral_enabled = False
        else:
            self.categories = list(NEGATIVE_CATEGORIES)
            self.severity_enabled = True
            self.admin_referral_enabled = True
        self._changed()

    def set_severity(self, severity):
        self.severity = severity
        if severity in REFERRAL_SEVERITIES:
            self.admin_referral = True
        self._changed()

    def set_category(self, category):
        self.category = category
        self._changed()

    def set_location(self, location):
        self.location = location
        self._changed()

    def set_description(self, text):
        self.description = text
        self._changed()

    def set_intervention(self, text):
        self.intervention = text
        self._changed()

    def set_parent_contacted(self, value):
        self.parent_contacted = bool(value)
        self._changed()

    def set_admin_referral(self, value):
        if self.admin_referral_enabled:
            self.admin_referral = bool(value)
            self._changed()

    # ─── Submit ──────────────────────────────────────────────

    def build_payload(self, description):
        student = self.selected_student
        data = {
            "studentId": student.server_id if student.server_id is not None else student.student_id,
            "reportingTeacherId": self._api.teacher_id,
        }
        roster = self.selected_roster()
        if roster is not None and roster.course_id is not None:
            data["courseId"] = roster.course_id
        data["incidentDate"] = self.incident_date.isoformat()
        data["incidentTime"] = f"{self.incident_time}:00"
        data["behaviorType"] = self.behavior_type
        data["behaviorCategory"] = self.category
        if self.severity:
            data["severityLevel"] = self.severity
        data["incidentLocation"] = self.location
        data["incidentDescription"] = description
        if self.intervention.strip():
            data["interventionApplied"] = self.intervention.strip()
        data["parentContacted"] = self.parent_contacted
        data["adminReferralRequired"] = self.admin_referral
        return data

    def submit(self) -> bool:
        if self.submitting:
            return False
        try:
            description = validate_incident_form(
                self.selected_student, self.behavior_type, self.category, self.description,
            )
        except ValidationError as e:
            self._feedback(str(e), True)
            return False

        payload = self.build_payload(description)
        entry = RecentSubmission(
            time=self._clock().strftime("%H:%M"),
            student_name=self.selected_student.full_name,
            category=self.category,
            severity=self.severity or "N/A",
            status="Referred" if self.admin_referral else "Submitted",
        )
        self.submitting = True
        self._feedback("Submitting...", False)
        token = self._runner.submit(
            self._key("submit"),
            lambda: self._api.create_behavior_incident(payload),
            lambda _r: self._on_submitted(entry),
            self._on_submit_failed,
        )
        if token is None:
            self.submitting = False
            self._feedback(BUSY_MESSAGE, True)
            return False
        return True

    def _on_submitted(self, entry):
        self.submitting = False
        self.recent_submissions.insert(0, entry)
        del self.recent_submissions[RECENT_SUBMISSIONS_LIMIT:]
        self.clear_form()
        self._feedback("Incident submitted successfully!", False)

    def _on_submit_failed(self, exc):
        self.submitting = False
        log.error("Failed to submit discipline incident: %s", exc)
        self._feedback(f"Failed to submit: {self._describe(exc)}", True)

    def clear_form(self):
        """Reset the incident fields. The student selection is kept."""
        self.period_filter = ALL_STUDENTS
        self._reset_fields()
        self._changed()

    def handle_clear(self):
        self.clear_form()
        self._feedback("", False)

    def _feedback(self, message, is_error):
        self.status_message = message
        self.feedback_error = is_error
        self._changed()
