"""
Discipline ticket screen: student load, rosters, form rules, submission.
"""

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from desk_core.api import ApiError
from desk_core.discipline import DisciplineTicketController
from desk_core.models import Student, ClassRoster
from desk_core.roster import RosterCache
from desk_core.session import SessionManager
from desk_core.templates import get_by_id


GRACE = Student("S-1", "Grace", "Hopper", 10, server_id=101)
ALAN = Student("S-2", "Alan", "Turing", 11, server_id=102)
ADA = Student("S-3", "Ada", "Byron", 9, server_id=103)


def fixed_clock():
    return datetime(2024, 3, 1, 9, 15)


@pytest.fixture
def admin():
    api = MagicMock()
    api.teacher_id = 42
    api.get_students.return_value = [GRACE, ALAN, ADA]
    api.get_all_rosters.return_value = {
        2: ClassRoster(2, "Algebra I", course_id=55, students=[Student("S-2", server_id=102)]),
    }
    api.create_behavior_incident.return_value = {"id": 1}
    return api


@pytest.fixture
def cache(tmp_path):
    return RosterCache(tmp_path / "students.json")


@pytest.fixture
def ctl(admin, cache, session, runner):
    c = DisciplineTicketController(admin, cache, session, runner, clock=fixed_clock)
    c.start()
    return c


def fill_valid(ctl, student=GRACE):
    ctl.select_student(student)
    ctl.set_category("DISRUPTION")
    ctl.set_severity("MINOR")
    ctl.set_description("Talked over the teacher during the quiz")


# ============================================================
# Loading
# ============================================================

def test_students_fall_back_to_sis(ctl, admin, cache):
    assert ctl.student_source == "remote"
    assert len(ctl.all_students) == 3
    assert not cache.path.exists()


def test_students_from_cache_first(admin, cache, session, runner):
    cache.save([GRACE])
    c = DisciplineTicketController(admin, cache, session, runner, clock=fixed_clock)
    c.load_students()
    assert c.student_source == "local"
    admin.get_students.assert_not_called()


def test_student_load_failure_feedback(admin, cache, session, runner):
    admin.get_students.side_effect = ApiError("Cannot reach SIS server")
    c = DisciplineTicketController(admin, cache, session, runner, clock=fixed_clock)
    c.load_students()
    assert c.status_message == "Could not load student list. Check server connection."
    assert c.feedback_error


def test_rosters_skipped_without_login(admin, cache, runner):
    c = DisciplineTicketController(admin, cache, SessionManager(), runner, clock=fixed_clock)
    c.load_rosters()
    admin.get_all_rosters.assert_not_called()


def test_period_filter_and_search(ctl):
    assert ctl.period_options == ["All Students", "Period 2 — Algebra I"]

    ctl.set_period_filter("Period 2 — Algebra I")
    assert ctl.visible_students() == [ALAN]

    ctl.set_period_filter("All Students")
    ctl.set_search("s-3")
    assert ctl.visible_students() == [ADA]
    ctl.set_search("hop")
    assert ctl.visible_students() == [GRACE]


# ============================================================
# Form rules
# ============================================================

def test_positive_disables_severity_and_referral(ctl):
    ctl.set_severity("MAJOR")
    assert ctl.admin_referral

    ctl.set_behavior_type("POSITIVE")
    assert ctl.severity is None
    assert not ctl.severity_enabled
    assert not ctl.admin_referral
    assert "LEADERSHIP" in ctl.categories

    ctl.set_admin_referral(True)
    assert not ctl.admin_referral


def test_major_and_severe_check_referral(ctl):
    ctl.set_severity("MODERATE")
    assert not ctl.admin_referral
    ctl.set_severity("SEVERE")
    assert ctl.admin_referral


def test_template_fills_form(ctl):
    ctl.apply_template(get_by_id("THEFT"))

    assert ctl.category == "THEFT"
    assert ctl.severity == "MAJOR"
    assert ctl.admin_referral
    assert ctl.placeholder_hint
    assert ctl.status_message == "Template applied: Theft"


def test_template_placeholders_block_submit(ctl, admin):
    ctl.select_student(GRACE)
    ctl.apply_template(get_by_id("CLASSROOM_DISRUPTION"))

    assert ctl.submit() is False
    assert "placeholders" in ctl.status_message
    assert ctl.feedback_error
    admin.create_behavior_incident.assert_not_called()


def test_submit_requires_student(ctl, admin):
    ctl.set_category("DISRUPTION")
    ctl.set_description("Talked")
    assert ctl.submit() is False
    assert ctl.status_message == "Please select a student first."


# ============================================================
# Submission
# ============================================================

def test_payload_fields(ctl):
    fill_valid(ctl, ALAN)
    ctl.set_period_filter("Period 2 — Algebra I")
    ctl.set_intervention("  Moved seat ")
    payload = ctl.build_payload("Talked")

    assert payload["studentId"] == 102
    assert payload["reportingTeacherId"] == 42
    assert payload["courseId"] == 55
    assert payload["incidentDate"] == "2024-03-01"
    assert payload["incidentTime"] == "09:15:00"
    assert payload["behaviorType"] == "NEGATIVE"
    assert payload["severityLevel"] == "MINOR"
    assert payload["incidentLocation"] == "CLASSROOM"
    assert payload["interventionApplied"] == "Moved seat"
    assert payload["parentContacted"] is False
    assert payload["adminReferralRequired"] is False


def test_submit_success_records_and_resets(ctl, admin):
    fill_valid(ctl)
    assert ctl.submit() is True

    admin.create_behavior_incident.assert_called_once()
    assert ctl.status_message == "Incident submitted successfully!"
    assert not ctl.feedback_error
    recent = ctl.recent_submissions[0]
    assert (recent.time, recent.student_name, recent.status) == ("09:15", "Grace Hopper", "Submitted")
    assert ctl.category is None
    assert ctl.description == ""
    assert ctl.selected_student == GRACE


def test_recent_list_keeps_latest_ten(ctl):
    for _ in range(12):
        fill_valid(ctl)
        ctl.submit()
    assert len(ctl.recent_submissions) == 10


def test_submit_failure_keeps_form(ctl, admin):
    admin.create_behavior_incident.side_effect = ApiError("SIS server returned 400", 400)
    fill_valid(ctl)
    ctl.submit()

    assert ctl.status_message == "Failed to submit: SIS server returned 400"
    assert ctl.feedback_error
    assert ctl.description == "Talked over the teacher during the quiz"
    assert ctl.recent_submissions == []
    assert not ctl.submitting


def test_handle_clear(ctl):
    fill_valid(ctl)
    ctl.handle_clear()
    assert ctl.status_message == ""
    assert ctl.severity is None


def test_busy_runner_leaves_form_retryable(ctl, admin, runner):
    fill_valid(ctl)
    runner.saturated = True

    assert ctl.submit() is False
    assert not ctl.submitting
    assert ctl.status_message == "Busy, try again in a moment"
    assert ctl.feedback_error

    runner.saturated = False
    assert ctl.submit() is True
    admin.create_behavior_incident.assert_called_once()
    assert len(ctl.recent_submissions) == 1
