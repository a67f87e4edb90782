"""
Payload parsing, transition tables and templates.
"""

from desk_core.models import (
    can_transition_poll, can_transition_device, Student, ClassRoster, DeviceRegistration,
    DeviceStats, Poll, PollResults, DismissalEvent, format_timestamp,
)
from desk_core.templates import TEMPLATES, get_by_id, get_by_category


# ============================================================
# Transition gates
# ============================================================

def test_poll_lifecycle_is_linear():
    assert can_transition_poll("DRAFT", "PUBLISHED")
    assert can_transition_poll("PUBLISHED", "CLOSED")
    assert not can_transition_poll("DRAFT", "CLOSED")
    assert not can_transition_poll("PUBLISHED", "DRAFT")
    assert not can_transition_poll("CLOSED", "PUBLISHED")
    assert not can_transition_poll("UNKNOWN", "PUBLISHED")


def test_device_transitions():
    assert can_transition_device("PENDING", "APPROVED")
    assert can_transition_device("PENDING", "REJECTED")
    assert can_transition_device("APPROVED", "REVOKED")
    assert not can_transition_device("REVOKED", "APPROVED")
    assert not can_transition_device("REJECTED", "APPROVED")
    assert not can_transition_device("PENDING", "REVOKED")
    assert not can_transition_device("APPROVED", "REJECTED")


# ============================================================
# People
# ============================================================

def test_student_from_dto_and_cache_shape():
    dto = {"id": 7, "studentId": "S-7", "firstName": "Grace", "lastName": "Hopper",
           "gradeLevel": 10, "email": "g@school.org", "active": True}
    s = Student.from_dto(dto)

    assert s.full_name == "Grace Hopper"
    assert s.display == "Grace Hopper (Grade 10)"
    assert s.server_id == 7
    assert Student.from_dto(s.to_cache()) == s


def test_student_missing_active_flag_counts_as_active():
    assert Student.from_dto({"studentId": "S1"}).active
    assert not Student.from_dto({"studentId": "S1", "active": False}).active


def test_roster_label_and_membership():
    roster = ClassRoster.from_dto("3", {
        "courseName": "Algebra I", "courseId": 55,
        "students": [{"studentId": 7, "studentNumber": "S-7", "firstName": "Grace"}],
    })

    assert roster.period == 3
    assert roster.label == "Period 3 — Algebra I"
    assert roster.contains(Student("S-7"))
    assert roster.contains(Student("other", server_id=7))
    assert not roster.contains(Student("S-8", server_id=8))


# ============================================================
# Devices
# ============================================================

def test_device_default_status_and_search():
    d = DeviceRegistration.from_payload({"deviceId": "abc123", "deviceName": "Chromebook 4"})

    assert d.status == "PENDING"
    assert d.matches("chrome")
    assert d.matches("")
    assert not d.matches("ipad")
    assert DeviceRegistration.from_payload({"deviceId": "x"}, "APPROVED").status == "APPROVED"


def test_device_stats_tolerates_strings():
    assert DeviceStats.from_payload({"total": "5", "pending": 2, "approved": None}) == DeviceStats(5, 2, 0)


def test_format_timestamp():
    assert format_timestamp(None) == "N/A"
    assert format_timestamp("2024-03-01T08:30:00Z") == "03/01/2024 08:30"
    assert format_timestamp("yesterday") == "yesterday"


# ============================================================
# Polls
# ============================================================

def test_poll_from_payload():
    p = Poll.from_payload({
        "id": 9, "title": "Lunch Survey", "status": "PUBLISHED",
        "questions": [{"id": 1, "questionText": "Pick", "questionType": "YES_NO"}],
    })
    assert p.poll_id == 9
    assert p.status == "PUBLISHED"
    assert p.questions[0].required


def test_results_percentages_from_counts():
    """One response: A gets 100%, B gets 0%."""
    results = PollResults.from_payload({
        "title": "Lunch Survey", "totalResponses": 1,
        "questions": [{
            "questionText": "Favorite lunch?", "questionType": "MULTIPLE_CHOICE",
            "options": [{"option": "A", "count": 1}, {"option": "B", "count": 0}],
        }],
    })

    assert results.total_responses == 1
    tallies = results.questions[0].options
    assert [(t.option, t.count, t.percentage) for t in tallies] == [("A", 1, 100), ("B", 0, 0)]


def test_results_no_responses_are_zero_percent():
    results = PollResults.from_payload({"questions": [{
        "questionText": "Q", "questionType": "CHECKBOX",
        "options": [{"option": "A", "count": 0}, {"option": "B", "count": 0}],
    }]})
    assert [t.percentage for t in results.questions[0].options] == [0, 0]
    assert results.title == "Poll Results"


def test_results_server_percentage_wins_and_text_answers():
    results = PollResults.from_payload({"questions": [
        {"questionText": "Q", "questionType": "MULTIPLE_CHOICE",
         "options": [{"option": "A", "count": 2, "percentage": 67}]},
        {"questionText": "Why?", "questionType": "SHORT_TEXT", "textAnswers": ["Because", "Tasty"]},
    ]})
    assert results.questions[0].options[0].percentage == 67
    assert results.questions[1].text_answers == ["Because", "Tasty"]
    assert results.questions[1].options == []


# ============================================================
# Dismissal
# ============================================================

def test_dismissal_event_labels():
    ev = DismissalEvent.from_payload({"eventType": "BUS_ARRIVAL", "status": "DEPARTED", "busNumber": "12"})
    assert ev.type_label == "Bus Arrival"
    assert ev.departed


# ============================================================
# Templates
# ============================================================

def test_templates_lookup():
    t = get_by_id("classroom_disruption")
    assert t.category == "DISRUPTION"
    assert t.has_placeholders
    assert get_by_id("nope") is None
    assert all(x.category == "FIGHTING" for x in get_by_category("fighting"))
    assert len(get_by_category("FIGHTING")) == 2


def test_referral_templates():
    referral = {t.id for t in TEMPLATES if t.requires_admin_referral}
    assert referral == {"BULLYING_INTIMIDATION", "PHYSICAL_AGGRESSION", "HARASSMENT_GENERAL", "THEFT"}
    assert len({t.id for t in TEMPLATES}) == len(TEMPLATES)
