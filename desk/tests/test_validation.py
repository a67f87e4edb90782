"""
Form rules: poll drafts, discipline incidents, grading weights.
"""

import pytest

from desk_core.models import PollDraft, QuestionDraft, Student
from desk_core.validation import (
    ValidationError, validate_poll_draft, clean_student_id, has_unfilled_placeholders,
    validate_incident_form, validate_weight_text, summarize_weights,
)
from desk_core.constants import WEIGHT_PERFECT, WEIGHT_OVER, WEIGHT_UNDER, WEIGHT_EMPTY


def make_draft(title="Lunch Survey", questions=None):
    return PollDraft(title=title, questions=questions if questions is not None else [
        QuestionDraft("MULTIPLE_CHOICE", "Favorite lunch?", "Pizza\nTacos"),
    ])


# ============================================================
# Poll drafts
# ============================================================

def test_poll_draft_payload():
    payload = validate_poll_draft(make_draft(), creator_name="Ada Lovelace")

    assert payload["title"] == "Lunch Survey"
    assert payload["creatorName"] == "Ada Lovelace"
    assert payload["creatorType"] == "TEACHER"
    assert payload["allowMultipleResponses"] is False
    assert payload["targetAudience"] == "ALL"
    assert payload["resultsVisibility"] == "AFTER_CLOSE"
    q = payload["questions"][0]
    assert q == {
        "questionText": "Favorite lunch?",
        "questionType": "MULTIPLE_CHOICE",
        "displayOrder": 0,
        "isRequired": True,
        "options": ["Pizza", "Tacos"],
    }


def test_poll_title_required():
    with pytest.raises(ValidationError, match="Title is required"):
        validate_poll_draft(make_draft(title="   "))


def test_poll_needs_a_question():
    with pytest.raises(ValidationError, match="Add at least one question"):
        validate_poll_draft(make_draft(questions=[]))


def test_question_text_required():
    draft = make_draft(questions=[
        QuestionDraft("SHORT_TEXT", "Anything else?"),
        QuestionDraft("SHORT_TEXT", "  "),
    ])
    with pytest.raises(ValidationError, match="Question 2 text required"):
        validate_poll_draft(draft)


def test_choice_question_needs_two_options():
    """Blank lines do not count as options."""
    draft = make_draft(questions=[QuestionDraft("CHECKBOX", "Pick", "Only one\n\n   \n")])
    with pytest.raises(ValidationError, match="Q1 needs at least 2 options"):
        validate_poll_draft(draft)


def test_yes_no_gets_fixed_options_and_short_text_none():
    draft = make_draft(questions=[
        QuestionDraft("YES_NO", "Field trip?", "ignored\nlines"),
        QuestionDraft("SHORT_TEXT", "Comments", "ignored", required=False),
    ])
    yes_no, short = validate_poll_draft(draft)["questions"]

    assert yes_no["options"] == ["Yes", "No"]
    assert "options" not in short
    assert short["isRequired"] is False
    assert short["displayOrder"] == 1


def test_first_problem_wins():
    """Title is checked before questions."""
    with pytest.raises(ValidationError, match="Title"):
        validate_poll_draft(PollDraft(title="", questions=[]))


# ============================================================
# Discipline incidents
# ============================================================

STUDENT = Student("S1", "Grace", "Hopper")


def test_incident_requires_student():
    with pytest.raises(ValidationError, match="select a student"):
        validate_incident_form(None, "NEGATIVE", "DISRUPTION", "Talked")


def test_incident_requires_category():
    with pytest.raises(ValidationError, match="category"):
        validate_incident_form(STUDENT, "NEGATIVE", None, "Talked")


def test_incident_requires_description():
    with pytest.raises(ValidationError, match="description"):
        validate_incident_form(STUDENT, "NEGATIVE", "DISRUPTION", "   ")


def test_incident_rejects_unfilled_placeholders():
    with pytest.raises(ValidationError, match="placeholders"):
        validate_incident_form(STUDENT, "NEGATIVE", "DISRUPTION", "Did [specific behavior] in class")


def test_incident_returns_stripped_description():
    assert validate_incident_form(STUDENT, "POSITIVE", "LEADERSHIP", "  Led the group  ") == "Led the group"


def test_placeholder_detection():
    assert has_unfilled_placeholders("at [time]")
    assert not has_unfilled_placeholders("at 9:05")
    assert not has_unfilled_placeholders("bracket [ only")


def test_clean_student_id():
    assert clean_student_id("  S-100 ") == "S-100"
    assert clean_student_id("   ") is None
    assert clean_student_id(None) is None


# ============================================================
# Grading weights
# ============================================================

def test_weight_text():
    assert validate_weight_text("") is None
    assert validate_weight_text("40") == pytest.approx(0.4)
    with pytest.raises(ValidationError, match="valid number"):
        validate_weight_text("forty")
    with pytest.raises(ValidationError, match="between 0 and 100"):
        validate_weight_text("101")


@pytest.mark.parametrize("text", ["nan", "inf", "-inf", "NaN"])
def test_weight_text_rejects_non_finite(text):
    with pytest.raises(ValidationError, match="valid number"):
        validate_weight_text(text)


def test_weights_perfect():
    s = summarize_weights([(0.6, False), (0.4, False), (0.1, True)])
    assert s.state == WEIGHT_PERFECT
    assert s.label == "100% ✓ (Perfect!)"


def test_weights_over():
    s = summarize_weights([(0.6, False), (0.4, False)], pending_weight=0.1)
    assert s.state == WEIGHT_OVER
    assert s.label == "110% ⚠ (Over 100%)"


def test_weights_under_and_empty():
    under = summarize_weights([(0.6, False), (None, False)])
    assert under.state == WEIGHT_UNDER
    assert under.label == "60% (Will be normalized)"

    empty = summarize_weights([])
    assert empty.state == WEIGHT_EMPTY
    assert empty.label == "0%"
