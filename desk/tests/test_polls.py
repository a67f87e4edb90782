"""
Poll lifecycle: editor, polls tables, take-poll form.
"""

from unittest.mock import MagicMock

import pytest

from desk_core.api import ApiError
from desk_core.models import Poll, PollQuestion, PollResults
from desk_core.polls import PollEditor, PollsController, PollResponseForm


def make_poll(status="DRAFT", poll_id=9, questions=None):
    return Poll(poll_id=poll_id, title="Lunch Survey", status=status, questions=questions or [])


@pytest.fixture
def service():
    svc = MagicMock()
    svc.get_my_polls.return_value = []
    svc.get_active_polls.return_value = []
    return svc


# ============================================================
# Editor
# ============================================================

def test_editor_blocks_invalid_draft(service, runner, session):
    editor = PollEditor(service, runner, session)
    editor.draft.title = "Lunch Survey"

    assert editor.save() is False
    assert editor.error_message == "Add at least one question"
    service.create_poll.assert_not_called()


def test_editor_creates_draft(service, runner, session):
    saved = []
    service.create_poll.return_value = make_poll()
    editor = PollEditor(service, runner, session, on_saved=saved.append)
    editor.draft.title = "Lunch Survey"
    q = editor.add_question("MULTIPLE_CHOICE")
    q.text = "Favorite lunch?"
    q.options_text = "A\nB"

    assert editor.save() is True
    payload = service.create_poll.call_args[0][0]
    assert payload["creatorName"] == "Ada Lovelace"
    assert payload["questions"][0]["options"] == ["A", "B"]
    assert saved == [service.create_poll.return_value]
    assert not editor.saving
    assert editor.error_message == ""


def test_editor_server_failure(service, runner, session):
    service.create_poll.side_effect = ApiError("SIS server returned 500", 500)
    editor = PollEditor(service, runner, session)
    editor.draft.title = "T"
    editor.add_question("YES_NO").text = "Q?"

    editor.save()
    assert editor.error_message == "Error: SIS server returned 500"
    assert editor.saved_poll is None


def test_editor_busy_runner_allows_retry(service, runner, session):
    service.create_poll.return_value = make_poll()
    editor = PollEditor(service, runner, session)
    editor.draft.title = "Lunch Survey"
    editor.add_question("YES_NO").text = "Pizza on Friday?"
    runner.saturated = True

    assert editor.save() is False
    assert not editor.saving
    assert editor.error_message == "Busy, try again in a moment"

    runner.saturated = False
    assert editor.save() is True
    assert editor.saved_poll is service.create_poll.return_value


def test_editor_question_types(service, runner, session):
    editor = PollEditor(service, runner, session)
    editor.add_question("SHORT_TEXT")
    editor.add_question("CHECKBOX")
    editor.remove_question(0)
    assert [q.question_type for q in editor.draft.questions] == ["CHECKBOX"]
    with pytest.raises(ValueError):
        editor.add_question("RANKING")


# ============================================================
# Polls tables
# ============================================================

def test_available_actions():
    assert PollsController.available_actions(make_poll("DRAFT")) == ("publish", "delete")
    assert PollsController.available_actions(make_poll("PUBLISHED")) == ("close", "results")
    assert PollsController.available_actions(make_poll("CLOSED")) == ("results", "delete")


def test_refresh_my_polls_uses_teacher_name(service, runner, session):
    service.get_my_polls.return_value = [make_poll(), make_poll("CLOSED", 10)]
    ctl = PollsController(service, runner, session)
    ctl.refresh_my_polls()

    service.get_my_polls.assert_called_once_with("Ada Lovelace")
    assert ctl.my_polls_label == "2 polls"


def test_refresh_failure_keeps_list(service, runner, session):
    ctl = PollsController(service, runner, session)
    ctl.my_polls = [make_poll()]
    service.get_my_polls.side_effect = ApiError("Cannot reach SIS server")

    ctl.refresh_my_polls()
    assert len(ctl.my_polls) == 1
    assert "Could not load your polls" in ctl.status_message


def test_publish_draft_then_refresh(service, runner, session):
    ctl = PollsController(service, runner, session)
    assert ctl.publish(make_poll("DRAFT"))

    service.publish_poll.assert_called_once_with(9)
    assert ctl.status_message == "Poll published: Lunch Survey"
    service.get_my_polls.assert_called_once()


def test_publish_rejected_locally(service, runner, session):
    ctl = PollsController(service, runner, session)

    assert ctl.publish(make_poll("CLOSED")) is False
    assert ctl.close_poll(make_poll("DRAFT")) is False
    assert ctl.status_message == "Cannot close a draft poll"
    service.publish_poll.assert_not_called()
    service.close_poll.assert_not_called()
    assert runner.submitted == []


def test_close_failure_alerts(service, runner, session):
    service.close_poll.side_effect = ApiError("SIS server returned 409", 409)
    ctl = PollsController(service, runner, session)
    ctl.close_poll(make_poll("PUBLISHED"))

    assert ctl.last_alert.kind == "error"
    assert ctl.last_alert.message == "SIS server returned 409"


def test_delete_any_state(service, runner, session):
    service.delete_poll.return_value = False
    ctl = PollsController(service, runner, session)
    ctl.delete(make_poll("PUBLISHED"))
    assert ctl.last_alert.title == "Could not delete poll"

    service.delete_poll.return_value = True
    ctl.delete(make_poll("PUBLISHED"))
    assert ctl.status_message == "Poll deleted: Lunch Survey"


def test_load_results(service, runner, session):
    service.get_results.return_value = PollResults("Lunch Survey", 1)
    ctl = PollsController(service, runner, session)
    ctl.load_results(9)
    assert ctl.results.total_responses == 1


def test_subscribers_notified(service, runner, session):
    ctl = PollsController(service, runner, session)
    seen = []
    unsubscribe = ctl.subscribe(lambda c: seen.append(c.my_polls_label))
    ctl.refresh_my_polls()
    unsubscribe()
    ctl.refresh_my_polls()
    assert seen == ["0 polls"]


# ============================================================
# Take-poll form
# ============================================================

QUESTIONS = [
    PollQuestion(1, "Favorite lunch?", "MULTIPLE_CHOICE", ["Pizza", "Tacos"]),
    PollQuestion(2, "Toppings", "CHECKBOX", ["Cheese", "Olives"]),
    PollQuestion(3, "Field trip?", "YES_NO"),
    PollQuestion(4, "Comments", "SHORT_TEXT"),
]


def test_form_answers_and_payload(service, runner, session):
    form = PollResponseForm(service, runner, session)
    form.set_poll(make_poll("PUBLISHED", questions=QUESTIONS))

    form.choose(0, "Pizza")
    form.choose(0, "Tacos")
    form.choose(1, "Cheese")
    form.choose(1, "Olives")
    form.choose(1, "Cheese")
    form.choose(2, "Yes")
    form.set_text(3, "More tacos")

    payload = form.build_payload()
    assert payload["respondentId"] == 42
    assert payload["respondentType"] == "TEACHER"
    assert payload["respondentName"] == "Ada Lovelace"
    assert [a["selectedOptions"] for a in payload["answers"]] == [["Tacos"], ["Olives"], ["Yes"], []]
    assert payload["answers"][3]["textAnswer"] == "More tacos"
    assert payload["answers"][0]["pollQuestion"] == {"id": 1}


def test_form_rejects_unknown_option(service, runner, session):
    form = PollResponseForm(service, runner, session)
    form.set_poll(make_poll("PUBLISHED", questions=QUESTIONS))
    with pytest.raises(ValueError):
        form.choose(0, "Sushi")


def test_form_submit_only_when_published(service, runner, session):
    form = PollResponseForm(service, runner, session)
    form.set_poll(make_poll("CLOSED", questions=QUESTIONS))

    assert form.submit() is False
    assert form.error_message == "This poll is not accepting responses"
    service.submit_response.assert_not_called()


def test_form_submit(service, runner, session):
    form = PollResponseForm(service, runner, session)
    form.set_poll(make_poll("PUBLISHED", questions=QUESTIONS))

    assert form.submit() is True
    assert form.submitted
    assert form.submit() is False
    assert service.submit_response.call_count == 1


def test_form_load_already_responded(service, runner, session):
    service.get_poll.return_value = make_poll("PUBLISHED", questions=QUESTIONS)
    service.has_responded.return_value = True
    form = PollResponseForm(service, runner, session)
    form.load(9)

    service.has_responded.assert_called_once_with(9, 42, "TEACHER")
    assert form.already_responded
    assert form.entries[2].options == ["Yes", "No"]
    assert form.error_message == "You have already responded to this poll"


def test_form_load_missing_poll(service, runner, session):
    service.get_poll.return_value = None
    service.has_responded.return_value = False
    form = PollResponseForm(service, runner, session)
    form.load(404)
    assert form.error_message == "Poll not found"


def test_form_busy_runner_allows_retry(service, runner, session):
    form = PollResponseForm(service, runner, session)
    form.set_poll(make_poll("PUBLISHED", questions=QUESTIONS))
    runner.saturated = True

    assert form.submit() is False
    assert not form.submitting
    assert form.error_message == "Busy, try again in a moment"
    service.submit_response.assert_not_called()

    runner.saturated = False
    assert form.submit() is True
    assert form.submitted


# ============================================================
# Create then answer, through the polls screen
# ============================================================

def test_create_then_answer_lunch_survey(service, runner, session):
    created = make_poll()
    published = make_poll("PUBLISHED", questions=QUESTIONS[:1])
    service.create_poll.return_value = created
    service.get_my_polls.return_value = [created]
    service.get_active_polls.return_value = [published]
    service.get_poll.return_value = published
    service.has_responded.return_value = False
    polls = PollsController(service, runner, session)

    editor = polls.new_editor()
    editor.draft.title = "Lunch Survey"
    editor.add_question("MULTIPLE_CHOICE", "Favorite lunch?", "Pizza\nTacos")
    assert editor.save()
    assert service.create_poll.call_args[0][0]["questions"][0]["options"] == ["Pizza", "Tacos"]
    assert polls.my_polls == [created]

    polls.refresh()
    service.get_active_polls.assert_called_with("TEACHERS")
    assert polls.active_polls_label == "1 poll"

    form = polls.new_response_form()
    form.load(polls.active_polls[0].poll_id)
    form.choose(0, "Tacos")
    assert form.submit()
    poll_id, payload = service.submit_response.call_args[0]
    assert poll_id == 9
    assert payload["answers"][0]["selectedOptions"] == ["Tacos"]
