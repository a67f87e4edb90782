"""
Poll screens: the create-poll dialog, the polls tables, and the take-poll dialog.

Lifecycle is DRAFT → PUBLISHED → CLOSED. Publish and close are checked
against the transition table before any request goes out; the server is
still the authority and may refuse.
"""

from dataclasses import dataclass, field
from typing import List

from .config import log
from .constants import (
    POLL_DRAFT, POLL_PUBLISHED, POLL_CLOSED, QUESTION_TYPES, QUESTION_CHECKBOX,
    QUESTION_SHORT_TEXT, QUESTION_YES_NO, YES_NO_OPTIONS, POLL_AUDIENCES, RESULTS_VISIBILITY,
    BUSY_MESSAGE,
)
from .controller import ViewController
from .models import PollDraft, QuestionDraft, can_transition_poll
from .validation import ValidationError, validate_poll_draft

ACTION_PUBLISH = "publish"
ACTION_CLOSE = "close"
ACTION_RESULTS = "results"
ACTION_DELETE = "delete"

_ACTIONS = {
    POLL_DRAFT: (ACTION_PUBLISH, ACTION_DELETE),
    POLL_PUBLISHED: (ACTION_CLOSE, ACTION_RESULTS),
    POLL_CLOSED: (ACTION_RESULTS, ACTION_DELETE),
}


def _count_label(n):
    return f"{n} poll" + ("" if n == 1 else "s")


# ─── Create-poll dialog ──────────────────────────────────────────

class PollEditor(ViewController):

    audiences = POLL_AUDIENCES
    visibility_options = RESULTS_VISIBILITY

    def __init__(self, poll_service, runner, session, on_saved=None):
        super().__init__(runner)
        self._polls = poll_service
        self._session = session
        self._on_saved = on_saved
        self.draft = PollDraft()
        self.error_message = ""
        self.saving = False
        self.saved_poll = None

    def add_question(self, question_type, text="", options_text=""):
        if question_type not in QUESTION_TYPES:
            raise ValueError(f"Unknown question type: {question_type}")
        entry = QuestionDraft(question_type, text=text, options_text=options_text)
        self.draft.questions.append(entry)
        self._changed()
        return entry

    def remove_question(self, index):
        del self.draft.questions[index]
        self._changed()

    def save(self) -> bool:
        """Validate and create. Returns False when validation blocked the request."""
        if self.saving:
            return False
        try:
            payload = validate_poll_draft(self.draft, self._session.teacher_name)
        except ValidationError as e:
            self.error_message = str(e)
            self._changed()
            return False

        self.error_message = ""
        self.saving = True
        self._changed()
        token = self._runner.submit(
            self._key("save"),
            lambda: self._polls.create_poll(payload),
            self._on_created,
            self._on_failed,
        )
        if token is None:
            self.saving = False
            self.error_message = BUSY_MESSAGE
            self._changed()
            return False
        return True

    def _on_created(self, poll):
        self.saving = False
        self.saved_poll = poll
        log.info("Poll '%s' saved as draft", self.draft.title.strip())
        self._changed()
        if self._on_saved is not None:
            self._on_saved(poll)

    def _on_failed(self, exc):
        self.saving = False
        self.error_message = f"Error: {self._describe(exc)}"
        self._changed()


# ─── Polls tables ────────────────────────────────────────────────

class PollsController(ViewController):
    """My polls (teacher-created) and polls open to teachers."""

    audience = "TEACHERS"

    def __init__(self, poll_service, runner, session):
        super().__init__(runner)
        self._polls = poll_service
        self._session = session
        self.my_polls = []
        self.active_polls = []
        self.results = None

    @property
    def my_polls_label(self):
        return _count_label(len(self.my_polls))

    @property
    def active_polls_label(self):
        return _count_label(len(self.active_polls))

    @staticmethod
    def available_actions(poll):
        return _ACTIONS.get(poll.status, ())

    def new_editor(self):
        return PollEditor(self._polls, self._runner, self._session, on_saved=lambda _p: self.refresh_my_polls())

    def new_response_form(self):
        return PollResponseForm(self._polls, self._runner, self._session)

    # ─── Refresh ─────────────────────────────────────────────

    def refresh(self):
        self.refresh_my_polls()
        self.refresh_active_polls()

    def refresh_my_polls(self):
        name = self._session.teacher_name
        self._runner.submit(
            self._key("mine"),
            lambda: self._polls.get_my_polls(name),
            self._set_my_polls,
            lambda e: self._set_status(f"Could not load your polls: {self._describe(e)}"),
        )

    def refresh_active_polls(self):
        self._runner.submit(
            self._key("active"),
            lambda: self._polls.get_active_polls(self.audience),
            self._set_active_polls,
            lambda e: self._set_status(f"Could not load active polls: {self._describe(e)}"),
        )

    def _set_my_polls(self, polls):
        self.my_polls = list(polls)
        self._changed()

    def _set_active_polls(self, polls):
        self.active_polls = list(polls)
        self._changed()

    # ─── Lifecycle actions ───────────────────────────────────

    def publish(self, poll) -> bool:
        return self._transition(poll, POLL_PUBLISHED, self._polls.publish_poll, "publish", "published")

    def close_poll(self, poll) -> bool:
        return self._transition(poll, POLL_CLOSED, self._polls.close_poll, "close", "closed")

    def _transition(self, poll, target, call, verb, done):
        if not can_transition_poll(poll.status, target):
            self._set_status(f"Cannot {verb} a {poll.status.lower()} poll")
            return False
        poll_id = poll.poll_id
        self._runner.submit(
            self._key(f"{verb}.{poll_id}"),
            lambda: call(poll_id),
            lambda _r: self._after_change(f"Poll {done}: {poll.title}"),
            lambda e: self._error(f"Could not {verb} poll", self._describe(e)),
        )
        return True

    def delete(self, poll):
        """Delete in any state; the server decides."""
        poll_id = poll.poll_id
        self._runner.submit(
            self._key(f"delete.{poll_id}"),
            lambda: self._polls.delete_poll(poll_id),
            lambda ok: self._after_change(f"Poll deleted: {poll.title}") if ok
            else self._error("Could not delete poll", f"The server did not delete '{poll.title}'."),
            lambda e: self._error("Could not delete poll", self._describe(e)),
        )

    def _after_change(self, message):
        self.status_message = message
        self._changed()
        self.refresh_my_polls()

    # ─── Results ─────────────────────────────────────────────

    def load_results(self, poll_id):
        self._runner.submit(
            self._key("results"),
            lambda: self._polls.get_results(poll_id),
            self._set_results,
            lambda e: self._error("Could not load results", self._describe(e)),
        )

    def _set_results(self, results):
        self.results = results
        self._changed()


# ─── Take-poll dialog ────────────────────────────────────────────

@dataclass
class AnswerEntry:
    question_id: object
    question_type: str
    text: str
    options: List[str] = field(default_factory=list)
    selected: List[str] = field(default_factory=list)
    text_answer: str = ""

    @property
    def multi(self) -> bool:
        return self.question_type == QUESTION_CHECKBOX


class PollResponseForm(ViewController):

    respondent_type = "TEACHER"

    def __init__(self, poll_service, runner, session):
        super().__init__(runner)
        self._polls = poll_service
        self._session = session
        self.poll = None
        self.entries = []
        self.already_responded = False
        self.error_message = ""
        self.submitting = False
        self.submitted = False

    def load(self, poll_id):
        teacher_id = self._session.teacher_id

        def fetch():
            poll = self._polls.get_poll(poll_id)
            responded = self._polls.has_responded(poll_id, teacher_id, self.respondent_type)
            return poll, responded

        self._runner.submit(
            self._key("load"), fetch, self._on_loaded,
            lambda e: self._fail(f"Could not load poll: {self._describe(e)}"),
        )

    def _on_loaded(self, result):
        poll, responded = result
        if poll is None:
            self._fail("Poll not found")
            return
        self.set_poll(poll)
        self.already_responded = responded
        if responded:
            self.error_message = "You have already responded to this poll"
        self._changed()

    def set_poll(self, poll):
        self.poll = poll
        self.entries = []
        for q in poll.questions:
            options = list(q.options)
            if q.question_type == QUESTION_YES_NO and not options:
                options = list(YES_NO_OPTIONS)
            if q.question_type == QUESTION_SHORT_TEXT:
                options = []
            self.entries.append(AnswerEntry(q.question_id, q.question_type, q.text, options))
        self._changed()

    # ─── Answering ───────────────────────────────────────────

    def choose(self, index, option):
        """Select an option. Single-choice questions replace; checkboxes toggle."""
        entry = self.entries[index]
        if option not in entry.options:
            raise ValueError(f"{option!r} is not an option for question {index + 1}")
        if entry.multi:
            if option in entry.selected:
                entry.selected.remove(option)
            else:
                entry.selected.append(option)
        else:
            entry.selected = [option]
        self._changed()

    def set_text(self, index, text):
        self.entries[index].text_answer = text
        self._changed()

    def build_payload(self):
        answers = []
        for entry in self.entries:
            answer = {"pollQuestion": {"id": entry.question_id}}
            if entry.question_type == QUESTION_SHORT_TEXT:
                answer["textAnswer"] = entry.text_answer
                answer["selectedOptions"] = []
            else:
                answer["selectedOptions"] = list(entry.selected)
            answers.append(answer)
        return {
            "respondentId": self._session.teacher_id,
            "respondentType": self.respondent_type,
            "respondentName": self._session.teacher_name,
            "answers": answers,
        }

    def submit(self) -> bool:
        if self.poll is None or self.poll.status != POLL_PUBLISHED:
            self._fail("This poll is not accepting responses")
            return False
        if self.submitting or self.submitted:
            return False
        payload = self.build_payload()
        poll_id = self.poll.poll_id
        self.submitting = True
        self.error_message = ""
        self._changed()
        token = self._runner.submit(
            self._key("submit"),
            lambda: self._polls.submit_response(poll_id, payload),
            self._on_submitted,
            self._on_submit_failed,
        )
        if token is None:
            self.submitting = False
            self._fail(BUSY_MESSAGE)
            return False
        return True

    def _on_submitted(self, _result):
        self.submitting = False
        self.submitted = True
        self._changed()

    def _on_submit_failed(self, exc):
        self.submitting = False
        self._fail(f"Error: {self._describe(exc)}")

    def _fail(self, message):
        self.error_message = message
        self._changed()
