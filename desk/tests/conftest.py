"""
Shared fixtures. No network and no display: the HTTP session is a MagicMock,
background work runs inline, and timers advance by hand.
"""

import json
from unittest.mock import MagicMock

import pytest

from desk_core import http_client
from desk_core.tasks import CancelToken
from desk_core.models import Teacher
from desk_core.session import SessionManager


# --- Runner / timers ---

class InlineRunner:
    """TaskRunner stand-in: runs fn() immediately and delivers on the calling thread."""

    def __init__(self):
        self.submitted = []
        self.saturated = False

    def submit(self, key, fn, on_success=None, on_error=None):
        self.submitted.append(key)
        if self.saturated:
            return None
        token = CancelToken()
        try:
            result = fn()
        except Exception as e:
            if on_error is not None:
                on_error(e)
        else:
            if on_success is not None:
                on_success(result)
        return token

    def keys(self, name):
        return [k for k in self.submitted if f".{name}" in k]


class FakeRoot:
    """Tk root stand-in with a manual clock for after()/after_cancel()."""

    def __init__(self):
        self.now_ms = 0
        self._next_id = 0
        self._timers = {}       # id -> (due_ms, fn)

    def after(self, ms, fn):
        self._next_id += 1
        after_id = f"after#{self._next_id}"
        self._timers[after_id] = (self.now_ms + ms, fn)
        return after_id

    def after_cancel(self, after_id):
        self._timers.pop(after_id, None)

    @property
    def scheduled(self):
        return len(self._timers)

    def advance(self, ms):
        """Move the clock forward, firing due timers in order (including re-armed ones)."""
        target = self.now_ms + ms
        while True:
            due = [(t, i) for i, (t, _fn) in self._timers.items() if t <= target]
            if not due:
                break
            due_ms, after_id = min(due)
            _t, fn = self._timers.pop(after_id)
            self.now_ms = due_ms
            fn()
        self.now_ms = target


@pytest.fixture
def runner():
    return InlineRunner()


@pytest.fixture
def root():
    return FakeRoot()


# --- HTTP ---

def make_response(status=200, data=None, text=None):
    resp = MagicMock()
    resp.status_code = status
    if data is None:
        resp.content = b""
        resp.json.side_effect = ValueError("no body")
    else:
        resp.content = json.dumps(data).encode()
        resp.json.return_value = data
    resp.text = text if text is not None else (json.dumps(data) if data is not None else "")
    return resp


@pytest.fixture
def http(monkeypatch):
    """Replace the shared session. Configure .request / .get / .post return values per test."""
    mock = MagicMock()
    monkeypatch.setattr(http_client, "http", mock)
    return mock


# --- Session ---

class Clock:
    def __init__(self, start=1_700_000_000.0):
        self.t = start

    def __call__(self):
        return self.t

    def advance(self, seconds):
        self.t += seconds


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def session(clock):
    s = SessionManager(clock=clock)
    s.login(Teacher(employee_id="T100", full_name="Ada Lovelace", server_id=42))
    return s
