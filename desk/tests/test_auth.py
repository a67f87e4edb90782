"""
Login across the SIS, Ed-Games and Talk servers.
"""

from unittest.mock import MagicMock

import pytest

from desk_core.api import ApiError
from desk_core.auth import AuthenticationService
from desk_core.models import Student
from desk_core.roster import RosterCache
from desk_core.session import SessionManager


@pytest.fixture
def backends(tmp_path):
    b = MagicMock()
    b.admin.authenticate.return_value = True
    b.admin.teacher_id = 42
    b.admin.teacher_name = "A. Lovelace"
    b.admin.get_teacher_schedule.return_value = {"teacherId": 42, "firstName": "Ada", "lastName": "Lovelace"}
    b.admin.get_students.return_value = [Student("S-1"), Student("S-2")]
    b.edgames.authenticate.return_value = True
    b.talk.authenticate.return_value = False
    b.cache = RosterCache(tmp_path / "students.json")
    return b


@pytest.fixture
def auth(backends, clock):
    session = SessionManager(clock=clock)
    return AuthenticationService(session, backends.admin, backends.edgames, backends.talk, backends.cache)


def test_login_success(auth, backends):
    result = auth.login("  T100 ", "pw")

    assert result.success
    assert result.message == "Welcome, Ada Lovelace"
    assert result.teacher.employee_id == "T100"
    assert result.teacher.server_id == 42
    assert result.edgames_connected
    assert not result.talk_connected
    assert result.students_cached == 2
    assert len(backends.cache.load_all()) == 2


def test_blank_credentials(auth, backends):
    result = auth.login("", "pw")
    assert not result.success
    assert result.message == "Please enter your employee ID and password."
    backends.admin.authenticate.assert_not_called()


def test_bad_password(auth, backends):
    backends.admin.authenticate.return_value = False
    backends.admin.is_server_reachable.return_value = True
    result = auth.login("T100", "wrong")

    assert result.message == "Invalid employee ID or password."
    backends.edgames.authenticate.assert_not_called()


def test_server_down(auth, backends):
    backends.admin.authenticate.return_value = False
    backends.admin.is_server_reachable.return_value = False
    assert auth.login("T100", "pw").message == "Cannot reach the SIS server. Check your connection."


def test_schedule_and_cache_failures_do_not_block(auth, backends):
    backends.admin.get_teacher_schedule.side_effect = ApiError("SIS server returned 500", 500)
    backends.admin.get_students.side_effect = ApiError("SIS server returned 500", 500)
    result = auth.login("T100", "pw")

    assert result.success
    assert result.teacher.full_name == "A. Lovelace"
    assert result.students_cached == 0


def test_logout_clears_everything(auth, backends):
    auth.login("T100", "pw")
    auth.logout()

    backends.talk.logout.assert_called_once()
    backends.admin.clear_token.assert_called_once()
    backends.edgames.clear_token.assert_called_once()
    assert backends.admin.teacher_id is None
