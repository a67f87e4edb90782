"""
Device approval screen: refresh snapshot, gated transitions, filters.
"""

from unittest.mock import MagicMock

import pytest

from desk_core.api import ApiError
from desk_core.devices import DeviceManagementController
from desk_core.models import DeviceRegistration, DeviceStats


def device(device_id="d1", status="PENDING", name="Chromebook", student=""):
    return DeviceRegistration(device_id, device_name=name, status=status, student_id=student)


@pytest.fixture
def api():
    api = MagicMock()
    api.get_pending_devices.return_value = [device("d1"), device("d2", name="iPad")]
    api.get_active_devices.return_value = [device("d3", "APPROVED", "Laptop", "S-7")]
    api.get_device_stats.return_value = DeviceStats(3, 2, 1)
    api.approve_device.return_value = True
    api.reject_device.return_value = True
    api.revoke_device.return_value = True
    return api


@pytest.fixture
def ctl(api, runner):
    c = DeviceManagementController(api, runner)
    c.refresh_devices()
    api.reset_mock(return_value=False, side_effect=False)
    return c


# ============================================================
# Refresh
# ============================================================

def test_refresh_fills_lists(ctl):
    assert [d.device_id for d in ctl.pending] == ["d1", "d2"]
    assert [d.device_id for d in ctl.active] == ["d3"]
    assert [d.device_id for d in ctl.all_devices] == ["d1", "d2", "d3"]
    assert ctl.stats == DeviceStats(3, 2, 1)
    assert ctl.status_message.startswith("Devices refreshed at")


def test_refresh_failure_keeps_lists(ctl, api):
    api.get_active_devices.side_effect = ApiError("Cannot reach Ed-Games server")
    ctl.refresh_devices()

    assert len(ctl.all_devices) == 3
    assert ctl.status_message == "Error refreshing devices"
    assert ctl.last_alert.title == "Refresh Error"


def test_server_status_label(ctl, api):
    assert ctl.server_status_label.endswith("Checking...")
    api.is_server_reachable.return_value = False
    ctl.check_server_status()
    assert ctl.server_status_label == "Ed-Games Server: ● Offline"


# ============================================================
# Transitions
# ============================================================

def test_approve_requires_student_id(ctl, api, runner):
    runner.submitted.clear()
    assert ctl.approve(ctl.pending[0], "   ") is False
    api.approve_device.assert_not_called()
    assert runner.submitted == []


def test_approve_success_refetches(ctl, api):
    assert ctl.approve(ctl.pending[0], " S-9 ")

    api.approve_device.assert_called_once_with("d1", "S-9")
    assert ctl.last_alert.kind == "info"
    assert ctl.last_alert.message == "Device Chromebook approved for student S-9"
    api.get_pending_devices.assert_called_once()


def test_approve_refused_keeps_lists(ctl, api):
    api.approve_device.return_value = False
    before = list(ctl.all_devices)
    ctl.approve(ctl.pending[0], "S-9")

    assert ctl.all_devices == before
    assert ctl.status_message == "Failed to approve device"
    assert ctl.last_alert.kind == "error"
    api.get_pending_devices.assert_not_called()


def test_reject_uses_default_reason(ctl, api):
    ctl.reject(ctl.pending[1])
    api.reject_device.assert_called_once_with("d2", "Rejected by teacher")


def test_revoke_with_reason(ctl, api):
    ctl.revoke(ctl.active[0], "Lost device")
    api.revoke_device.assert_called_once_with("d3", "Lost device")


def test_illegal_transitions_send_nothing(ctl, api):
    assert ctl.revoke(ctl.pending[0]) is False
    assert ctl.status_message == "Cannot revoke a pending device"
    assert ctl.approve(ctl.active[0], "S-1") is False
    assert ctl.reject(device("d9", "REVOKED")) is False
    api.revoke_device.assert_not_called()
    api.approve_device.assert_not_called()
    api.reject_device.assert_not_called()


def test_transition_exception_is_error(ctl, api):
    api.revoke_device.side_effect = RuntimeError("socket closed")
    ctl.revoke(ctl.active[0])
    assert ctl.last_alert.kind == "error"
    assert "unexpected error" in ctl.last_alert.message


# ============================================================
# Filters
# ============================================================

def test_search_and_status_filter(ctl):
    ctl.set_search("ipad")
    assert [d.device_id for d in ctl.visible_pending()] == ["d2"]
    assert ctl.visible_active() == []

    ctl.set_search("")
    ctl.set_status_filter("APPROVED")
    assert [d.device_id for d in ctl.visible_all()] == ["d3"]


def test_approved_device_can_be_revoked_but_not_rejected(ctl, api):
    approved = ctl.active[0]
    assert ctl.reject(approved) is False
    assert ctl.status_message == "Cannot reject an approved device"
    api.reject_device.assert_not_called()

    assert ctl.revoke(approved)
    api.revoke_device.assert_called_once_with("d3", "Revoked by teacher")
