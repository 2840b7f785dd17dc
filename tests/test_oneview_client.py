"""Tests for the OneView REST client."""
import json

import pytest
import responses

from oneview_driver.clients import OneViewClient
from oneview_driver.clients.tasks import CompletedTask, Task
from oneview_driver.errors import (
    HardwareNotFound,
    NoAvailableHardware,
    ProfileAlreadyExists,
    RemoteCallError,
    TaskFailed,
    TemplateNotFound,
)
from oneview_driver.models import PowerState

from conftest import HARDWARE_URI, NODE_NAME, OV_ENDPOINT, PROFILE_URI, SERIAL, make_hardware, make_profile

TEMPLATE_URI = "/rest/server-profile-templates/t-1"
TEMPLATE_NAME = "DOCKER_1.8_OVTEMP"


@pytest.fixture
def client():
    """OneView client that never sleeps between task polls."""
    return OneViewClient(
        endpoint=OV_ENDPOINT,
        username="admin",
        password="secret",
        task_timeout=5,
        poll_interval=0,
    )


@pytest.fixture
def mock_responses():
    """Enable responses mock with a successful login."""
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add(
            responses.POST,
            f"{OV_ENDPOINT}/rest/login-sessions",
            json={"sessionID": "ov-session"},
            status=200,
        )
        yield rsps


def _profile_body(**overrides):
    body = {
        "name": NODE_NAME,
        "uri": PROFILE_URI,
        "serialNumber": SERIAL,
        "serverHardwareUri": HARDWARE_URI,
        "connectionSettings": {
            "connections": [
                {"id": 1, "name": "public", "mac": "EA:78:CB:50:00:01", "portId": "Flb 1:1-a"},
            ],
        },
    }
    body.update(overrides)
    return body


def _hardware_body(power_state="Off", **overrides):
    body = {
        "uri": HARDWARE_URI,
        "name": "Encl1, bay 3",
        "serialNumber": SERIAL,
        "powerState": power_state,
        "state": "ProfileApplied",
        "mpHostInfo": {"mpIpAddresses": [{"type": "DHCP", "address": "192.0.2.13"}]},
    }
    body.update(overrides)
    return body


def _add_task(rsps, uri, state="Completed", errors=None):
    rsps.add(
        responses.GET,
        f"{OV_ENDPOINT}{uri}",
        json={"uri": uri, "taskState": state, "taskErrors": errors or []},
        status=200,
    )


# =============================================================================
# Session Tests
# =============================================================================


class TestSession:
    """Tests for login / logout."""

    def test_login_sets_auth_headers(self, client, mock_responses):
        """Login stores the session id in the Auth header."""
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}/rest/server-profiles",
                           json={"members": []}, status=200)

        client.get_profile_by_name(NODE_NAME)

        login_body = json.loads(mock_responses.calls[0].request.body)
        assert login_body["userName"] == "admin"
        assert login_body["authLoginDomain"] == "LOCAL"
        assert mock_responses.calls[1].request.headers["Auth"] == "ov-session"
        assert mock_responses.calls[1].request.headers["X-API-Version"] == "2000"
        assert client.is_connected

    def test_login_failure(self, client):
        with responses.RequestsMock() as rsps:
            rsps.add(responses.POST, f"{OV_ENDPOINT}/rest/login-sessions",
                     json={"message": "Invalid credentials"}, status=401)

            with pytest.raises(RemoteCallError, match="login"):
                client.ensure_connected()

        assert not client.is_connected

    def test_logout_discards_session(self, client, mock_responses):
        mock_responses.add(responses.DELETE, f"{OV_ENDPOINT}/rest/login-sessions", status=204)
        client.ensure_connected()

        client.session_logout()

        assert not client.is_connected
        assert mock_responses.calls[-1].request.method == "DELETE"

    def test_logout_failure_still_discards_session(self, client, mock_responses):
        mock_responses.add(responses.DELETE, f"{OV_ENDPOINT}/rest/login-sessions", status=500)
        client.ensure_connected()

        with pytest.raises(RemoteCallError, match="session_logout"):
            client.session_logout()

        assert not client.is_connected

    def test_logout_without_session_is_noop(self, client):
        client.session_logout()

    def test_refresh_version(self, client, mock_responses):
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}/rest/version",
                           json={"currentVersion": 800, "minimumVersion": 120}, status=200)

        assert client.refresh_version() == 800
        assert client.api_version == 800


# =============================================================================
# Profile Tests
# =============================================================================


class TestProfiles:

    def test_get_profile_by_name(self, client, mock_responses):
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}/rest/server-profiles",
                           json={"members": [_profile_body()]}, status=200)

        profile = client.get_profile_by_name(NODE_NAME)

        assert profile == make_profile(connections=profile.connections)
        assert profile.get_connection_by_name("public").mac == "EA:78:CB:50:00:01"
        assert "name%3D%27node-01%27" in mock_responses.calls[1].request.url

    def test_get_profile_not_found(self, client, mock_responses):
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}/rest/server-profiles",
                           json={"members": []}, status=200)

        profile = client.get_profile_by_name(NODE_NAME)

        assert profile.uri is None
        assert not profile.exists

    def test_follows_next_page(self, client, mock_responses):
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}/rest/server-profiles",
                           json={"members": [_profile_body(name="other")],
                                 "nextPageUri": "/rest/server-profiles?start=1&count=1"},
                           status=200)
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}/rest/server-profiles",
                           json={"members": [_profile_body()]}, status=200)

        assert client.get_profile_by_name(NODE_NAME).uri == PROFILE_URI

    def test_server_error(self, client, mock_responses):
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}/rest/server-profiles",
                           json={"message": "Internal error"}, status=500)

        with pytest.raises(RemoteCallError) as exc_info:
            client.get_profile_by_name(NODE_NAME)

        assert exc_info.value.status_code == 500
        assert "Internal error" in str(exc_info.value)

    def test_delete_profile_returns_task(self, client, mock_responses):
        mock_responses.add(responses.DELETE, f"{OV_ENDPOINT}{PROFILE_URI}",
                           headers={"Location": "/rest/tasks/t-del"}, status=202)
        _add_task(mock_responses, "/rest/tasks/t-del")

        task = client.submit_delete_profile(make_profile())

        assert isinstance(task, Task)
        assert task.uri == "/rest/tasks/t-del"
        assert task.wait()["taskState"] == "Completed"

    def test_delete_missing_profile(self, client, mock_responses):
        mock_responses.add(responses.DELETE, f"{OV_ENDPOINT}{PROFILE_URI}", status=404)

        task = client.submit_delete_profile(make_profile())

        assert isinstance(task, CompletedTask)
        assert task.wait() == {}

    def test_delete_profile_task_failure(self, client, mock_responses):
        mock_responses.add(responses.DELETE, f"{OV_ENDPOINT}{PROFILE_URI}",
                           headers={"Location": "/rest/tasks/t-del"}, status=202)
        _add_task(mock_responses, "/rest/tasks/t-del", state="Error",
                  errors=[{"message": "Profile is in use"}])

        with pytest.raises(TaskFailed, match="Profile is in use"):
            client.submit_delete_profile(make_profile()).wait()


# =============================================================================
# Create Machine Tests
# =============================================================================


class TestCreateMachine:

    def _add_template(self, rsps):
        rsps.add(responses.GET, f"{OV_ENDPOINT}/rest/server-profile-templates",
                 json={"members": [{
                     "name": TEMPLATE_NAME,
                     "uri": TEMPLATE_URI,
                     "serverHardwareTypeUri": "/rest/server-hardware-types/sht-1",
                     "enclosureGroupUri": "/rest/enclosure-groups/eg-1",
                 }]}, status=200)

    def test_creates_profile_on_free_hardware(self, client, mock_responses):
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}/rest/server-profiles",
                           json={"members": []}, status=200)
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}/rest/server-profiles",
                           json={"members": [_profile_body()]}, status=200)
        self._add_template(mock_responses)
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}/rest/server-hardware",
                           json={"members": [
                               _hardware_body(uri="/rest/server-hardware/busy", state="ProfileApplied"),
                               _hardware_body(power_state="On", state="NoProfileApplied"),
                           ]}, status=200)
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}{HARDWARE_URI}",
                           json=_hardware_body(power_state="On"), status=200)
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}{HARDWARE_URI}",
                           json=_hardware_body(power_state="Off"), status=200)
        mock_responses.add(responses.PUT, f"{OV_ENDPOINT}{HARDWARE_URI}/powerState",
                           headers={"Location": "/rest/tasks/t-power"}, status=202)
        _add_task(mock_responses, "/rest/tasks/t-power")
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}{TEMPLATE_URI}/new-profile",
                           json={"type": "ServerProfileV9", "serverProfileTemplateUri": TEMPLATE_URI},
                           status=200)
        mock_responses.add(responses.POST, f"{OV_ENDPOINT}/rest/server-profiles",
                           headers={"Location": "/rest/tasks/t-create"}, status=202)
        _add_task(mock_responses, "/rest/tasks/t-create")

        profile, hardware = client.create_machine(NODE_NAME, TEMPLATE_NAME)

        assert profile.uri == PROFILE_URI
        assert hardware.uri == HARDWARE_URI
        assert hardware.ilo_ip_address == "192.0.2.13"

        power_call = next(c for c in mock_responses.calls if c.request.method == "PUT")
        assert json.loads(power_call.request.body) == {"powerState": "Off", "powerControl": "MomentaryPress"}

        create_call = next(c for c in mock_responses.calls
                           if c.request.method == "POST" and "server-profiles" in c.request.url)
        body = json.loads(create_call.request.body)
        assert body["name"] == NODE_NAME
        assert body["serverHardwareUri"] == HARDWARE_URI
        assert body["serverProfileTemplateUri"] == TEMPLATE_URI

    def test_existing_profile(self, client, mock_responses):
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}/rest/server-profiles",
                           json={"members": [_profile_body()]}, status=200)

        with pytest.raises(ProfileAlreadyExists):
            client.create_machine(NODE_NAME, TEMPLATE_NAME)

    def test_missing_template(self, client, mock_responses):
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}/rest/server-profiles",
                           json={"members": []}, status=200)
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}/rest/server-profile-templates",
                           json={"members": []}, status=200)

        with pytest.raises(TemplateNotFound):
            client.create_machine(NODE_NAME, TEMPLATE_NAME)

    def test_no_free_hardware(self, client, mock_responses):
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}/rest/server-profiles",
                           json={"members": []}, status=200)
        self._add_template(mock_responses)
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}/rest/server-hardware",
                           json={"members": [_hardware_body(state="ProfileApplied")]}, status=200)

        with pytest.raises(NoAvailableHardware):
            client.create_machine(NODE_NAME, TEMPLATE_NAME)


# =============================================================================
# Hardware / Power Tests
# =============================================================================


class TestPower:

    def test_get_server_hardware(self, client, mock_responses):
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}{HARDWARE_URI}",
                           json=_hardware_body(power_state="On"), status=200)

        hardware = client.get_server_hardware(HARDWARE_URI)

        assert hardware.power_state == PowerState.ON
        assert hardware.serial_number == SERIAL

    def test_get_server_hardware_null_sections(self, client, mock_responses):
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}{HARDWARE_URI}",
                           json=_hardware_body(power_state="On", mpHostInfo=None), status=200)

        hardware = client.get_server_hardware(HARDWARE_URI)

        assert hardware.power_state == PowerState.ON
        assert hardware.ilo_ip_address == ""

    def test_get_server_hardware_missing(self, client, mock_responses):
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}{HARDWARE_URI}", status=404)

        assert not client.get_server_hardware(HARDWARE_URI).exists

    def test_get_server_hardware_without_uri(self, client):
        assert client.get_server_hardware(None).uri is None

    def test_power_on(self, client, mock_responses):
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}{HARDWARE_URI}",
                           json=_hardware_body(power_state="Off"), status=200)
        mock_responses.add(responses.PUT, f"{OV_ENDPOINT}{HARDWARE_URI}/powerState",
                           headers={"Location": "/rest/tasks/t-on"}, status=202)
        _add_task(mock_responses, "/rest/tasks/t-on")

        hardware = client.power_on(make_hardware())

        assert hardware.power_state == PowerState.ON
        body = json.loads(mock_responses.calls[2].request.body)
        assert body == {"powerState": "On", "powerControl": "MomentaryPress"}

    def test_power_on_when_already_on(self, client, mock_responses):
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}{HARDWARE_URI}",
                           json=_hardware_body(power_state="On"), status=200)

        hardware = client.power_on(make_hardware())

        assert hardware.power_state == PowerState.ON
        assert not any(c.request.method == "PUT" for c in mock_responses.calls)

    def test_forced_power_off(self, client, mock_responses):
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}{HARDWARE_URI}",
                           json=_hardware_body(power_state="On"), status=200)
        mock_responses.add(responses.PUT, f"{OV_ENDPOINT}{HARDWARE_URI}/powerState",
                           headers={"Location": "/rest/tasks/t-off"}, status=202)
        _add_task(mock_responses, "/rest/tasks/t-off")

        client.power_off(make_hardware(power_state=PowerState.ON), force=True)

        put = next(c for c in mock_responses.calls if c.request.method == "PUT")
        assert json.loads(put.request.body)["powerControl"] == "PressAndHold"

    def test_power_task_failure(self, client, mock_responses):
        mock_responses.add(responses.GET, f"{OV_ENDPOINT}{HARDWARE_URI}",
                           json=_hardware_body(power_state="Off"), status=200)
        mock_responses.add(responses.PUT, f"{OV_ENDPOINT}{HARDWARE_URI}/powerState",
                           headers={"Location": "/rest/tasks/t-on"}, status=202)
        _add_task(mock_responses, "/rest/tasks/t-on", state="Error",
                  errors=[{"message": "iLO not responding"}])

        with pytest.raises(TaskFailed, match="iLO not responding"):
            client.power_on(make_hardware())

    def test_power_on_missing_hardware(self, client):
        with pytest.raises(HardwareNotFound):
            client.power_on(make_hardware(uri=None))
