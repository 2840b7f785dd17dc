"""Shared pytest fixtures for OneView driver tests."""
import os
import sys
from unittest.mock import MagicMock

import pytest

# Add project root to path
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _PROJECT_ROOT)

from oneview_driver.bootstrap import KeyPair, SSHSession
from oneview_driver.clients import ICSPClient, OneViewClient
from oneview_driver.clients.tasks import CompletedTask
from oneview_driver.config import DriverConfig, EndpointConfig
from oneview_driver.models import (
    Connection,
    DeploymentPhase,
    DeploymentRecord,
    Hardware,
    PowerState,
    Profile,
)
from oneview_driver.services import LifecycleOrchestrator

OV_ENDPOINT = "https://ov.example.test"
ICSP_ENDPOINT = "https://icsp.example.test"

NODE_NAME = "node-01"
PROFILE_URI = "/rest/server-profiles/p-1"
HARDWARE_URI = "/rest/server-hardware/h-1"
SERIAL = "CN7515049C"
PUBLIC_KEY = "ssh-rsa AAAAB3NzaC1yc2EAAAADAQABAAABAQ test"


# =============================================================================
# Records
# =============================================================================


def make_profile(**overrides) -> Profile:
    values = dict(
        name=NODE_NAME,
        uri=PROFILE_URI,
        serial_number=SERIAL,
        server_hardware_uri=HARDWARE_URI,
        connections=(
            Connection(name="public", mac="EA:78:CB:50:00:01", port_id="Flb 1:1-a", id=1),
            Connection(name="private", mac="EA:78:CB:50:00:02", port_id="Flb 1:2-a", id=2),
        ),
    )
    values.update(overrides)
    return Profile(**values)


def make_hardware(**overrides) -> Hardware:
    values = dict(
        uri=HARDWARE_URI,
        name="Encl1, bay 3",
        serial_number=SERIAL,
        power_state=PowerState.OFF,
        ilo_ip_address="192.0.2.13",
    )
    values.update(overrides)
    return Hardware(**values)


def make_deployment(**overrides) -> DeploymentRecord:
    values = dict(
        mid="1840001",
        uri="/rest/os-deployment-servers/1840001",
        name=NODE_NAME,
        serial_number=SERIAL,
        phase=DeploymentPhase.MANAGED,
        public_ipv4="10.1.2.3",
    )
    values.update(overrides)
    return DeploymentRecord(**values)


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def config(tmp_path):
    return DriverConfig(
        machine_name=NODE_NAME,
        oneview=EndpointConfig(endpoint=OV_ENDPOINT, username="admin", password="secret"),
        icsp=EndpointConfig(endpoint=ICSP_ENDPOINT, username="admin", password="secret"),
        ilo_user="docker",
        ilo_password="ilo-secret",
        ssh_key_path=str(tmp_path / "id_rsa"),
        task_poll_interval=0,
        task_timeout=5,
    )


@pytest.fixture(autouse=True)
def _clear_proxy_env(monkeypatch):
    monkeypatch.delenv("proxy_enable", raising=False)
    monkeypatch.delenv("proxy_config", raising=False)


# =============================================================================
# Mocked collaborators
# =============================================================================


@pytest.fixture
def hw_client():
    client = MagicMock(spec=OneViewClient)
    client.platform_name = "OneView"
    client.get_profile_by_name.return_value = make_profile()
    client.get_server_hardware.return_value = make_hardware()
    client.submit_delete_profile.return_value = MagicMock(spec=CompletedTask)
    client.refresh_version.return_value = 2000
    return client


@pytest.fixture
def os_client():
    client = MagicMock(spec=ICSPClient)
    client.platform_name = "ICsp"
    client.get_server_by_serial.return_value = make_deployment()
    client.is_server_managed.return_value = True
    client.delete_server.return_value = True
    client.refresh_version.return_value = 108
    return client


@pytest.fixture
def key_pair():
    keys = MagicMock(spec=KeyPair)
    keys.generate.return_value = PUBLIC_KEY
    keys.read_public_key.return_value = PUBLIC_KEY
    keys.private_path = "/tmp/keys/id_rsa"
    return keys


@pytest.fixture
def ssh_session():
    session = MagicMock(spec=SSHSession)
    session.__enter__.return_value = session
    return session


@pytest.fixture
def ssh_factory(ssh_session):
    return MagicMock(return_value=ssh_session)


@pytest.fixture
def orchestrator(config, hw_client, os_client, key_pair, ssh_factory):
    return LifecycleOrchestrator(
        config,
        hw_client,
        os_client,
        key_pair=key_pair,
        ssh_session_factory=ssh_factory,
    )
