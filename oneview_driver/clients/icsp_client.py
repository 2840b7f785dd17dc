"""
HP Insight Control server provisioning (ICsp) client.

Covers the OS deployment side of a node: registering the server through its
iLO, attaching custom attributes, running an OS build plan and reading the
resulting lifecycle / public address.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List

from .base_client import RestClient
from .tasks import Job, Task
from ..errors import BuildPlanNotFound, RemoteOperationFailed
from ..models import DeploymentRecord, Interface
from ..models.deployment import PUBLIC_INTERFACE_ATTRIBUTE, PUBLIC_IP_ATTRIBUTE

logger = logging.getLogger(__name__)

SERVERS_URI = "/rest/os-deployment-servers"
BUILD_PLANS_URI = "/rest/os-deployment-build-plans"
JOBS_URI = "/rest/os-deployment-jobs"


@dataclass(frozen=True)
class CustomizeServerRequest:
    """
    Arguments for customize_server.

    Attributes:
        hostname: Machine name
        serial_number: Serial used to find the server once registered
        ilo_user: iLO user
        ilo_password: iLO password
        ilo_address: iLO IP address
        ilo_port: iLO port
        build_plan: OS build plan name
        public_slot_id: Slot of the public interface (used when public_mac is empty)
        public_mac: MAC of the public interface, overrides public_slot_id
        custom_attributes: Server-scope custom attributes to set before the build plan runs
    """
    hostname: str
    serial_number: str
    ilo_user: str
    ilo_password: str
    ilo_address: str
    ilo_port: int
    build_plan: str
    public_slot_id: int = 1
    public_mac: str = ""
    custom_attributes: Dict[str, str] = field(default_factory=dict)


def _normalize_mac(mac: str) -> str:
    return re.sub(r"[^0-9a-f]", "", (mac or "").lower())


class ICSPClient(RestClient):
    """ICsp client: OS deployment servers, build plans and jobs"""

    DEFAULT_API_VERSION = 108

    @property
    def platform_name(self) -> str:
        return "ICsp"

    def _make_task(self, uri: str, name: str) -> Task:
        return Job(self, uri, name, timeout=self.task_timeout, poll_interval=self.poll_interval)

    # ------------------------------------------------------------------
    # Servers
    # ------------------------------------------------------------------

    def get_server_by_serial(self, serial: str) -> DeploymentRecord:
        """
        Find the ICsp server record for a serial number.

        Returns:
            The record, or ``DeploymentRecord.empty()`` if ICsp has none
        """
        if not serial:
            return DeploymentRecord.empty()

        for member in self._get_members(SERVERS_URI, "get_server_by_serial", serial):
            if (member.get("serialNumber") or "").upper() == serial.upper():
                # Collection members are summaries; custom attributes need the full resource
                data = self._get_json(member["uri"], "get_server_by_serial", serial,
                                      allow_not_found=True) if member.get("uri") else member
                return DeploymentRecord.from_dict(data or member)
        return DeploymentRecord.empty()

    def is_server_managed(self, serial: str) -> bool:
        """Check that the server is registered and in the MANAGED lifecycle"""
        return self.get_server_by_serial(serial).managed

    def delete_server(self, mid: str) -> bool:
        """
        Delete a server from ICsp by its internal id.

        Returns:
            True if the server is gone (including when it was already gone),
            False if ICsp did not confirm the deletion
        """
        if not mid:
            return True
        response = self._request("DELETE", f"{SERVERS_URI}/{mid}", "delete_server", mid,
                                 allow_not_found=True)
        if response.status_code == 404:
            logger.info(f"ICsp server {mid} already deleted")
            return True
        if response.status_code == 202:
            self._task_from_response(response, "delete_server").wait()
            return True
        return response.status_code in (200, 204)

    def customize_server(self, request: CustomizeServerRequest) -> DeploymentRecord:
        """
        Register the server in ICsp, set custom attributes and apply a build plan.

        Once the build plan finishes, the public interface is chosen (by MAC if
        given, else by slot id) and recorded in the ``public_interface`` and
        ``public_ip`` custom attributes.

        Args:
            request: Customization arguments

        Returns:
            The server record after customization

        Raises:
            BuildPlanNotFound: If the OS build plan does not exist
            RemoteOperationFailed: If the server never appears in ICsp or the
                public interface cannot be found
            TaskFailed: If the registration or deployment job fails
        """
        build_plan_uri = self._get_build_plan_uri(request.build_plan)

        record = self.get_server_by_serial(request.serial_number)
        if not record.exists:
            self._add_server(request)
            record = self.get_server_by_serial(request.serial_number)
            if not record.exists:
                raise RemoteOperationFailed(
                    f"Server {request.hostname} ({request.serial_number}) did not appear in ICsp after registration")

        self._set_custom_attributes(record.uri, request.custom_attributes)

        logger.info(f"Applying OS build plan {request.build_plan} to {request.hostname}")
        job_body = {
            "osbpUris": [build_plan_uri],
            "serverData": [{"serverUri": record.uri}],
            "stopOnFailure": True,
        }
        response = self._request("POST", JOBS_URI, "customize_server", request.hostname, json=job_body)
        self._task_from_response(response, "apply_build_plan").wait()

        record = self.get_server_by_serial(request.serial_number)
        interface = self._select_public_interface(record, request)
        self._set_custom_attributes(record.uri, {
            PUBLIC_INTERFACE_ATTRIBUTE: json.dumps({
                "slot": interface.slot,
                "macAddr": interface.mac_address,
                "ipv4Addr": interface.ipv4_address,
            }),
            PUBLIC_IP_ATTRIBUTE: interface.ipv4_address,
        })
        logger.info(f"Customized {request.hostname}, public interface {interface.slot} {interface.ipv4_address}")
        return self.get_server_by_serial(request.serial_number)

    def _add_server(self, request: CustomizeServerRequest) -> None:
        logger.info(f"Registering {request.hostname} in ICsp through iLO {request.ilo_address}")
        body = {
            "ipAddress": request.ilo_address,
            "port": request.ilo_port,
            "username": request.ilo_user,
            "password": request.ilo_password,
        }
        response = self._request("POST", SERVERS_URI, "add_server", request.hostname, json=body)
        self._task_from_response(response, "add_server").wait()

    def _get_build_plan_uri(self, name: str) -> str:
        for member in self._get_members(BUILD_PLANS_URI, "get_build_plan", name):
            if member.get("name") == name:
                return member["uri"]
        raise BuildPlanNotFound(name)

    def _set_custom_attributes(self, server_uri: str, attributes: Dict[str, str]) -> None:
        """Merge server-scope custom attributes into the server resource"""
        if not attributes:
            return
        server = self._get_json(server_uri, "set_custom_attributes", server_uri)
        items: List[Dict] = [
            item for item in server.get("customAttributes") or []
            if item.get("key") not in attributes
        ]
        for key, value in attributes.items():
            items.append({"key": key, "values": [{"scope": "server", "value": value}]})
        server["customAttributes"] = items

        response = self._request("PUT", server_uri, "set_custom_attributes", server_uri, json=server)
        if response.status_code == 202:
            self._task_from_response(response, "set_custom_attributes").wait()

    @staticmethod
    def _select_public_interface(record: DeploymentRecord, request: CustomizeServerRequest) -> Interface:
        if request.public_mac:
            wanted = _normalize_mac(request.public_mac)
            for interface in record.interfaces:
                if _normalize_mac(interface.mac_address) == wanted:
                    return interface
            raise RemoteOperationFailed(
                f"No interface with MAC {request.public_mac} on ICsp server {request.hostname}")

        index = request.public_slot_id - 1
        if 0 <= index < len(record.interfaces):
            return record.interfaces[index]
        raise RemoteOperationFailed(
            f"No interface in slot {request.public_slot_id} on ICsp server {request.hostname}")
