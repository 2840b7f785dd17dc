"""
Node Resolver - joins OneView and ICsp records into one Node.

profile (by name) -> hardware (by the profile's hardware URI) ->
ICsp server (by virtual serial, else serial).

Nothing is cached: every call reads the control planes again, so two calls
against unchanged remote state return equal Node values.
"""

import logging

from ..errors import HardwareNotFound, ProfileNotFound
from ..models import Node

logger = logging.getLogger(__name__)


class NodeResolver:
    """Resolve a logical node name to its (profile, hardware, deployment) triple"""

    def __init__(self, hw_client, os_client):
        """
        Args:
            hw_client: OneView client
            os_client: ICsp client
        """
        self._hw_client = hw_client
        self._os_client = os_client

    def resolve(self, name: str) -> Node:
        """
        Resolve a node.

        An ICsp record that does not exist yet is not an error here; the Node
        carries an empty DeploymentRecord and callers decide whether that is
        acceptable.

        Raises:
            ProfileNotFound: No profile with this name
            HardwareNotFound: The profile's hardware cannot be found
            RemoteCallError: Any of the lookups failed
        """
        logger.debug(f"Resolving node {name}")

        profile = self._hw_client.get_profile_by_name(name)
        if profile.uri is None:
            raise ProfileNotFound(name)

        hardware = self._hw_client.get_server_hardware(profile.server_hardware_uri)
        if hardware.uri is None:
            raise HardwareNotFound(name)

        serial = hardware.deployment_serial()
        deployment = self._os_client.get_server_by_serial(serial)
        if not deployment.exists:
            logger.debug(f"No ICsp server for {name} (serial {serial})")

        return Node(name=name, profile=profile, hardware=hardware, deployment=deployment)
