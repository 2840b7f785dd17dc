"""
Server profile data model - Value Object pattern.
Immutable view of a OneView server profile and its network connections.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..errors import ConnectionNotFound


@dataclass(frozen=True)
class Connection:
    """
    A named network connection defined on a server profile.

    Attributes:
        name: Connection name from the profile / template
        mac: MAC address assigned to the connection
        port_id: Physical port (e.g. 'Mezz 3:1-a')
        network_uri: URI of the attached network
        id: Connection id within the profile
    """
    name: str
    mac: str = ""
    port_id: str = ""
    network_uri: str = ""
    id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'Connection':
        return cls(
            name=data.get("name") or "",
            mac=data.get("mac") or "",
            port_id=data.get("portId") or "",
            network_uri=data.get("networkUri") or "",
            id=data.get("id"),
        )


@dataclass(frozen=True)
class Profile:
    """
    Immutable server profile data.

    A profile with ``uri=None`` is the "not found" value returned by
    name lookups.

    Attributes:
        name: Profile name (the logical node name)
        uri: Profile URI, None until the profile exists
        serial_number: Serial number reported on the profile
        server_hardware_uri: URI of the hardware the profile is bound to
        connections: Network connections defined on the profile
        state: OneView profile state (Normal, Creating, Deleting, ...)
        status: OneView health status (OK, Warning, Critical, ...)
    """
    name: str
    uri: Optional[str] = None
    serial_number: str = ""
    server_hardware_uri: Optional[str] = None
    connections: Tuple[Connection, ...] = field(default_factory=tuple)
    state: str = ""
    status: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> 'Profile':
        """
        Build a profile from a OneView server-profile resource.

        Newer API versions nest connections under ``connectionSettings``.
        """
        raw_connections = (data.get("connectionSettings") or {}).get("connections")
        if raw_connections is None:
            raw_connections = data.get("connections") or []

        return cls(
            name=data.get("name") or "",
            uri=data.get("uri") or None,
            serial_number=data.get("serialNumber") or "",
            server_hardware_uri=data.get("serverHardwareUri") or None,
            connections=tuple(Connection.from_dict(c) for c in raw_connections),
            state=data.get("state") or "",
            status=data.get("status") or "",
        )

    @classmethod
    def not_found(cls, name: str) -> 'Profile':
        return cls(name=name)

    @property
    def exists(self) -> bool:
        return self.uri is not None

    def get_connection_by_name(self, name: str) -> Connection:
        """
        Find a connection by its name.

        Raises:
            ConnectionNotFound: If no connection on this profile has that name
        """
        for connection in self.connections:
            if connection.name == name:
                return connection
        raise ConnectionNotFound(name, self.name)
