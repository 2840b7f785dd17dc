"""
OS deployment (ICsp) server record.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union


class DeploymentPhase(Enum):
    """ICsp ``opswLifecycle`` values"""
    MANAGED = "MANAGED"
    PROVISIONING = "PROVISIONING"
    PROVISION_FAILED = "PROVISION_FAILED"
    UNPROVISIONED = "UNPROVISIONED"
    PRE_UNPROVISIONED = "PRE_UNPROVISIONED"
    DEACTIVATED = "DEACTIVATED"
    UNKNOWN = ""  # no record, or no lifecycle reported

    @classmethod
    def parse(cls, value: Optional[str]) -> Union['DeploymentPhase', str]:
        """Map a remote lifecycle value; unrecognised values are returned as-is"""
        if not value:
            return cls.UNKNOWN
        try:
            return cls(str(value).upper())
        except ValueError:
            return str(value)


PUBLIC_IP_ATTRIBUTE = "public_ip"
PUBLIC_INTERFACE_ATTRIBUTE = "public_interface"


@dataclass(frozen=True)
class Interface:
    """A network interface discovered on the deployed server"""
    slot: str = ""
    mac_address: str = ""
    ipv4_address: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> 'Interface':
        return cls(
            slot=data.get("slot") or "",
            mac_address=data.get("macAddr") or "",
            ipv4_address=data.get("ipv4Addr") or "",
        )


def parse_custom_attributes(items: List[dict], scope: str = "server") -> Dict[str, str]:
    """
    Flatten ICsp customAttributes into a key -> value dict.

    Args:
        items: ``customAttributes`` list from a server resource
        scope: Only values with this scope are kept

    Returns:
        Dict of attribute key to value
    """
    attributes: Dict[str, str] = {}
    for item in items or []:
        key = item.get("key")
        if not key:
            continue
        for value in item.get("values") or []:
            if value.get("scope", scope) == scope:
                attributes[key] = value.get("value") or ""
    return attributes


@dataclass(frozen=True)
class DeploymentRecord:
    """
    Immutable ICsp server record.

    ``DeploymentRecord.empty()`` stands for "no record yet", which is a
    legitimate state before the server has been customized.

    Attributes:
        mid: ICsp internal id, empty when there is no record
        uri: Server resource URI
        name: Server name in ICsp
        serial_number: Serial the record was matched on
        phase: Lifecycle phase (``opswLifecycle``)
        public_ipv4: Public address, empty until deployment completes
        custom_attributes: Server-scope custom attributes
        interfaces: Network interfaces reported by the server
    """
    mid: str = ""
    uri: str = ""
    name: str = ""
    serial_number: str = ""
    phase: Union[DeploymentPhase, str] = DeploymentPhase.UNKNOWN
    public_ipv4: str = ""
    custom_attributes: Dict[str, str] = field(default_factory=dict)
    interfaces: Tuple[Interface, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: dict) -> 'DeploymentRecord':
        attributes = parse_custom_attributes(data.get("customAttributes") or [])
        mid = data.get("mid")
        return cls(
            mid=str(mid) if mid is not None else "",
            uri=data.get("uri") or "",
            name=data.get("name") or "",
            serial_number=data.get("serialNumber") or "",
            phase=DeploymentPhase.parse(data.get("opswLifecycle")),
            public_ipv4=attributes.get(PUBLIC_IP_ATTRIBUTE, ""),
            custom_attributes=attributes,
            interfaces=tuple(Interface.from_dict(i) for i in data.get("interfaces") or []),
        )

    @classmethod
    def empty(cls) -> 'DeploymentRecord':
        return cls()

    @property
    def exists(self) -> bool:
        return bool(self.mid)

    @property
    def managed(self) -> bool:
        return self.phase == DeploymentPhase.MANAGED
