"""
Server hardware data model.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class PowerState(Enum):
    """Power states reported by OneView"""
    ON = "On"
    OFF = "Off"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> Union['PowerState', str]:
        """
        Map a remote power state to the enum.

        Transitional values (PoweringOn, Resetting, ...) are returned as the
        raw string so callers can tell them apart from the known states.
        """
        if value is None:
            return cls.UNKNOWN
        for member in cls:
            if member.value.lower() == str(value).lower():
                return member
        return str(value)


# Preferred order when picking the iLO address from mpIpAddresses
_MP_ADDRESS_PREFERENCE = ("Static", "DHCP", "SLAAC", "LinkLocal")


@dataclass(frozen=True)
class Hardware:
    """
    Immutable server hardware data.

    Attributes:
        uri: Hardware URI, None when the lookup found nothing
        name: Hardware name (enclosure, bay)
        serial_number: Physical serial number
        virtual_serial_number: Virtual serial, set on virtualized / partitioned hardware
        power_state: Current power state
        ilo_ip_address: Management processor (iLO) address
        model: Hardware model
        state: OneView hardware state (NoProfileApplied, ProfileApplied, ...)
    """
    uri: Optional[str] = None
    name: str = ""
    serial_number: str = ""
    virtual_serial_number: Optional[str] = None
    power_state: Union[PowerState, str] = PowerState.UNKNOWN
    ilo_ip_address: str = ""
    model: str = ""
    state: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> 'Hardware':
        return cls(
            uri=data.get("uri") or None,
            name=data.get("name") or "",
            serial_number=data.get("serialNumber") or "",
            virtual_serial_number=data.get("virtualSerialNumber") or None,
            power_state=PowerState.parse(data.get("powerState")),
            ilo_ip_address=cls._extract_ilo_ip(data),
            model=data.get("model") or "",
            state=data.get("state") or "",
        )

    @classmethod
    def not_found(cls) -> 'Hardware':
        return cls()

    @staticmethod
    def _extract_ilo_ip(data: dict) -> str:
        """Extract iLO IP from hardware data"""
        addresses = (data.get("mpHostInfo") or {}).get("mpIpAddresses") or []
        for address_type in _MP_ADDRESS_PREFERENCE:
            for ip_info in addresses:
                if ip_info.get("type") == address_type and ip_info.get("address"):
                    return ip_info["address"]
        # API versions before mpHostInfo
        return data.get("mpIpAddress") or ""

    @property
    def exists(self) -> bool:
        return self.uri is not None

    def deployment_serial(self) -> str:
        """Serial used to find this machine on ICsp"""
        if self.virtual_serial_number:
            return self.virtual_serial_number
        return self.serial_number

    def with_power_state(self, power_state: Union[PowerState, str]) -> 'Hardware':
        """Create a new instance with the power state replaced (immutable update)"""
        return Hardware(
            uri=self.uri,
            name=self.name,
            serial_number=self.serial_number,
            virtual_serial_number=self.virtual_serial_number,
            power_state=power_state,
            ilo_ip_address=self.ilo_ip_address,
            model=self.model,
            state=self.state,
        )
