import logging
from typing import Dict, Optional, Tuple

from .base_client import RestClient
from .tasks import CompletedTask, Task
from ..errors import (
    HardwareNotFound,
    NoAvailableHardware,
    ProfileAlreadyExists,
    TemplateNotFound,
)
from ..models import Hardware, PowerState, Profile

logger = logging.getLogger(__name__)

SERVER_PROFILES_URI = "/rest/server-profiles"
SERVER_PROFILE_TEMPLATES_URI = "/rest/server-profile-templates"
SERVER_HARDWARE_URI = "/rest/server-hardware"

# Hardware that can take a new profile
AVAILABLE_HARDWARE_STATE = "NoProfileApplied"


class OneViewClient(RestClient):
    """HP OneView client: server profiles, server hardware and power state"""

    DEFAULT_API_VERSION = 2000

    @property
    def platform_name(self) -> str:
        return "OneView"

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def get_profile_by_name(self, name: str) -> Profile:
        """
        Look up a server profile by name.

        Returns:
            The profile, or ``Profile.not_found(name)`` (uri is None)
        """
        members = self._get_members(SERVER_PROFILES_URI, "get_profile_by_name", name,
                                    params={"filter": f"name='{name}'"})
        for member in members:
            if member.get("name") == name:
                return Profile.from_dict(member)
        return Profile.not_found(name)

    def create_machine(self, name: str, template_name: str) -> Tuple[Profile, Hardware]:
        """
        Create a server profile from a template on the first free blade.

        Steps: find the template, pick hardware of the template's type and
        group with no profile applied, power it off, then create the profile
        and wait for the creation task.

        Args:
            name: Profile (machine) name
            template_name: Server profile template name

        Returns:
            (profile, hardware) as they are after creation

        Raises:
            ProfileAlreadyExists: If a profile with this name exists
            TemplateNotFound: If the template does not exist
            NoAvailableHardware: If no blade is free
        """
        if self.get_profile_by_name(name).exists:
            raise ProfileAlreadyExists(name)

        template = self._get_template_by_name(template_name)
        hardware = self._get_available_hardware(template, template_name)
        logger.info(f"Using server hardware {hardware.name} ({hardware.serial_number}) for {name}")

        self.power_off(hardware)

        new_profile = self._get_json(f"{template['uri']}/new-profile", "create_machine", name)
        new_profile["name"] = name
        new_profile["serverHardwareUri"] = hardware.uri

        response = self._request("POST", SERVER_PROFILES_URI, "create_machine", name, json=new_profile)
        self._task_from_response(response, "create_profile").wait()
        logger.info(f"Created server profile {name} from template {template_name}")

        profile = self.get_profile_by_name(name)
        return profile, self.get_server_hardware(profile.server_hardware_uri)

    def submit_delete_profile(self, profile: Profile) -> Task:
        """
        Submit deletion of a server profile.

        Returns:
            Task to wait on; already completed if the profile is gone
        """
        if not profile.uri:
            return CompletedTask(self, "delete_profile")
        response = self._request("DELETE", profile.uri, "submit_delete_profile", profile.name,
                                 allow_not_found=True)
        if response.status_code == 404:
            logger.info(f"Server profile {profile.name} already deleted")
            return CompletedTask(self, "delete_profile")
        logger.info(f"Submitted delete of server profile {profile.name}")
        return self._task_from_response(response, "delete_profile")

    def _get_template_by_name(self, template_name: str) -> Dict:
        members = self._get_members(SERVER_PROFILE_TEMPLATES_URI, "get_template", template_name,
                                    params={"filter": f"name='{template_name}'"})
        for member in members:
            if member.get("name") == template_name:
                return member
        raise TemplateNotFound(template_name)

    def _get_available_hardware(self, template: Dict, template_name: str) -> Hardware:
        filters = []
        if template.get("serverHardwareTypeUri"):
            filters.append(f"serverHardwareTypeUri='{template['serverHardwareTypeUri']}'")
        if template.get("enclosureGroupUri"):
            filters.append(f"serverGroupUri='{template['enclosureGroupUri']}'")

        members = self._get_members(SERVER_HARDWARE_URI, "get_available_hardware", template_name,
                                    params={"filter": filters} if filters else None)
        for member in members:
            if member.get("state") == AVAILABLE_HARDWARE_STATE:
                return Hardware.from_dict(member)
        raise NoAvailableHardware(template_name)

    # ------------------------------------------------------------------
    # Hardware
    # ------------------------------------------------------------------

    def get_server_hardware(self, uri: Optional[str]) -> Hardware:
        """
        Get server hardware by URI.

        Returns:
            The hardware, or ``Hardware.not_found()`` (uri is None)
        """
        if not uri:
            return Hardware.not_found()
        data = self._get_json(uri, "get_server_hardware", uri, allow_not_found=True)
        if not data:
            return Hardware.not_found()
        return Hardware.from_dict(data)

    def get_power_state(self, hardware: Hardware):
        """Read the current power state of the hardware"""
        current = self.get_server_hardware(hardware.uri)
        if not current.exists:
            raise HardwareNotFound(hardware.name or str(hardware.uri))
        return current.power_state

    def power_on(self, hardware: Hardware) -> Hardware:
        return self._set_power_state(hardware, PowerState.ON, "MomentaryPress")

    def power_off(self, hardware: Hardware, force: bool = False) -> Hardware:
        """
        Power off the hardware.

        Args:
            hardware: Target hardware
            force: Hold the power button instead of a momentary press
        """
        return self._set_power_state(hardware, PowerState.OFF, "PressAndHold" if force else "MomentaryPress")

    def _set_power_state(self, hardware: Hardware, target: PowerState, control: str) -> Hardware:
        if not hardware.uri:
            raise HardwareNotFound(hardware.name)

        if self.get_power_state(hardware) == target:
            logger.debug(f"{hardware.name} already powered {target.value}")
            return hardware.with_power_state(target)

        logger.info(f"Powering {target.value.lower()} {hardware.name}")
        response = self._request(
            "PUT", f"{hardware.uri}/powerState", f"power_{target.value.lower()}", hardware.name,
            json={"powerState": target.value, "powerControl": control},
        )
        self._task_from_response(response, f"power_{target.value.lower()}").wait()
        return hardware.with_power_state(target)
