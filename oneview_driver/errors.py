"""
Driver error taxonomy.

Four families, matching how a failure should be handled by the caller:

- ConfigurationError: required settings missing, raised before any remote call
- ResolutionError: a record could not be found by name / URI
- RemoteCallError: a control-plane call failed (transport, HTTP status, task)
- ReadinessError: a call nominally succeeded but left the node unusable
"""

from typing import Optional


class DriverError(Exception):
    """Base class for all driver errors"""


# ============================================================================
# Configuration
# ============================================================================

class ConfigurationError(DriverError):
    """Required configuration is missing or invalid"""


# ============================================================================
# Resolution
# ============================================================================

class ResolutionError(DriverError):
    """A record could not be resolved on a control plane"""

    def __init__(self, name: str, message: Optional[str] = None):
        self.name = name
        super().__init__(message or f"Unable to resolve {name}")


class ProfileNotFound(ResolutionError):
    def __init__(self, name: str):
        super().__init__(
            name,
            f"Attempting to get machine profile information, unable to find machine in OneView: {name}"
        )


class HardwareNotFound(ResolutionError):
    def __init__(self, name: str):
        super().__init__(
            name,
            f"Attempting to get machine blade information, unable to find machine: {name}"
        )


class ConnectionNotFound(ResolutionError):
    def __init__(self, name: str, profile_name: str = ""):
        self.profile_name = profile_name
        super().__init__(
            name,
            f"Connection '{name}' not found on server profile '{profile_name}'"
        )


class TemplateNotFound(ResolutionError):
    def __init__(self, name: str):
        super().__init__(name, f"Server profile template not found: {name}")


class BuildPlanNotFound(ResolutionError):
    def __init__(self, name: str):
        super().__init__(name, f"OS build plan not found: {name}")


class NoAvailableHardware(ResolutionError):
    def __init__(self, name: str):
        super().__init__(name, f"No available server hardware for template: {name}")


# ============================================================================
# Remote calls
# ============================================================================

class RemoteCallError(DriverError):
    """
    A call against a control plane failed.

    Attributes:
        call: Name of the client operation that failed
        identifier: Name, URI or serial the call was made for
        status_code: HTTP status if the failure carried one
    """

    def __init__(self, call: str, identifier: str = "", message: str = "",
                 status_code: Optional[int] = None):
        self.call = call
        self.identifier = identifier
        self.status_code = status_code
        detail = f"{call}({identifier})" if identifier else call
        super().__init__(f"{detail} failed: {message}" if message else f"{detail} failed")


class ProfileAlreadyExists(RemoteCallError):
    def __init__(self, name: str):
        super().__init__("create_machine", name, "a server profile with this name already exists")


class TaskFailed(RemoteCallError):
    """A remote task / job finished in an error state"""

    def __init__(self, name: str, uri: str, messages=None):
        self.messages = list(messages or [])
        super().__init__(name, uri, "; ".join(self.messages) or "task ended in error")


class TaskTimeout(RemoteCallError):
    def __init__(self, name: str, uri: str, timeout: float):
        self.timeout = timeout
        super().__init__(name, uri, f"task did not complete within {timeout:.0f}s")


class KeyPairError(DriverError):
    """Local SSH key pair could not be created or read"""


class SSHCommandError(DriverError):
    """SSH connection or remote command failure"""

    def __init__(self, host: str, command: str = "", message: str = "", output: str = ""):
        self.host = host
        self.command = command
        self.output = output
        where = f"{host}: {command}" if command else host
        super().__init__(f"SSH {where} failed: {message}" if message else f"SSH {where} failed")


# ============================================================================
# Readiness
# ============================================================================

class ReadinessError(DriverError):
    """The node is in a state the orchestrator does not accept"""


class NotReady(ReadinessError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Server {name} was started but not ready, check ICsp status")


class AddressUnavailable(ReadinessError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"IP address is not set for {name}")


class RemoteOperationFailed(ReadinessError):
    """A remote call returned a falsy completion result"""
