"""
Lifecycle Orchestrator - drives one node through create / start / stop / remove.

Every operation re-resolves the node from OneView and ICsp before acting;
nothing learned in a previous call is trusted. The first failing step aborts
the operation and no compensating rollback is attempted: re-running
``remove`` continues a cleanup that stopped half way.

Only two steps are best-effort: the graceful OS shutdown before power off,
and the session logout after create / stop / remove / kill. Their failures
are logged as warnings and never replace the operation's own result.
"""

import logging
import os
from typing import Callable, Dict, Optional

from ..bootstrap import KeyPair, SSHSession
from ..clients import CustomizeServerRequest, ICSPClient, OneViewClient
from ..config import AppConfig, DriverConfig
from ..errors import (
    AddressUnavailable,
    DriverError,
    NotReady,
    ProfileNotFound,
    RemoteOperationFailed,
)
from ..models import LifecycleState, Node
from ..repositories import ClientFactory
from .node_resolver import NodeResolver
from .state_projector import StateProjector

logger = logging.getLogger(__name__)

# Passwords tried after the key when opening the bootstrap SSH session
BOOTSTRAP_PASSWORDS = ("docker",)


class LifecycleOrchestrator:
    """
    Lifecycle operations for a single node.

    Design Pattern: Facade Pattern
    Hides the two control planes, the resolver and the SSH bootstrap behind
    the operations the host runtime calls.
    """

    def __init__(self,
                 config: DriverConfig,
                 hw_client: OneViewClient,
                 os_client: ICSPClient,
                 key_pair: Optional[KeyPair] = None,
                 ssh_session_factory: Callable[..., SSHSession] = SSHSession,
                 resolver: Optional[NodeResolver] = None):
        """
        Initialize orchestrator.

        Args:
            config: Driver configuration (machine name, credentials, plans)
            hw_client: OneView client
            os_client: ICsp client
            key_pair: Local SSH key pair, defaults to config.ssh_key_path
            ssh_session_factory: Builds SSH sessions to the node
            resolver: Node resolver, defaults to one over the two clients
        """
        self.config = config
        self.name = config.machine_name
        self._hw_client = hw_client
        self._os_client = os_client
        self._key_pair = key_pair or KeyPair(config.ssh_key_path)
        self._ssh_session_factory = ssh_session_factory
        self._resolver = resolver or NodeResolver(hw_client, os_client)
        self.public_key = ""

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def resolve(self) -> Node:
        return self._resolver.resolve(self.name)

    def get_address(self) -> str:
        """
        Public IPv4 of the node.

        Raises:
            AddressUnavailable: If ICsp has no public address (yet)
            ResolutionError: If the node cannot be resolved
        """
        logger.debug(f"GetIP... {self.name}")
        node = self.resolve()
        if not node.deployment.public_ipv4:
            raise AddressUnavailable(self.name)
        return node.deployment.public_ipv4

    def get_url(self) -> str:
        """Docker engine URL of the node"""
        return f"tcp://{self.get_address()}:{AppConfig.DOCKER_PORT}"

    def get_state(self) -> LifecycleState:
        """
        Current lifecycle state.

        Used for status polling: a node that cannot be resolved, or whose
        state cannot be read, reports LifecycleState.ERROR instead of raising.
        """
        logger.debug(f"GetState... {self.name}")
        try:
            return StateProjector.project_node(self.resolve())
        except DriverError as e:
            logger.error(f"Unable to get state of {self.name}: {e}")
            return LifecycleState.ERROR

    def get_ssh_hostname(self) -> str:
        return self.get_address()

    def get_ssh_username(self) -> str:
        return self.config.ssh_user

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    def pre_create_check(self) -> None:
        """
        Verify both appliances answer with a valid API version.

        Raises:
            RemoteOperationFailed: If an appliance reports no usable version
            RemoteCallError: If an appliance cannot be reached
        """
        for client in (self._hw_client, self._os_client):
            version = client.refresh_version()
            if version <= 0:
                raise RemoteOperationFailed(
                    f"Unable to get a valid version from {client.platform_name}, {version}")

    def create(self) -> None:
        """
        Create the node: profile + hardware in OneView, OS through ICsp,
        then install the public key over SSH.
        """
        try:
            logger.info("Generating SSH keys...")
            self.public_key = self._key_pair.generate()

            logger.debug(f"OneView Endpoint is: {self.config.oneview.endpoint}")
            logger.debug(f"ICsp Endpoint is: {self.config.icsp.endpoint}")
            self._hw_client.create_machine(self.name, self.config.server_template)

            node = self.resolve()

            # power off, customization brings the server online
            self._hw_client.power_off(node.hardware)

            request = CustomizeServerRequest(
                hostname=self.name,
                serial_number=node.profile.serial_number or node.hardware.deployment_serial(),
                ilo_user=self.config.ilo_user,
                ilo_password=self.config.ilo_password,
                ilo_address=node.hardware.ilo_ip_address,
                ilo_port=self.config.ilo_port,
                build_plan=self.config.os_build_plan,
                public_slot_id=self.config.public_slot_id,
                public_mac=self._public_mac(node),
                custom_attributes=self._custom_attributes(),
            )
            self._os_client.customize_server(request)

            address = self.get_address()
            self._install_public_key(address)
            logger.info(f"{AppConfig.DRIVER_NAME}, Completed all create steps, docker provisioning will continue.")
        finally:
            self.close_all()

    def start(self) -> None:
        """
        Power the node on and check ICsp manages it.

        Raises:
            NotReady: Power on succeeded but ICsp does not report the server as managed
        """
        logger.info(f"Starting ... {self.name}")
        node = self.resolve()

        self._hw_client.power_on(node.hardware)

        # ICsp registers blades under the virtual serial, the same key resolve() uses
        if not self._os_client.is_server_managed(node.hardware.deployment_serial()):
            raise NotReady(self.name)

    def stop(self) -> None:
        """Shut the OS down (best effort), then power the hardware off"""
        logger.info(f"Stop ... {self.name}")
        try:
            self._graceful_shutdown()
            node = self.resolve()
            self._hw_client.power_off(node.hardware)
        finally:
            self.close_all()

    def restart(self) -> None:
        logger.debug("Restarting...")
        self.stop()
        self.start()

    def kill(self) -> None:
        """Hard power off, without the graceful OS shutdown"""
        logger.info(f"Killing ... {self.name}")
        try:
            node = self.resolve()
            self._hw_client.power_off(node.hardware, force=True)
        finally:
            self.close_all()

    def remove(self) -> None:
        """
        Remove the node: local keys, ICsp server, then the OneView profile.

        A node whose profile is already gone counts as removed, so a remove
        that failed part way can simply be run again.

        Raises:
            RemoteOperationFailed: If ICsp does not confirm the server deletion
            TaskFailed: If the profile deletion task fails
        """
        logger.info(f"Removing ... {self.name}")
        try:
            self._key_pair.delete()

            try:
                self.stop()
                node = self.resolve()
            except ProfileNotFound:
                logger.info(f"No server profile for {self.name}, nothing left to remove")
                return

            if node.deployment.exists:
                if not self._os_client.delete_server(node.deployment.mid):
                    raise RemoteOperationFailed(
                        f"Unable to delete the server from ICsp : {self.name}, {node.deployment.mid}")
                logger.info(f"Deleted ICsp server {node.deployment.mid} for {self.name}")
            else:
                logger.info(f"No ICsp server for {self.name}, skipping ICsp delete")

            self._hw_client.submit_delete_profile(node.profile).wait()
            logger.info(f"Deleted server profile {self.name}")
        finally:
            self.close_all()

    def close_all(self) -> None:
        """Log out of both appliances; failures are only logged"""
        for client in (self._hw_client, self._os_client):
            try:
                client.session_logout()
            except DriverError as e:
                logger.warning(f"{client.platform_name} Session Logout : {e}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _custom_attributes(self) -> Dict[str, str]:
        return {
            "docker_user": self.config.ssh_user,
            "public_key": self.public_key,
            "proxy_enable": os.getenv("proxy_enable") or "false",
            "proxy_config": os.getenv("proxy_config", ""),
            "docker_hostname": f"{self.name}-@server_name@",
            "interface": "@interface@",  # populated later by ICsp
        }

    def _public_mac(self, node: Node) -> str:
        """
        MAC of the configured public connection.

        Empty when no connection name is configured, so ICsp falls back to
        the public slot id.

        Raises:
            ConnectionNotFound: The name matches no connection on the profile
        """
        if not self.config.public_connection_name:
            return ""
        return node.profile.get_connection_by_name(self.config.public_connection_name).mac

    def _ssh_session(self, host: str) -> SSHSession:
        return self._ssh_session_factory(
            user=self.config.ssh_user,
            host=host,
            port=self.config.ssh_port,
            key_path=str(self._key_pair.private_path),
            passwords=BOOTSTRAP_PASSWORDS,
        )

    def _install_public_key(self, address: str) -> None:
        """Overwrite the SSH user's authorized_keys with our public key"""
        public_key = self._key_pair.read_public_key()
        command = (
            f"printf '%s' '{public_key}' | "
            f"tee /home/{self.config.ssh_user}/.ssh/authorized_keys"
        )
        with self._ssh_session(address) as session:
            session.run(command)

    def _graceful_shutdown(self) -> None:
        try:
            with self._ssh_session(self.get_ssh_hostname()) as session:
                session.run(AppConfig.SHUTDOWN_COMMAND)
        except DriverError as e:
            logger.warning(f"Problem shutting down gracefully : {e}")


def initialize_orchestrator(machine_name: str, config: Optional[DriverConfig] = None) -> LifecycleOrchestrator:
    """
    Initialize an orchestrator from environment variables.

    Args:
        machine_name: Logical node name
        config: Configuration to use instead of the environment

    Returns:
        Configured LifecycleOrchestrator instance

    Raises:
        ConfigurationError: If required settings are missing
    """
    config = config or DriverConfig.from_env(machine_name)
    config.validate()

    hw_client, os_client = ClientFactory.create_pair(config)
    return LifecycleOrchestrator(config, hw_client, os_client)
