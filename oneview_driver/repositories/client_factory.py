"""
Client Factory - Factory Pattern implementation.
Creates control-plane client instances from driver configuration.
"""

import logging
from typing import Dict, Tuple, Type

from ..clients import ControlPlane, ICSPClient, OneViewClient, RestClient
from ..config import DriverConfig, EndpointConfig

logger = logging.getLogger(__name__)


class ClientFactory:
    """
    Factory for creating control-plane clients.

    Design Pattern: Factory Pattern + Registry Pattern
    Registers the client class for each control plane and creates instances on demand.
    """

    # Client registry
    _CLIENTS: Dict[ControlPlane, Type[RestClient]] = {
        ControlPlane.ONEVIEW: OneViewClient,
        ControlPlane.ICSP: ICSPClient,
    }

    @classmethod
    def create_client(cls, control_plane: ControlPlane, endpoint: EndpointConfig,
                      config: DriverConfig) -> RestClient:
        """
        Create a client for one control plane.

        Args:
            control_plane: Which control plane
            endpoint: Endpoint and credentials
            config: Driver configuration (timeouts)

        Returns:
            Client instance, not yet logged in

        Raises:
            ValueError: If the control plane has no registered client
        """
        client_class = cls._CLIENTS.get(control_plane)

        if not client_class:
            raise ValueError(f"Unknown control plane: {control_plane}")

        logger.debug(f"Creating client for {control_plane.value} at {endpoint.endpoint}")
        return client_class(
            endpoint=endpoint.endpoint,
            username=endpoint.username,
            password=endpoint.password,
            domain=endpoint.domain,
            ssl_verify=endpoint.ssl_verify,
            timeout=config.api_timeout,
            task_timeout=config.task_timeout,
            poll_interval=config.task_poll_interval,
        )

    @classmethod
    def create_pair(cls, config: DriverConfig) -> Tuple[OneViewClient, ICSPClient]:
        """Create the (OneView, ICsp) client pair for a driver configuration"""
        return (
            cls.create_client(ControlPlane.ONEVIEW, config.oneview, config),
            cls.create_client(ControlPlane.ICSP, config.icsp, config),
        )

    @classmethod
    def register_client(cls, control_plane: ControlPlane, client_class: Type[RestClient]):
        """
        Register a client class (for extensibility).

        Args:
            control_plane: Control plane
            client_class: Client class to register
        """
        cls._CLIENTS[control_plane] = client_class
        logger.info(f"Registered client for control plane: {control_plane.value}")
