"""
OneView Machine Driver Package

Provisions a physical node by coordinating HP OneView (server profiles,
hardware, power) and HP ICsp (OS build plans, managed servers).

Architecture:
- Value Object Pattern for the OneView / ICsp records and the joined Node
- Factory Pattern for creating control-plane clients
- Facade Pattern for the lifecycle orchestrator
- Strategy Pattern for output formatters
"""

from .config import DriverConfig
from .errors import DriverError
from .models import DeploymentRecord, Hardware, LifecycleState, Node, Profile
from .clients import ICSPClient, OneViewClient
from .repositories import ClientFactory
from .services import LifecycleOrchestrator, NodeResolver, StateProjector, initialize_orchestrator
from .formatters import NodeStatusFormatter

__all__ = [
    # Config / errors
    "DriverConfig",
    "DriverError",
    # Models
    "Profile",
    "Hardware",
    "DeploymentRecord",
    "Node",
    "LifecycleState",
    # Clients
    "OneViewClient",
    "ICSPClient",
    # Factory
    "ClientFactory",
    # Services
    "NodeResolver",
    "StateProjector",
    "LifecycleOrchestrator",
    "initialize_orchestrator",
    # Formatters
    "NodeStatusFormatter",
]
