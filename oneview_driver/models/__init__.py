"""
Data models and value objects.
Immutable views of the OneView and ICsp records that make up a node.
"""

from .profile import Connection, Profile
from .hardware import Hardware, PowerState
from .deployment import DeploymentPhase, DeploymentRecord, Interface
from .node import LifecycleState, Node, NodeStatus

__all__ = [
    'Connection',
    'Profile',
    'Hardware',
    'PowerState',
    'DeploymentPhase',
    'DeploymentRecord',
    'Interface',
    'LifecycleState',
    'Node',
    'NodeStatus',
]
