"""
Logical node model.

A node is never stored anywhere; it is the join of a OneView profile, the
hardware the profile is bound to, and the ICsp record for that hardware,
recomputed on every operation.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional

from .deployment import DeploymentRecord
from .hardware import Hardware
from .profile import Profile


class LifecycleState(Enum):
    """Single observable state of a node"""
    NONE = "None"
    RUNNING = "Running"
    STOPPED = "Stopped"
    STARTING = "Starting"
    STOPPING = "Stopping"
    ERROR = "Error"


@dataclass(frozen=True)
class Node:
    """
    Joined (profile, hardware, deployment) triple for one node name.

    Attributes:
        name: Logical node name (the profile name)
        profile: OneView server profile
        hardware: OneView server hardware bound to the profile
        deployment: ICsp server record, possibly empty
    """
    name: str
    profile: Profile
    hardware: Hardware
    deployment: DeploymentRecord


@dataclass(frozen=True)
class NodeStatus:
    """Status snapshot rendered by the CLI"""
    name: str
    state: LifecycleState
    address: Optional[str] = None
    url: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        data = {k: v for k, v in asdict(self).items() if v is not None}
        data["state"] = self.state.value
        return data
