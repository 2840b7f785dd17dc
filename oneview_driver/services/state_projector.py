"""
State Projector - derive one LifecycleState from the ICsp lifecycle phase
and the OneView power state.

The ICsp phase wins when it says anything definite. Every other phase
(MANAGED, no phase at all, or a value ICsp added later) means the server is
active and falls through to the power state.
"""

import logging
from typing import Dict, Union

from ..models import DeploymentPhase, LifecycleState, Node, PowerState

logger = logging.getLogger(__name__)


class StateProjector:
    """Pure mapping from (phase, power state) to LifecycleState"""

    PHASE_STATES: Dict[DeploymentPhase, LifecycleState] = {
        DeploymentPhase.PROVISIONING: LifecycleState.STARTING,
        DeploymentPhase.UNPROVISIONED: LifecycleState.STOPPING,
        DeploymentPhase.PRE_UNPROVISIONED: LifecycleState.STOPPING,
        DeploymentPhase.DEACTIVATED: LifecycleState.STOPPED,
        DeploymentPhase.PROVISION_FAILED: LifecycleState.ERROR,
    }

    POWER_STATES: Dict[PowerState, LifecycleState] = {
        PowerState.ON: LifecycleState.RUNNING,
        PowerState.OFF: LifecycleState.STOPPED,
        PowerState.UNKNOWN: LifecycleState.ERROR,
    }

    @classmethod
    def project(cls,
                phase: Union[DeploymentPhase, str],
                power_state: Union[PowerState, str]) -> LifecycleState:
        """
        Project a phase / power state pair.

        Args:
            phase: ICsp lifecycle phase (raw string if unrecognised)
            power_state: OneView power state (raw string if transitional)

        Returns:
            The lifecycle state. Power states outside On / Off / Unknown map
            to LifecycleState.NONE.
        """
        if phase in cls.PHASE_STATES:
            return cls.PHASE_STATES[phase]
        if not isinstance(phase, DeploymentPhase):
            logger.warning(f"Unrecognised ICsp lifecycle {phase!r}, treating server as active")
        return cls.POWER_STATES.get(power_state, LifecycleState.NONE)

    @classmethod
    def project_node(cls, node: Node) -> LifecycleState:
        return cls.project(node.deployment.phase, node.hardware.power_state)
