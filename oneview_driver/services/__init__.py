"""
Node lifecycle services: resolver, state projector and orchestrator.
"""

from .node_resolver import NodeResolver
from .state_projector import StateProjector
from .lifecycle_orchestrator import LifecycleOrchestrator, initialize_orchestrator

__all__ = [
    'NodeResolver',
    'StateProjector',
    'LifecycleOrchestrator',
    'initialize_orchestrator',
]
