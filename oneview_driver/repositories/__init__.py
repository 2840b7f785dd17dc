"""
Repositories and factories - Factory Pattern implementation.
"""

from .client_factory import ClientFactory

__all__ = ['ClientFactory']
