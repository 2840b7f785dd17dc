"""
Node bootstrap: local key pair and SSH access to the deployed OS.
"""

from .keys import KeyPair
from .ssh import SSHSession

__all__ = ['KeyPair', 'SSHSession']
