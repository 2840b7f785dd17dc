"""
Local SSH key pair used to reach the provisioned node.
"""

import logging
import os
from pathlib import Path

import paramiko

from ..errors import KeyPairError

logger = logging.getLogger(__name__)


class KeyPair:
    """
    RSA key pair stored as ``<path>`` (private) and ``<path>.pub`` (public).

    Args:
        path: Private key path
    """

    def __init__(self, path: str):
        self.private_path = Path(path)
        self.public_path = Path(f"{path}.pub")

    def generate(self, bits: int = 2048) -> str:
        """
        Generate a new key pair, overwriting any existing files.

        Returns:
            The public key in OpenSSH format

        Raises:
            KeyPairError: If the key cannot be generated or written
        """
        try:
            self.private_path.parent.mkdir(parents=True, exist_ok=True)
            key = paramiko.RSAKey.generate(bits)
            key.write_private_key_file(str(self.private_path))
            os.chmod(self.private_path, 0o600)
            public_key = f"{key.get_name()} {key.get_base64()}"
            self.public_path.write_text(public_key + "\n")
        except (OSError, paramiko.SSHException) as e:
            raise KeyPairError(f"Unable to create key pair at {self.private_path}: {e}") from e

        logger.debug(f"created keys => {public_key}")
        return public_key

    def read_public_key(self) -> str:
        try:
            return self.public_path.read_text().strip()
        except OSError as e:
            raise KeyPairError(f"Unable to read public key {self.public_path}: {e}") from e

    def delete(self) -> None:
        """Remove both key files; files that are already gone are ignored"""
        for path in (self.private_path, self.public_path):
            try:
                path.unlink()
                logger.debug(f"Removed {path}")
            except FileNotFoundError:
                logger.debug(f"{path} already removed")
            except OSError as e:
                raise KeyPairError(f"Unable to remove {path}: {e}") from e
