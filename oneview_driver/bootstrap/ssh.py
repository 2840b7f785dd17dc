import logging
from pathlib import Path
from typing import Optional, Sequence

import paramiko

from ..errors import SSHCommandError

logger = logging.getLogger(__name__)


class SSHSession:
    """SSH session to a provisioned node (key auth, password fallback)"""

    def __init__(self,
                 user: str,
                 host: str,
                 port: int = 22,
                 key_path: Optional[str] = None,
                 passwords: Sequence[str] = ("docker",),
                 timeout: int = 30):
        self.user = user
        self.host = host
        self.port = port
        self.key_path = key_path
        self.passwords = list(passwords)
        self.timeout = timeout
        self._client: Optional[paramiko.SSHClient] = None

    def connect(self) -> None:
        """
        Open the connection.

        The key file is tried first; each password is then tried in order.

        Raises:
            SSHCommandError: If every authentication attempt fails
        """
        if self._client:
            return

        key_filename = self.key_path if self.key_path and Path(self.key_path).exists() else None
        last_error: Optional[Exception] = None

        for password in self.passwords or [None]:
            client = paramiko.SSHClient()
            client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
            try:
                client.connect(
                    hostname=self.host,
                    port=self.port,
                    username=self.user,
                    key_filename=key_filename,
                    password=password,
                    look_for_keys=False,
                    allow_agent=False,
                    timeout=self.timeout,
                )
            except paramiko.AuthenticationException as e:
                client.close()
                last_error = e
                continue
            except (paramiko.SSHException, OSError) as e:
                client.close()
                raise SSHCommandError(self.host, message=str(e)) from e

            logger.debug(f"SSH connected to {self.user}@{self.host}:{self.port}")
            self._client = client
            return

        raise SSHCommandError(self.host, message=f"authentication failed: {last_error}")

    def run(self, command: str) -> str:
        """
        Run a command and return its standard output.

        Raises:
            SSHCommandError: On connection failure or a non-zero exit status
        """
        self.connect()
        logger.debug(f"SSH {self.host}: {command}")
        try:
            _, stdout, stderr = self._client.exec_command(command, timeout=self.timeout)
            output = stdout.read().decode(errors="replace")
            errors = stderr.read().decode(errors="replace")
            status = stdout.channel.recv_exit_status()
        except (paramiko.SSHException, OSError) as e:
            raise SSHCommandError(self.host, command, str(e)) from e

        if status != 0:
            raise SSHCommandError(self.host, command, f"exit status {status}", output + errors)
        return output

    def close(self) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
