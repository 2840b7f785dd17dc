"""
Driver configuration.

Settings come from ONEVIEW_* environment variables (optionally loaded from a
.env file) and can be overridden by CLI flags. Constants, the DriverConfig
consumed by the orchestrator, and logging setup all live here.
"""

import os
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# ============================================================================
# Load default .env at module import time
# ============================================================================
# Class-level settings below read os.environ when this module is imported
load_dotenv()


# ============================================================================
# Environment Loading
# ============================================================================

def load_environment(env_file: Optional[str] = None):
    """
    Load ONEVIEW_* settings from a .env file.

    Args:
        env_file: File whose values override the environment; the default
            .env lookup is used when omitted
    """
    if env_file:
        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(env_path, override=True)
            logger.info(f"Loaded environment from: {env_file}")
        else:
            logger.warning(f"Environment file not found: {env_file}")
    else:
        load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


# ============================================================================
# Application Constants
# ============================================================================

class AppConfig:
    """Application-wide configuration constants"""

    # Application Info
    APP_NAME = "oneview-machine"
    APP_VERSION = "1.0.0"
    DRIVER_NAME = "oneview"

    # Docker engine port used for the node URL
    DOCKER_PORT = 2376

    # Timeouts
    API_TIMEOUT = _env_int("ONEVIEW_API_TIMEOUT", 30)
    TASK_TIMEOUT = _env_int("ONEVIEW_TASK_TIMEOUT", 3600)
    TASK_POLL_INTERVAL = _env_int("ONEVIEW_TASK_POLL_INTERVAL", 5)

    # Graceful OS shutdown issued before power off
    SHUTDOWN_COMMAND = "sudo shutdown -P now"


# ============================================================================
# Driver Configuration
# ============================================================================

@dataclass(frozen=True)
class EndpointConfig:
    """Connection settings for one control plane"""
    endpoint: str = ""
    username: str = ""
    password: str = ""
    domain: str = "LOCAL"
    ssl_verify: bool = False


@dataclass(frozen=True)
class DriverConfig:
    """
    Everything the lifecycle orchestrator consumes.

    Defaults follow the OneView docker-machine driver flags. ``proxy_enable``
    and ``proxy_config`` are not part of it; they are read from the process
    environment when the node is created.
    """
    machine_name: str = ""
    oneview: EndpointConfig = field(default_factory=EndpointConfig)
    icsp: EndpointConfig = field(default_factory=EndpointConfig)

    ilo_user: str = "docker"
    ilo_password: str = ""
    ilo_port: int = 443

    ssh_user: str = "docker"
    ssh_port: int = 22
    ssh_key_path: str = ""

    server_template: str = "DOCKER_1.8_OVTEMP"
    os_build_plan: str = "RHEL71_DOCKER_1.8"

    public_slot_id: int = 1
    public_connection_name: str = ""

    api_timeout: int = AppConfig.API_TIMEOUT
    task_timeout: int = AppConfig.TASK_TIMEOUT
    task_poll_interval: int = AppConfig.TASK_POLL_INTERVAL

    @classmethod
    def from_env(cls, machine_name: str = "") -> 'DriverConfig':
        """
        Build configuration from ONEVIEW_* environment variables.

        Args:
            machine_name: Logical node name

        Returns:
            DriverConfig instance (not yet validated)
        """
        ssl_verify = _env_bool("ONEVIEW_SSLVERIFY")
        ssh_key_path = os.getenv("ONEVIEW_SSH_KEY_PATH", "")
        if not ssh_key_path and machine_name:
            ssh_key_path = str(Path.home() / ".oneview-machine" / machine_name / "id_rsa")

        return cls(
            machine_name=machine_name,
            oneview=EndpointConfig(
                endpoint=os.getenv("ONEVIEW_OV_ENDPOINT", ""),
                username=os.getenv("ONEVIEW_OV_USER", ""),
                password=os.getenv("ONEVIEW_OV_PASSWORD", ""),
                domain=os.getenv("ONEVIEW_OV_DOMAIN", "LOCAL"),
                ssl_verify=ssl_verify,
            ),
            icsp=EndpointConfig(
                endpoint=os.getenv("ONEVIEW_ICSP_ENDPOINT", ""),
                username=os.getenv("ONEVIEW_ICSP_USER", ""),
                password=os.getenv("ONEVIEW_ICSP_PASSWORD", ""),
                domain=os.getenv("ONEVIEW_ICSP_DOMAIN", "LOCAL"),
                ssl_verify=ssl_verify,
            ),
            ilo_user=os.getenv("ONEVIEW_ILO_USER", "docker"),
            ilo_password=os.getenv("ONEVIEW_ILO_PASSWORD", ""),
            ilo_port=_env_int("ONEVIEW_ILO_PORT", 443),
            ssh_user=os.getenv("ONEVIEW_SSH_USER", "docker"),
            ssh_port=_env_int("ONEVIEW_SSH_PORT", 22),
            ssh_key_path=ssh_key_path,
            server_template=os.getenv("ONEVIEW_SERVER_TEMPLATE", "DOCKER_1.8_OVTEMP"),
            os_build_plan=os.getenv("ONEVIEW_OS_PLAN", "RHEL71_DOCKER_1.8"),
            public_slot_id=_env_int("ONEVIEW_PUBLIC_SLOTID", 1),
            public_connection_name=os.getenv("ONEVIEW_PUBLIC_CONNECTION_NAME", ""),
            api_timeout=_env_int("ONEVIEW_API_TIMEOUT", AppConfig.API_TIMEOUT),
            task_timeout=_env_int("ONEVIEW_TASK_TIMEOUT", AppConfig.TASK_TIMEOUT),
            task_poll_interval=_env_int("ONEVIEW_TASK_POLL_INTERVAL", AppConfig.TASK_POLL_INTERVAL),
        )

    def with_overrides(self, **overrides) -> 'DriverConfig':
        """Return a copy with the non-empty overrides applied (CLI flags)"""
        values = {k: v for k, v in overrides.items() if v not in (None, "")}
        return replace(self, **values)

    def validate(self) -> None:
        """
        Validate configuration before any remote call.

        Raises:
            ConfigurationError: If a required setting is missing
        """
        if not self.oneview.endpoint:
            raise ConfigurationError(
                "Missing option --oneview-ov-endpoint or environment ONEVIEW_OV_ENDPOINT")
        if not self.icsp.endpoint:
            raise ConfigurationError(
                "Missing option --oneview-icsp-endpoint or environment ONEVIEW_ICSP_ENDPOINT")
        if not self.server_template:
            raise ConfigurationError(
                "Missing option --oneview-server-template or environment ONEVIEW_SERVER_TEMPLATE")
        if not self.os_build_plan:
            raise ConfigurationError(
                "Missing option --oneview-os-plan or ONEVIEW_OS_PLAN")
        if not self.machine_name:
            raise ConfigurationError("Machine name is required")
        if not self.ssh_key_path:
            raise ConfigurationError("Missing SSH key path (ONEVIEW_SSH_KEY_PATH)")

        logger.debug(f"Configuration validated for machine {self.machine_name}")


# ============================================================================
# Logging Configuration
# ============================================================================

class LogConfig:
    """Logging settings, overridable through ONEVIEW_LOG_* variables"""

    DEFAULT_LEVEL = "INFO"
    FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    VERBOSE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(filename)s:%(lineno)d]: %(message)s"
    DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

    # Rotating log file limits
    FILE_MAX_BYTES = 5 * 1024 * 1024
    FILE_BACKUP_COUNT = 3

    # Third-party loggers that are only interesting when something breaks
    QUIET_LOGGERS = ("urllib3", "paramiko")


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """
    Configure the root logger for the CLI.

    ONEVIEW_LOG_* variables are read on each call, after any .env file has
    been loaded.

    Args:
        verbose: Log at DEBUG with file / line information
        log_file: Also write to this rotating file (defaults to ONEVIEW_LOG_FILE)
    """
    level_name = os.getenv("ONEVIEW_LOG_LEVEL", LogConfig.DEFAULT_LEVEL).upper()
    level = logging.DEBUG if verbose else getattr(logging, level_name, logging.INFO)
    fmt = LogConfig.VERBOSE_FORMAT if verbose else LogConfig.FORMAT

    logging.basicConfig(level=level, format=fmt, datefmt=LogConfig.DATE_FORMAT)

    path = log_file or os.getenv("ONEVIEW_LOG_FILE")
    if path:
        from logging.handlers import RotatingFileHandler

        handler = RotatingFileHandler(
            path,
            maxBytes=_env_int("ONEVIEW_LOG_FILE_MAX_BYTES", LogConfig.FILE_MAX_BYTES),
            backupCount=_env_int("ONEVIEW_LOG_FILE_BACKUP_COUNT", LogConfig.FILE_BACKUP_COUNT),
        )
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt, LogConfig.DATE_FORMAT))
        logging.getLogger().addHandler(handler)
        logger.info(f"Writing log to {path}")

    for name in LogConfig.QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug(f"Log level {logging.getLevelName(level)}")


__all__ = [
    'AppConfig',
    'EndpointConfig',
    'DriverConfig',
    'LogConfig',
    'load_environment',
    'setup_logging',
]
