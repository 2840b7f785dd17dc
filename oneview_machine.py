#!/usr/bin/env python3
"""
OneView Machine - provision a physical node through HP OneView and ICsp

Creates a server profile from a template in OneView, deploys the OS with an
ICsp build plan, installs an SSH key on the node, and drives it through
start / stop / restart / remove.

Architecture:
- Value Object Pattern for OneView / ICsp records
- Factory Pattern for control-plane clients
- Facade Pattern for the lifecycle orchestrator
- Strategy Pattern for output formatters

Usage:
    python oneview_machine.py check  node-01          # Verify both appliances answer
    python oneview_machine.py create node-01          # Create and provision the node
    python oneview_machine.py status node-01          # Show lifecycle state and address
    python oneview_machine.py status node-01 --json   # Same, as JSON
    python oneview_machine.py stop node-01            # Shut down and power off
    python oneview_machine.py remove node-01          # Delete ICsp server and OneView profile
"""

import argparse
import logging
import sys

from oneview_driver.config import DriverConfig, load_environment, setup_logging
from oneview_driver.errors import DriverError
from oneview_driver.formatters import NodeStatusFormatter
from oneview_driver.models import NodeStatus
from oneview_driver.services import LifecycleOrchestrator, initialize_orchestrator

logger = logging.getLogger(__name__)

COMMANDS = ["check", "create", "start", "stop", "restart", "kill", "remove", "status", "ip", "url"]

# Commands that map directly onto an orchestrator operation
LIFECYCLE_COMMANDS = {
    "check": "pre_create_check",
    "create": "create",
    "start": "start",
    "stop": "stop",
    "restart": "restart",
    "kill": "kill",
    "remove": "remove",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Provision and manage a physical node through HP OneView and ICsp",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create a node with the default template and OS build plan
  python oneview_machine.py create node-01

  # Use a specific template and build plan
  python oneview_machine.py create node-01 --template DOCKER_OVTEMP --os-plan RHEL71_DOCKER

  # Pick the public interface by profile connection name
  python oneview_machine.py create node-01 --public-connection-name public

  # Show state as JSON
  python oneview_machine.py status node-01 --format json

  # Verbose logging
  python oneview_machine.py stop node-01 --verbose
        """
    )

    parser.add_argument("command", choices=COMMANDS, help="Lifecycle operation to run")
    parser.add_argument("name", help="Machine (server profile) name")

    parser.add_argument(
        "--template", "-t",
        help="OneView server profile template (default: ONEVIEW_SERVER_TEMPLATE)"
    )

    parser.add_argument(
        "--os-plan", "-o",
        help="ICsp OS build plan (default: ONEVIEW_OS_PLAN)"
    )

    parser.add_argument(
        "--public-connection-name",
        help="Profile connection used as the public interface, overrides --public-slot-id"
    )

    parser.add_argument(
        "--public-slot-id",
        type=int,
        help="Slot id of the public interface (default: ONEVIEW_PUBLIC_SLOTID or 1)"
    )

    parser.add_argument(
        "--format", "-f",
        choices=["list", "json"],
        default="list",
        help="Output format for status: list (default) or json"
    )

    parser.add_argument(
        "--json", "-j",
        action="store_true",
        help="Output as JSON (shortcut for --format json)"
    )

    parser.add_argument(
        "--env-file", "-e",
        help="Path to .env file with credentials"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    return parser


def node_status(orchestrator: LifecycleOrchestrator) -> NodeStatus:
    """Collect state, address and URL; a missing address is not an error here"""
    state = orchestrator.get_state()
    try:
        address = orchestrator.get_address()
    except DriverError as e:
        return NodeStatus(name=orchestrator.name, state=state, error=str(e))
    return NodeStatus(
        name=orchestrator.name,
        state=state,
        address=address,
        url=orchestrator.get_url(),
    )


def run_command(orchestrator: LifecycleOrchestrator, command: str, output_format: str = "list") -> str:
    """
    Run one CLI command against the orchestrator.

    Returns:
        Text to print
    """
    if command == "status":
        return NodeStatusFormatter(output_format=output_format).format(node_status(orchestrator))
    if command == "ip":
        return orchestrator.get_address()
    if command == "url":
        return orchestrator.get_url()

    getattr(orchestrator, LIFECYCLE_COMMANDS[command])()
    return f"✅ {command} completed for {orchestrator.name}"


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Load .env file
    load_environment(args.env_file)

    setup_logging(verbose=args.verbose)

    try:
        config = DriverConfig.from_env(args.name).with_overrides(
            server_template=args.template,
            os_build_plan=args.os_plan,
            public_connection_name=args.public_connection_name,
            public_slot_id=args.public_slot_id,
        )
        orchestrator = initialize_orchestrator(args.name, config)
    except DriverError as e:
        logger.error(f"Failed to initialize driver: {e}")
        print(f"\n❌ Error initializing driver: {e}")
        print("\nPlease check your .env configuration and ensure all required settings are present.")
        sys.exit(1)

    output_format = "json" if args.json else args.format

    try:
        output = run_command(orchestrator, args.command, output_format)
    except DriverError as e:
        logger.error(f"{args.command} failed: {e}", exc_info=args.verbose)
        print(f"\n❌ {args.command} failed for {args.name}: {e}")
        sys.exit(1)

    print(output)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\nCancelled by user.")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        print(f"\n❌ Unexpected error: {e}")
        sys.exit(1)
