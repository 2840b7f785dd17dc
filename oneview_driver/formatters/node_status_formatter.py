"""
Node status formatter.

List output:
Node: ov-node-01
============================================================
  State:   Running
  Address: 10.1.2.3
  URL:     tcp://10.1.2.3:2376
"""

import json
from .base_formatter import OutputFormatter
from ..models import NodeStatus


class NodeStatusFormatter(OutputFormatter):
    """Formatter for the ``status`` command"""

    def __init__(self, output_format: str = "list"):
        """
        Initialize formatter.

        Args:
            output_format: Output format type ('list', 'json')
        """
        self.output_format = output_format

    def format(self, status: NodeStatus) -> str:
        if self.output_format == "json":
            return json.dumps(status.to_dict(), indent=2)
        return self._format_list(status)

    def _format_list(self, status: NodeStatus) -> str:
        lines = [f"\nNode: {status.name}", "=" * 60]
        lines.append(f"  State:   {status.state.value}")
        lines.append(f"  Address: {self.display(status.address)}")
        lines.append(f"  URL:     {self.display(status.url)}")
        if status.error:
            lines.append(f"  Error:   {status.error}")
        return "\n".join(lines)
