"""
Output formatters - Strategy Pattern for different output formats.
"""

from .base_formatter import OutputFormatter
from .node_status_formatter import NodeStatusFormatter

__all__ = ['OutputFormatter', 'NodeStatusFormatter']
