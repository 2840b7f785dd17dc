"""
Base output formatter for node status.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import NodeStatus

MISSING = "-"


class OutputFormatter(ABC):
    """
    Renders a NodeStatus for the terminal.

    Design Pattern: Strategy Pattern
    """

    @abstractmethod
    def format(self, status: NodeStatus) -> str:
        pass

    @staticmethod
    def display(value: Optional[str]) -> str:
        """Value to print, or a dash when the field is unknown"""
        return value or MISSING
