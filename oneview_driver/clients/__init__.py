"""
Control-plane clients.
OneView owns profiles, hardware and power; ICsp owns OS deployment.
"""

from .base_client import ControlPlane, RestClient
from .tasks import CompletedTask, Job, Task
from .oneview_client import OneViewClient
from .icsp_client import CustomizeServerRequest, ICSPClient

__all__ = [
    'ControlPlane',
    'RestClient',
    'Task',
    'Job',
    'CompletedTask',
    'OneViewClient',
    'ICSPClient',
    'CustomizeServerRequest',
]
