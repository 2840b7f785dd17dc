"""
Awaitable handles for asynchronous appliance operations.

OneView returns a task resource (``taskState``) for long-running calls;
ICsp returns a job resource (``running`` / ``status``). Both are polled
until a terminal state; a failed terminal state raises TaskFailed with the
messages the appliance reported.
"""

import logging
import time
from typing import Dict, List, Optional, Tuple

from ..errors import TaskFailed, TaskTimeout

logger = logging.getLogger(__name__)


class Task:
    """Handle on a OneView task"""

    SUCCESS_STATES = {"Completed", "Warning"}
    FAILURE_STATES = {"Error", "Terminated", "Killed", "Interrupted"}

    def __init__(self, client, uri: Optional[str], name: str,
                 timeout: float = 3600, poll_interval: float = 5):
        self._client = client
        self.uri = uri
        self.name = name
        self.timeout = timeout
        self.poll_interval = poll_interval

    def refresh(self) -> Dict:
        """Fetch the current task resource"""
        return self._client._get_json(self.uri, f"{self.name}.wait", self.uri)

    def _status(self, data: Dict) -> Tuple[Optional[bool], List[str]]:
        """
        Classify a task resource.

        Returns:
            (True, []) when done, (False, messages) when failed,
            (None, []) while still running
        """
        state = data.get("taskState", "")
        if state in self.SUCCESS_STATES:
            return True, []
        if state in self.FAILURE_STATES:
            messages = [e.get("message", "") for e in data.get("taskErrors") or [] if e.get("message")]
            return False, messages or [f"task state {state}"]
        return None, []

    def wait(self) -> Dict:
        """
        Block until the task reaches a terminal state.

        Returns:
            The final task resource

        Raises:
            TaskFailed: If the task ended in an error state
            TaskTimeout: If the task is still running after ``timeout`` seconds
        """
        deadline = time.monotonic() + self.timeout
        logger.debug(f"Waiting for {self.name} task {self.uri}")

        while True:
            data = self.refresh()
            done, messages = self._status(data)
            if done is True:
                logger.debug(f"Task {self.name} completed: {self.uri}")
                return data
            if done is False:
                logger.error(f"Task {self.name} failed: {'; '.join(messages)}")
                raise TaskFailed(self.name, self.uri, messages)
            if time.monotonic() >= deadline:
                raise TaskTimeout(self.name, self.uri, self.timeout)
            time.sleep(self.poll_interval)


class Job(Task):
    """Handle on an ICsp deployment job"""

    SUCCESS_STATES = {"STATUS_SUCCESS", "STATUS_WARNING"}

    def _status(self, data: Dict) -> Tuple[Optional[bool], List[str]]:
        if str(data.get("running", "")).lower() == "true":
            return None, []
        status = data.get("status", "")
        if status in self.SUCCESS_STATES:
            return True, []
        if not status:
            return None, []
        messages = []
        for result in data.get("jobResult") or []:
            message = result.get("jobMessage") or result.get("jobResultErrorDetails")
            if message:
                messages.append(message)
        return False, messages or [f"job status {status}"]


class CompletedTask(Task):
    """A task that is already finished (e.g. the resource was already gone)"""

    def __init__(self, client, name: str):
        super().__init__(client, None, name)

    def wait(self) -> Dict:
        return {}
