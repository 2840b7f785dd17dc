"""
Base REST client - Abstract base class shared by the OneView and ICsp clients.

Both appliances use the same session model: POST /rest/login-sessions returns
a session id which is then sent in the ``Auth`` header, and
DELETE /rest/login-sessions ends the session.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Optional
import requests
from urllib3 import disable_warnings
from urllib3.exceptions import InsecureRequestWarning

from ..errors import RemoteCallError
from .tasks import CompletedTask, Task

disable_warnings(InsecureRequestWarning)
logger = logging.getLogger(__name__)


class ControlPlane(Enum):
    """Control plane enumeration"""
    ONEVIEW = "OneView"
    ICSP = "ICsp"


class RestClient(ABC):
    """
    Abstract base class for control-plane clients.

    Responsibilities:
    - Manage the authenticated session (login, logout)
    - Issue requests and turn transport / HTTP failures into RemoteCallError
    - Follow paginated collections
    - Hand out Task handles for asynchronous operations
    """

    DEFAULT_API_VERSION = 200

    def __init__(self,
                 endpoint: str,
                 username: str,
                 password: str,
                 domain: str = "LOCAL",
                 ssl_verify: bool = False,
                 timeout: int = 30,
                 task_timeout: int = 3600,
                 poll_interval: int = 5):
        """
        Initialize client with endpoint and credentials.

        Args:
            endpoint: Appliance URL (https://host)
            username: Login user
            password: Login password
            domain: Authentication login domain
            ssl_verify: Verify the appliance certificate
            timeout: Per-request timeout in seconds
            task_timeout: Maximum time to wait for an asynchronous task
            poll_interval: Seconds between task status polls
        """
        self.endpoint = endpoint.rstrip("/") if endpoint else ""
        self.username = username
        self.password = password
        self.domain = domain
        self.ssl_verify = ssl_verify
        self.timeout = timeout
        self.task_timeout = task_timeout
        self.poll_interval = poll_interval
        self.api_version = self.DEFAULT_API_VERSION
        self._session: Optional[requests.Session] = None
        self._auth_token: Optional[str] = None

    @property
    @abstractmethod
    def platform_name(self) -> str:
        """Return control plane name"""
        pass

    @property
    def is_connected(self) -> bool:
        return self._session is not None and self._auth_token is not None

    def _url(self, uri: str) -> str:
        if uri.startswith("http"):
            return uri
        return f"{self.endpoint}{uri}"

    # ------------------------------------------------------------------
    # Version / session
    # ------------------------------------------------------------------

    def get_api_version(self) -> Dict:
        """
        Query the appliance API version (no authentication required).

        Returns:
            Dict with ``currentVersion`` and ``minimumVersion``
        """
        try:
            response = requests.get(
                self._url("/rest/version"),
                verify=self.ssl_verify,
                timeout=self.timeout,
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise RemoteCallError("get_api_version", self.endpoint, str(e)) from e

    def refresh_version(self) -> int:
        """Use the appliance's current API version for subsequent requests"""
        current = int(self.get_api_version().get("currentVersion") or 0)
        if current > 0:
            self.api_version = current
            if self._session:
                self._session.headers["X-API-Version"] = str(current)
        logger.debug(f"{self.platform_name} API version: {self.api_version}")
        return current

    def ensure_connected(self) -> None:
        """Log in to the appliance if there is no active session"""
        if self._session and self._auth_token:
            return

        logger.info(f"Connecting to {self.platform_name} at {self.endpoint}...")
        session = requests.Session()
        session.verify = self.ssl_verify

        auth_data = {
            "userName": self.username,
            "password": self.password,
            "authLoginDomain": self.domain,
        }
        headers = {"Content-Type": "application/json", "X-API-Version": str(self.api_version)}

        try:
            response = session.post(self._url("/rest/login-sessions"), json=auth_data,
                                    headers=headers, timeout=self.timeout)
            response.raise_for_status()
            token = response.json().get("sessionID")
        except (requests.RequestException, ValueError) as e:
            session.close()
            raise RemoteCallError("login", self.endpoint, str(e)) from e

        if not token:
            session.close()
            raise RemoteCallError("login", self.endpoint, "no session id returned")

        session.headers.update({
            "Auth": token,
            "X-API-Version": str(self.api_version),
            "Content-Type": "application/json",
        })
        self._session = session
        self._auth_token = token
        logger.info(f"Successfully connected to {self.platform_name}")

    def session_logout(self) -> None:
        """
        End the appliance session.

        Raises:
            RemoteCallError: If the logout request fails. The local session is
                discarded either way.
        """
        if not (self._session and self._auth_token):
            return
        try:
            response = self._session.delete(self._url("/rest/login-sessions"), timeout=self.timeout)
            response.raise_for_status()
            logger.info(f"Successfully disconnected from {self.platform_name}")
        except requests.RequestException as e:
            raise RemoteCallError("session_logout", self.endpoint, str(e)) from e
        finally:
            self._session.close()
            self._session = None
            self._auth_token = None

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def _request(self, method: str, uri: str, call: str, identifier: str = "",
                 allow_not_found: bool = False, **kwargs) -> requests.Response:
        """
        Issue an authenticated request.

        Args:
            method: HTTP method
            uri: Resource URI (relative to the endpoint, or absolute)
            call: Client operation name used in error messages
            identifier: Name / URI / serial the call is about
            allow_not_found: Return 404 responses instead of raising

        Returns:
            The response

        Raises:
            RemoteCallError: On transport failure or a non-2xx status
        """
        self.ensure_connected()
        kwargs.setdefault("timeout", self.timeout)
        try:
            response = self._session.request(method, self._url(uri), **kwargs)
        except requests.RequestException as e:
            raise RemoteCallError(call, identifier, str(e)) from e

        if allow_not_found and response.status_code == 404:
            return response
        if not response.ok:
            raise RemoteCallError(call, identifier, self._error_message(response),
                                  status_code=response.status_code)
        return response

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("details")
            if message:
                return f"{response.status_code} {message}"
        return f"{response.status_code} {response.reason}"

    def _get_json(self, uri: str, call: str, identifier: str = "", **kwargs) -> Dict:
        response = self._request("GET", uri, call, identifier, **kwargs)
        if response.status_code == 404:
            return {}
        return response.json()

    def _get_members(self, uri: str, call: str, identifier: str = "",
                     params: Optional[Dict] = None) -> List[Dict]:
        """Collect all members of a paginated collection"""
        members: List[Dict] = []
        next_page_uri: Optional[str] = uri

        while next_page_uri:
            page_data = self._get_json(next_page_uri, call, identifier, params=params)
            members.extend(page_data.get("members") or [])
            next_page_uri = page_data.get("nextPageUri")
            # nextPageUri already carries the query string
            params = None

        return members

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def _task_from_response(self, response: requests.Response, name: str) -> Task:
        """
        Build a Task handle from an asynchronous (202) response.

        The task URI is in the Location header, or in the body for
        appliances that return the task resource directly.
        """
        uri = response.headers.get("Location")
        if not uri:
            try:
                uri = (response.json() or {}).get("uri")
            except ValueError:
                uri = None
        if not uri:
            return CompletedTask(self, name)
        return self._make_task(uri, name)

    def _make_task(self, uri: str, name: str) -> Task:
        return Task(self, uri, name, timeout=self.task_timeout, poll_interval=self.poll_interval)
