"""HTTP client for the remote session API (summaries, flashcards, namespaces)."""

import logging
from typing import Any, Callable, Dict, List, Optional

import requests
from tenacity import Retrying, stop_after_attempt, wait_exponential, retry_if_exception_type

from ..config.configuration_manager import APIConfig
from ..core.exceptions import SessionAPIError
from ..core.models import SessionData


logger = logging.getLogger(__name__)


SUCCESS_STATUS = "SUCCESS"


class TransientAPIError(SessionAPIError):
    """Server-side failure worth retrying (HTTP 5xx)."""


class SessionAPIClient:
    """
    Client for the session API.

    Every response must be a JSON envelope ``{"status": "SUCCESS", "payload": ...}``.
    Transport errors and 5xx responses are retried with exponential backoff;
    every other failure raises ``SessionAPIError`` immediately.
    """

    def __init__(self,
                 config: APIConfig,
                 session: Optional[requests.Session] = None,
                 token_provider: Optional[Callable[[], str]] = None):
        """
        Initialize the client.

        Args:
            config: API configuration
            session: HTTP session to use, a new one by default
            token_provider: Callable returning a bearer token; overrides ``config.token``
        """
        self.config = config
        self.session = session or requests.Session()
        self.token_provider = token_provider

    @property
    def base_url(self) -> str:
        server = self.config.server.rstrip('/')
        if not server:
            raise SessionAPIError("API server is not configured")
        if server.startswith(('http://', 'https://')):
            return server
        return f"https://{server}"

    def _headers(self) -> Dict[str, str]:
        token = self.token_provider() if self.token_provider else self.config.token
        if not token:
            raise SessionAPIError("No API token configured")
        return {
            'Authorization': f'Bearer {token}',
            'Content-Type': 'application/json'
        }

    def _call(self, method: str, url: str, timeout: float) -> Any:
        """Perform one request and return the validated payload."""
        try:
            response = self.session.request(
                method,
                url,
                headers=self._headers(),
                timeout=timeout,
                verify=self.config.verify_ssl
            )
        except (requests.ConnectionError, requests.Timeout):
            raise
        except requests.RequestException as e:
            raise SessionAPIError(f"API call to {url} failed: {e}") from e

        status = response.status_code
        if status >= 500:
            raise TransientAPIError(f"API call to {url} failed: HTTP {status}", status_code=status)
        if status != 200 or not response.content:
            raise SessionAPIError(f"API call to {url} failed: HTTP {status}", status_code=status)

        try:
            decoded = response.json()
        except ValueError as e:
            raise SessionAPIError("API response is not valid JSON", status_code=status) from e

        if not isinstance(decoded, dict):
            raise SessionAPIError("API response is not valid JSON", status_code=status)
        if decoded.get('status') != SUCCESS_STATUS:
            raise SessionAPIError(f"API returned status: {decoded.get('status', 'MISSING')}", status_code=status)
        if not isinstance(decoded.get('payload'), (dict, list)):
            raise SessionAPIError("API response missing valid payload", status_code=status)

        return decoded['payload']

    def _call_with_retry(self, method: str, url: str, timeout: float) -> Any:
        retrying = Retrying(
            stop=stop_after_attempt(self.config.max_retries),
            wait=wait_exponential(multiplier=self.config.retry_backoff, max=10),
            retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout, TransientAPIError)),
            reraise=True
        )
        try:
            return retrying(self._call, method, url, timeout)
        except (requests.ConnectionError, requests.Timeout) as e:
            raise SessionAPIError(f"API call to {url} failed: {e}") from e

    def fetch_summary(self, namespace_id: str) -> str:
        """Fetch the markdown summary of a session."""
        url = f"{self.base_url}/api/v1/lti/session/{namespace_id}/summary"
        payload = self._call_with_retry('GET', url, self.config.timeout)

        if not isinstance(payload, dict) or 'summary' not in payload:
            raise SessionAPIError("Summary not found in API response")
        return payload['summary']

    def fetch_flashcards(self, namespace_id: str) -> List[Any]:
        """Fetch the raw flashcards of a session."""
        url = f"{self.base_url}/api/v1/lti/session/{namespace_id}/flashcards"
        payload = self._call_with_retry('GET', url, self.config.timeout)

        if not isinstance(payload, dict) or 'flashcards' not in payload:
            raise SessionAPIError("Flashcards not found in API response")
        return payload['flashcards']

    def fetch_namespaces(self, course_id: str) -> List[Dict[str, Any]]:
        """
        List the namespaces of a course.

        Failures are logged and yield an empty list.
        """
        url = f"{self.base_url}/api/v1/jwt/course/{course_id}/namespaces"
        try:
            payload = self._call('POST', url, self.config.namespaces_timeout)
        except (SessionAPIError, requests.RequestException) as e:
            logger.warning(f"Namespace listing failed for course {course_id}: {e}")
            return []

        if isinstance(payload, dict):
            payload = payload.get('namespaces', [])
        return [ns for ns in payload if isinstance(ns, dict)]

    def fetch_session_data(self, namespace_id: str, course_id: str) -> SessionData:
        """
        Fetch summary, flashcards and namespace name of a session.

        Raises:
            SessionAPIError: If any call fails or the namespace is unknown
        """
        summary = self.fetch_summary(namespace_id)
        flashcards = self.fetch_flashcards(namespace_id)
        namespaces = self.fetch_namespaces(course_id)

        namespace_name = find_namespace_name(namespaces, namespace_id)
        if not namespace_name:
            raise SessionAPIError(f"Namespace {namespace_id} not found in API response")

        logger.info(f"Fetched session {namespace_id} ('{namespace_name}') with {len(flashcards or [])} flashcards")
        return SessionData(summary=summary, flashcards=flashcards, namespace_name=namespace_name)


def find_namespace_name(namespaces: List[Dict[str, Any]], namespace_id: str) -> Optional[str]:
    for ns in namespaces:
        if ns.get('guid') == namespace_id:
            return ns.get('name')
    return None
