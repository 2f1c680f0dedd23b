"""HTTP+JSON transport used to talk to a Hue bridge (API v1).

Every call returns the bridge's JSON response normalised to a list of
objects. The v1 API answers with either a single object (GET of a resource)
or an array of ``{"success": ...}`` / ``{"error": ...}`` entries.
"""

import logging

import requests

from core.errors import CommError

logger = logging.getLogger(__name__)

METHODS = ('GET', 'POST', 'PUT', 'DELETE')


class BridgeTransport:
    """Sends requests to one bridge base URL using a requests session."""

    def __init__(self, base_url: str, timeout: float = 5.0,
                 session: requests.Session | None = None):
        """Initialise the transport.

        Args:
            base_url: Bridge base URL, e.g. "http://10.0.0.5/"
            timeout: Per-request timeout in seconds
            session: Optional session to reuse (a new one is created otherwise)
        """
        self.base_url = base_url if base_url.endswith('/') else base_url + '/'
        self.timeout = timeout
        self.session = session or requests.Session()

    def url_for(self, path: str) -> str:
        return self.base_url + path.lstrip('/')

    def request(self, method: str, path: str, body: dict | None = None) -> list[dict]:
        """Send one request and return the decoded response entries.

        Args:
            method: One of GET, POST, PUT, DELETE
            path: Path relative to the base URL, e.g. "/api/<user>/lights"
            body: JSON body; not allowed for GET and DELETE

        Returns:
            List of JSON objects

        Raises:
            CommError: On I/O problems, HTTP errors or an unexpected body
        """
        if method not in METHODS:
            raise CommError(f"Unsupported request method {method}")
        if body is not None and method in ('GET', 'DELETE'):
            raise CommError(f"Will not send json content for request method {method}")

        url = self.url_for(path)
        logger.debug("Request to %s %s%s", method, url, f": {body}" if body is not None else "")

        try:
            response = self.session.request(method, url, json=body, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.RequestException as e:
            raise CommError(f"{method} {url} failed: {e}") from e
        except ValueError as e:
            raise CommError(f"{method} {url} returned invalid JSON: {e}") from e

        logger.debug("Response from %s %s: %s", method, url, result)

        if isinstance(result, dict):
            return [result]
        if isinstance(result, list) and all(isinstance(entry, dict) for entry in result):
            return result
        raise CommError(f"{method} {url} returned an unexpected body: {result!r}")
