"""
Base API Connector Class for the remote capture service
Provides shared session handling and error mapping for HTTP calls
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Dict, Any
import logging

import requests

from capture_core.errors import AuthenticationError, ConnectivityError, RemoteError

logger = logging.getLogger(__name__)


@dataclass
class APIConfig:
    """Configuration for API connection"""
    api_name: str
    base_url: str
    headers: Optional[Dict[str, str]] = None
    timeout: float = 10.0


class BaseAPIConnector(ABC):
    """Abstract base class for remote service connectors"""

    def __init__(self, config: APIConfig, credentials=None, session: Optional[requests.Session] = None):
        """
        Args:
            config: endpoint and timeout settings
            credentials: CredentialProvider used for authenticated calls
            session: pre-built session (tests); a new one by default
        """
        self.config = config
        self.credentials = credentials
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

        if config.headers:
            self.session.headers.update(config.headers)

    @abstractmethod
    def validate_response(self, response: requests.Response) -> Any:
        """Validate an API response and return its decoded body"""
        pass

    def _auth_headers(self) -> Dict[str, str]:
        """Bearer header from the injected credential provider"""
        token = self.credentials.get_token() if self.credentials else None
        if not token:
            raise AuthenticationError(f"No credential available for {self.config.api_name}")
        return {"Authorization": f"Bearer {token}"}

    def _make_request(
        self,
        endpoint: str,
        method: str = "GET",
        params: Optional[Dict] = None,
        data: Optional[Any] = None,
        authenticated: bool = False,
    ) -> requests.Response:
        """
        Make HTTP request with error handling

        Args:
            endpoint: API endpoint (appended to base_url)
            method: HTTP method (GET, POST, etc.)
            params: Query parameters
            data: JSON request body
            authenticated: Attach the bearer credential

        Returns:
            Response object

        Raises:
            ConnectivityError: connection failure or timeout
            AuthenticationError: missing credential, 401 or 403
            RemoteError: any other non-2xx status
        """
        url = f"{self.config.base_url}/{endpoint.lstrip('/')}"
        headers = self._auth_headers() if authenticated else None

        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=data,
                headers=headers,
                timeout=self.config.timeout
            )
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            raise ConnectivityError(
                f"{self.config.api_name} unreachable: {e}", endpoint=endpoint
            ) from e
        except requests.exceptions.RequestException as e:
            raise RemoteError(f"API request failed for {self.config.api_name}: {e}", endpoint=endpoint) from e

        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"{self.config.api_name} rejected the credential",
                status_code=response.status_code,
                endpoint=endpoint,
            )
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise RemoteError(
                f"{self.config.api_name} returned {response.status_code}",
                status_code=response.status_code,
                endpoint=endpoint,
            ) from e

        logger.debug(f"{method} {url} -> {response.status_code}")
        return response
