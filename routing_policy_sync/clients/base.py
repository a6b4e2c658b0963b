"""
Base HTTP client shared by the policy engine and event service clients.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .. import __version__
from ..exceptions import (
    AuthenticationError,
    ConflictError,
    CredentialExpiredError,
    NotFoundError,
    RateLimitError,
    RequestTimeoutError,
    RequestValidationError,
    ServerError,
    TransportError,
)
from .credentials import Credential

logger = logging.getLogger(__name__)


class BaseClient:
    """
    Thin authenticated wrapper around ``httpx.Client``.

    Every request checks the credential's expiry before it is sent and maps
    non-success responses to TransportError subclasses. There is no retry
    loop beyond httpx's connection-level retries.

    Args:
        credential: Scoped bearer credential
        base_url: Service base URL
        timeout: Request timeout in seconds
        max_retries: Connection-level retries passed to the transport
        expiry_leeway: Seconds before expiry at which the credential is refused
        http_client: Pre-built client, mainly for tests
    """

    service_name = "API"

    def __init__(
        self,
        credential: Credential,
        base_url: str,
        timeout: float = 30.0,
        max_retries: int = 0,
        expiry_leeway: int = 0,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.credential = credential
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.expiry_leeway = expiry_leeway
        self._http_client = http_client or self._create_http_client()

        logger.debug(f"{self.service_name} client initialized with base URL: {self.base_url}")

    def _create_http_client(self) -> httpx.Client:
        """Create and configure the HTTP client."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"routing-policy-sync/{__version__}",
        }

        transport = httpx.HTTPTransport(retries=self.max_retries)

        return httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(self.timeout),
            transport=transport,
            follow_redirects=True,
        )

    def request(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Make an authenticated request.

        Returns:
            Decoded JSON body, or {} for empty responses

        Raises:
            CredentialExpiredError: If the credential has expired
            TransportError: If the request fails or returns a non-success status
        """
        if self.credential.is_expired(self.expiry_leeway):
            raise CredentialExpiredError(
                f"Credential for scope '{self.credential.scope}' has expired"
            )

        request_headers = {"Authorization": f"Bearer {self.credential.token}"}
        if headers:
            request_headers.update(headers)

        logger.debug(f"Making {method} request to {path}")

        try:
            response = self._http_client.request(
                method=method,
                url=path,
                json=json,
                params=params,
                headers=request_headers,
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(f"Request timed out: {e}", timeout_seconds=self.timeout)
        except httpx.RequestError as e:
            raise TransportError(f"Request failed: {e}")

        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> Any:
        """Handle API response and raise appropriate exceptions."""
        logger.debug(f"Response status: {response.status_code}")

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return {}
            try:
                return response.json()
            except ValueError:
                return {"data": response.text}

        text = response.text
        message = f"{self.service_name} error: {response.status_code} - {text}"
        status = response.status_code

        if status in (401, 403):
            raise AuthenticationError(message, status_code=status, response_text=text)
        elif status == 404:
            raise NotFoundError(message, response_text=text)
        elif status == 409:
            raise ConflictError(message, response_text=text)
        elif status in (400, 422):
            raise RequestValidationError(message, status_code=status, response_text=text)
        elif status == 429:
            raise RateLimitError(message, retry_after=response.headers.get("Retry-After"), response_text=text)
        elif status >= 500:
            raise ServerError(message, status_code=status, response_text=text)
        else:
            raise TransportError(message, status_code=status, response_text=text)

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._http_client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url='{self.base_url}')"
