"""
Routing Policy Sync - Exceptions

This module contains all custom exceptions raised by the package.
"""

from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from routing_policy_sync.models import ValidationIssue


class PolicySyncError(Exception):
    """
    Base exception for all routing policy sync errors.

    Attributes:
        message: Human-readable error message
        code: Error code if available
        details: Additional error details
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', code='{self.code}')"


# =============================================================================
# Local errors
# =============================================================================


class GraphError(PolicySyncError):
    """
    Raised when a graph mutation is rejected.

    The graph is left unchanged when this is raised.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="GRAPH_ERROR", details=details)


class ProtectedPolicyError(PolicySyncError):
    """
    Raised when deleting a platform-owned (SYSTEM) policy.

    Nothing is deleted when this is raised, event subscriptions included.

    Attributes:
        policy_id: The policy that was refused
    """

    def __init__(self, policy_id: int) -> None:
        super().__init__(
            f"Policy {policy_id} is a system policy and cannot be deleted",
            code="PROTECTED_POLICY",
            details={"policy_id": policy_id},
        )
        self.policy_id = policy_id


class ValidationError(PolicySyncError):
    """
    Raised when a graph fails local validation before save.

    Attributes:
        issues: The validation issues with severity "error"
    """

    def __init__(
        self,
        message: str = "Policy graph failed validation",
        issues: Optional[List["ValidationIssue"]] = None,
    ) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.issues = issues or []

    def __str__(self) -> str:
        base = super().__str__()
        if self.issues:
            return f"{base} ({'; '.join(i.message for i in self.issues)})"
        return base


class DocumentFormatError(PolicySyncError):
    """Raised when a policy document cannot be parsed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="DOCUMENT_FORMAT_ERROR", details=details)


# =============================================================================
# Transport errors
# =============================================================================


class TransportError(PolicySyncError):
    """
    Raised when a remote call fails.

    Attributes:
        status_code: HTTP status code, if a response was received
        response_text: Raw response body, if a response was received
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_text: Optional[str] = None,
        code: str = "TRANSPORT_ERROR",
    ) -> None:
        super().__init__(message, code=code)
        self.status_code = status_code
        self.response_text = response_text


class AuthenticationError(TransportError):
    """Raised when the remote service rejects the credential."""

    def __init__(
        self,
        message: str = "Authentication failed",
        status_code: Optional[int] = 401,
        response_text: Optional[str] = None,
    ) -> None:
        super().__init__(message, status_code, response_text, code="AUTHENTICATION_ERROR")


class CredentialExpiredError(AuthenticationError):
    """Raised before sending a request with an expired credential."""

    def __init__(self, message: str = "Credential has expired") -> None:
        super().__init__(message, status_code=None)
        self.code = "CREDENTIAL_EXPIRED"


class NotFoundError(TransportError):
    """Raised when a remote resource does not exist."""

    def __init__(self, message: str = "Resource not found", response_text: Optional[str] = None) -> None:
        super().__init__(message, 404, response_text, code="NOT_FOUND")


class ConflictError(TransportError):
    """Raised when the remote service reports a conflict."""

    def __init__(self, message: str = "Resource conflict", response_text: Optional[str] = None) -> None:
        super().__init__(message, 409, response_text, code="CONFLICT")


class RequestValidationError(TransportError):
    """Raised when the remote service rejects the request body."""

    def __init__(
        self,
        message: str = "Request validation failed",
        status_code: int = 422,
        response_text: Optional[str] = None,
    ) -> None:
        super().__init__(message, status_code, response_text, code="REQUEST_VALIDATION_ERROR")


class RateLimitError(TransportError):
    """
    Raised when the remote rate limit is exceeded.

    Attributes:
        retry_after: Number of seconds to wait before retrying
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: Optional[str] = None,
        response_text: Optional[str] = None,
    ) -> None:
        super().__init__(message, 429, response_text, code="RATE_LIMIT_ERROR")
        self.retry_after = int(retry_after) if retry_after and retry_after.isdigit() else None

    def __str__(self) -> str:
        base = super().__str__()
        if self.retry_after:
            return f"{base}. Retry after {self.retry_after} seconds."
        return base


class ServerError(TransportError):
    """Raised when the remote service returns a 5xx response."""

    def __init__(
        self,
        message: str = "Internal server error",
        status_code: int = 500,
        response_text: Optional[str] = None,
    ) -> None:
        super().__init__(message, status_code, response_text, code="SERVER_ERROR")


class RequestTimeoutError(TransportError):
    """
    Raised when a request times out.

    Attributes:
        timeout_seconds: The timeout that was exceeded
    """

    def __init__(
        self,
        message: str = "Request timed out",
        timeout_seconds: Optional[float] = None,
    ) -> None:
        super().__init__(message, code="TIMEOUT")
        self.timeout_seconds = timeout_seconds


# =============================================================================
# Reconciliation errors
# =============================================================================


class ReconciliationItemError(PolicySyncError):
    """
    A single create, update or delete failed during a reconciliation pass.

    These are recorded on the pass report and logged; they are never
    raised out of the pass.

    Attributes:
        operation: "create", "update" or "delete"
        item_id: Desired node id (create/update) or subscription id (delete)
        cause: The underlying exception
    """

    def __init__(self, operation: str, item_id: str, cause: Exception) -> None:
        super().__init__(
            f"Failed to {operation} event subscription {item_id}: {cause}",
            code="RECONCILIATION_ITEM_ERROR",
            details={"operation": operation, "item_id": item_id},
        )
        self.operation = operation
        self.item_id = item_id
        self.cause = cause
