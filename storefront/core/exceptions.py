"""
Storefront Exception Hierarchy

The taxonomy is flat: a gateway call either succeeds or fails,
and the HTTP layer turns each failure into a fixed, human-readable message
for the triggering action.

Exception Hierarchy:
    StorefrontError
    ├── GatewayError
    ├── NotFoundError
    ├── ValidationError
    └── AuthError
"""
import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class StorefrontError(Exception):
    """
    Base exception for all storefront errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging
        status_code: HTTP status the API layer answers with
    """

    default_code: str = "STOREFRONT_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class GatewayError(StorefrontError):
    """A call to the remote data gateway failed."""
    default_code = "GATEWAY_ERROR"
    status_code = 502

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details.update({
            "table": table,
            "operation": operation,
        })
        super().__init__(message, details=details, **kwargs)


class NotFoundError(StorefrontError):
    """Requested row does not exist or belongs to someone else."""
    default_code = "NOT_FOUND"
    status_code = 404


class ValidationError(StorefrontError):
    """Input rejected by a business rule."""
    default_code = "VALIDATION_FAILED"
    status_code = 400


class AuthError(StorefrontError):
    """Authentication failed or is required."""
    default_code = "AUTH_FAILED"
    status_code = 401
