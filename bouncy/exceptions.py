"""Exception hierarchy.

All custom exceptions inherit from BouncyError and carry an error code.
Only unrecoverable failures are raised; a missing document and a version
conflict are reported as IndexResult values instead.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "BNC-1000"
    CONFIGURATION_ERROR = "BNC-1001"

    # Record store errors (2xxx)
    RECORD_STORE_ERROR = "BNC-2000"
    RECORD_NOT_FOUND = "BNC-2001"

    # Mapping errors (3xxx)
    MAPPING_ERROR = "BNC-3000"

    # Index client errors (4xxx)
    INDEX_CLIENT_ERROR = "BNC-4000"
    BULK_REQUEST_ERROR = "BNC-4001"
    SEARCH_ERROR = "BNC-4002"


class BouncyError(Exception):
    """Base exception for all bouncy errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a serializable dictionary."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(BouncyError):
    """Configuration or environment error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class RecordStoreError(BouncyError):
    """Record store persistence error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.RECORD_STORE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class MappingError(BouncyError):
    """Record type cannot be mapped to a document."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.MAPPING_ERROR, details)


class IndexClientError(BouncyError):
    """Unrecoverable Elasticsearch failure (network, auth, bad request...)."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INDEX_CLIENT_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)
