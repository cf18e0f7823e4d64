"""Error Hierarchy — typed, categorized exceptions for all Kondo failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Business-rule errors (400-level) are returned as values by services, never raised there
    - Provider and persistence errors (500-level) are raised and abort the operation
    - to_response() produces the REST envelope
    - No internal details (provider identity, query shape) leaked in user-facing messages

Design Decisions:
    - Single hierarchy with KondoError base: FastAPI global handler catches all (ADR: uniform error shape)
    - Conflict kinds share ConflictError: callers can branch on the category or the concrete code
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    PERMISSION = "permission"
    CONFLICT = "conflict"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    resource_id: str | None = None
    debug_info: dict[str, Any] | None = None


class KondoError(Exception):
    """Base exception for all Kondo errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationError(KondoError):
    """Malformed input that passed the HTTP schema but fails a domain rule."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class ResourceNotFoundError(KondoError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class NotOwnerError(KondoError):
    """User acted on a resource owned by someone else."""
    def __init__(self, resource_type: str, context: ErrorContext | None = None):
        super().__init__(
            f"You can only modify your own {resource_type}",
            "NOT_OWNER", ErrorCategory.PERMISSION,
            ErrorSeverity.ERROR, context, 403,
        )
        self.resource_type = resource_type


class NoPublicAliasError(KondoError):
    """Publishing requires a public display alias."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "You need to create a public alias before sharing to the community",
            "NO_PUBLIC_ALIAS", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 403,
        )


class ConflictError(KondoError):
    """Operation conflicts with existing state (sharing/import rules)."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class AlreadySharedError(ConflictError):
    """Content item already has a published post."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "This item has already been shared to the community",
            "ALREADY_SHARED", context,
        )


class AlreadyImportedError(ConflictError):
    """User already imported this published post."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "You have already imported this post",
            "ALREADY_IMPORTED", context,
        )


class SelfImportError(ConflictError):
    """User tried to import their own published post."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "You cannot import your own shared post",
            "SELF_IMPORT", context,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class PersistenceError(KondoError):
    """Database operation failed. The surrounding transaction was rolled back."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "PERSISTENCE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ExternalProviderError(KondoError):
    """Text-completion or speech provider call failed."""
    def __init__(
        self,
        message: str,
        provider_error_type: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Generation provider error ({provider_error_type}): {message}",
            "EXTERNAL_PROVIDER_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.provider_error_type = provider_error_type

    def to_response(self) -> dict:
        """Provider details stay in logs; clients get a stable message."""
        response = super().to_response()
        response["error"]["message"] = "Content generation is temporarily unavailable"
        return response
