"""Error Hierarchy — typed, categorized exceptions for all transfer-core failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope; extra top-level keys (e.g. expired) via `extra`
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with RemitError base: one FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - GoneError is distinct from ResourceNotFoundError so clients can tell
      "expired" from "never existed" (explicit `expired: true`)
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
    GONE = "gone"
    RATE_LIMIT = "rate_limit"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    transfer_id: str | None = None
    quote_id: str | None = None
    reference_code: str | None = None
    field: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class RemitError(Exception):
    """Base exception for all transfer-core errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
        extra: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status
        self.extra = extra or {}

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        response = {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "transfer_id": self.context.transfer_id,
                    "quote_id": self.context.quote_id,
                    "field": self.context.field,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }
        response.update(self.extra)
        return response

    def response_headers(self) -> dict[str, str]:
        return {}


# ─── Domain Errors (400-level) ──────────────────────────────────

class RemitValidationError(RemitError):
    """Malformed or missing input, unknown asset/rail/corridor."""
    def __init__(
        self, message: str, field: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.field = field
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.field = field


class ResourceNotFoundError(RemitError):
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


class ConflictError(RemitError):
    """Request conflicts with current state (rail mismatch, no active route, quote reused)."""
    def __init__(
        self, message: str, code: str = "CONFLICT",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class InvalidTransitionError(ConflictError):
    """Transition not allowed by the transfer or payout state machine."""
    def __init__(
        self, current: str, requested: str, context: ErrorContext | None = None,
        terminal: bool = False,
    ):
        message = (
            f"Transfer is {current} and can no longer change status"
            if terminal else f"Invalid status transition: {current} -> {requested}"
        )
        super().__init__(message, "INVALID_TRANSITION", context)
        self.current = current
        self.requested = requested
        self.terminal = terminal


class ReferenceExhaustedError(ConflictError):
    """Every reference-code candidate collided; creation aborted."""
    def __init__(self, attempts: int, context: ErrorContext | None = None):
        super().__init__(
            f"Could not allocate a unique reference code after {attempts} attempts",
            "REFERENCE_EXHAUSTED", context,
        )
        self.attempts = attempts


class GoneError(RemitError):
    """Quote or transfer has expired. Always carries `expired: true`."""
    def __init__(
        self, message: str, payload: dict[str, Any] | None = None,
        context: ErrorContext | None = None,
    ):
        extra: dict[str, Any] = {"expired": True}
        extra.update(payload or {})
        super().__init__(
            message, "EXPIRED", ErrorCategory.GONE,
            ErrorSeverity.WARNING, context, 410, extra,
        )


class RateLimitedError(RemitError):
    """Caller exceeded its fixed-window budget for an action."""
    def __init__(
        self, action: str, retry_after_ms: int, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"Too many {action} requests. Retry later.",
            "RATE_LIMITED", ErrorCategory.RATE_LIMIT,
            ErrorSeverity.WARNING, ctx, 429,
        )
        self.action = action
        self.retry_after_ms = retry_after_ms

    def response_headers(self) -> dict[str, str]:
        seconds = max(1, -(-self.retry_after_ms // 1000))
        return {"Retry-After": str(seconds)}


# ─── Infrastructure Errors (500-level) ──────────────────────────

class RateUnavailableError(RemitError):
    """Market rate provider failed. Message stays generic."""
    def __init__(self, pair: str, reason: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.debug_info = {"pair": pair, "reason": reason}
        super().__init__(
            "Exchange rate temporarily unavailable",
            "RATE_UNAVAILABLE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.pair = pair
        self.reason = reason


class DatabaseError(RemitError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation
