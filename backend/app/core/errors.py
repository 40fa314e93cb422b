"""Error Hierarchy — typed, categorized exceptions for every lookup failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client errors (400-level) are terminal for the request; tier errors (503) are retryable by the caller
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with PokeCacheError base: FastAPI global handler catches all (ADR: uniform error shape)
    - DuplicateKeyError lives here although it never reaches HTTP: the store raises it,
      the pipeline recovers it via read-after-write
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
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    CACHE = "cache"
    EXTERNAL_API = "external_api"
    CONFLICT = "conflict"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    record_key: str | None = None
    tier: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class PokeCacheError(Exception):
    """Base exception for all lookup errors."""

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
                "context": {
                    "record_key": self.context.record_key,
                    "tier": self.context.tier,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Client Errors (400-level) ──────────────────────────────────

class LookupValidationError(PokeCacheError):
    """Lookup key rejected before any tier was touched."""
    def __init__(self, message: str, field: str = "key", context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class RecordNotFoundError(PokeCacheError):
    """Record is definitively absent from every tier. Terminal, never retried."""
    def __init__(self, record_key: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.record_key = record_key
        super().__init__(
            f"Record '{record_key}' not found",
            "RECORD_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.INFO, ctx, 404,
        )
        self.record_key = record_key


class DuplicateKeyError(PokeCacheError):
    """Insert collided with an existing natural key (concurrent writer won)."""
    def __init__(self, record_key: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.record_key = record_key
        super().__init__(
            f"Record '{record_key}' already exists",
            "DUPLICATE_KEY", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )
        self.record_key = record_key


# ─── Tier Errors (503) ──────────────────────────────────────────

class StoreUnavailableError(PokeCacheError):
    """Record store operation failed. Fatal to the current lookup."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.tier = "store"
        super().__init__(
            f"Record store {operation} failed: {message}",
            "STORE_UNAVAILABLE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.operation = operation


class CacheUnavailableError(PokeCacheError):
    """Cache transport failed. Distinct from a cache miss."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.tier = "cache"
        super().__init__(
            f"Cache {operation} failed: {message}",
            "CACHE_UNAVAILABLE", ErrorCategory.CACHE,
            ErrorSeverity.ERROR, ctx, 503,
        )
        self.operation = operation


class ExternalUnavailableError(PokeCacheError):
    """External source failed transiently (timeout, connection, non-404 status, bad payload)."""
    def __init__(
        self,
        message: str,
        reason: str,
        status_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.tier = "external"
        super().__init__(
            f"External source error ({reason}): {message}",
            "EXTERNAL_UNAVAILABLE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, ctx, 503,
        )
        self.reason = reason
        self.status_code = status_code
