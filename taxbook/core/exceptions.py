"""Custom exception hierarchy for Taxbook.

All application errors inherit from ``TaxbookException`` so the API layer can
render them through a single handler.

Error codes follow pattern: [CATEGORY][NUMBER]
- TAX: Tax/P&L configuration errors (300-399)
- SYS: System errors (400-499)

Malformed *transaction data* never raises: the P&L engine defaults missing or
unparsable fields. Only caller-level misuse (an unknown period kind, a broken
bracket table) is reported, because a silently wrong tax figure is worse than
a clear 400.
"""

from __future__ import annotations

from typing import Any


class TaxbookException(Exception):
    """Base exception for all Taxbook application errors."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        """Initialize exception with user-friendly message and metadata.

        Args:
            message: User-friendly error message
            code: Unique error code (e.g., "TAX301")
            status_code: HTTP status code (default: 400 Bad Request)
            details: Optional additional context
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "details": self.details,
            }
        }


# ============================================================================
# TAX / P&L CONFIGURATION ERRORS (TAX300-399)
# ============================================================================

class InvalidConfigurationError(TaxbookException):
    """Caller supplied a configuration the engine cannot compute with."""

    def __init__(
        self,
        message: str = "Invalid tax or period configuration",
        code: str = "TAX300",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=400,
            details=details,
        )


class InvalidPeriodError(InvalidConfigurationError):
    """Period kind outside monthly/quarterly/annual."""

    def __init__(self, kind: Any):
        if not isinstance(kind, (str, int, float, type(None))):
            kind = repr(kind)
        super().__init__(
            message=(
                f"Invalid period '{kind}'. Must be monthly, quarterly or annual."
            ),
            code="TAX301",
            details={"kind": kind, "allowed": ["monthly", "quarterly", "annual"]},
        )


class InvalidReferenceDateError(InvalidConfigurationError):
    """Period reference date that is not a date or ISO date string."""

    def __init__(self, value: Any):
        super().__init__(
            message=f"Invalid reference date {value!r}. Use an ISO date (YYYY-MM-DD).",
            code="TAX301",
            details={"reference_date": repr(value)},
        )


class InvalidTaxBracketError(InvalidConfigurationError):
    """Bracket table entry with an out-of-range rate or width."""

    def __init__(self, reason: str, index: int | None = None, **extra: Any):
        details: dict[str, Any] = {"reason": reason}
        if index is not None:
            details["bracket_index"] = index
        details.update(extra)
        message = f"Invalid tax bracket table: {reason}"
        if index is not None:
            message = f"Invalid tax bracket #{index + 1}: {reason}"
        super().__init__(message=message, code="TAX302", details=details)


class AmountOutOfRangeError(TaxbookException):
    """Caller-supplied figure is not a usable money amount."""

    def __init__(self, field: str, value: Any):
        super().__init__(
            message=f"{field} must be a finite amount below 10^36",
            code="TAX303",
            status_code=400,
            details={"field": field, "value": str(value)},
        )


# ============================================================================
# SYSTEM ERRORS (SYS400-499)
# ============================================================================

class PayloadTooLargeError(TaxbookException):
    """Request carried more transactions than the service accepts."""

    def __init__(self, received: int, limit: int):
        super().__init__(
            message=(
                f"Too many transactions in one request ({received:,}). "
                f"Maximum allowed is {limit:,}."
            ),
            code="SYS400",
            status_code=413,
            details={"received": received, "limit": limit},
        )
