"""fitrec Error Handling Module

This module defines the error handling system for fitrec, providing
structured error classes with context information and a typed taxonomy
for failures at the upstream fetch boundary.

The error hierarchy follows these principles:
- One Source of Truth: All error codes are defined in ErrorCode enum
- Structured Context: ErrorContext provides additional information
- Values over exceptions at stage boundaries: FetchError and ProviderError
  are plain values carried inside Result, not raised
- Proper Exception Chaining: Original exceptions are preserved
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Union

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]

# Default keys to mask in safe_dict for PII protection
SAFE_DICT_MASK_KEYS: tuple[str, ...] = ("subject_id",)


class ErrorCode(str, Enum):
    """Error codes for the fitrec application.

    This enum serves as the single source of truth for all error codes
    used throughout the application.
    """

    # Upstream catalog errors
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    API_TIMEOUT = "API_TIMEOUT"
    API_UPSTREAM_ERROR = "API_UPSTREAM_ERROR"
    API_TRANSPORT_ERROR = "API_TRANSPORT_ERROR"
    API_MALFORMED_RESPONSE = "API_MALFORMED_RESPONSE"

    # Media provider errors
    PROVIDER_NOT_CONFIGURED = "PROVIDER_NOT_CONFIGURED"
    PROVIDER_REQUEST_FAILED = "PROVIDER_REQUEST_FAILED"

    # Pipeline errors
    ALL_CATEGORIES_FAILED = "ALL_CATEGORIES_FAILED"

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    TYPE_COERCION_ERROR = "TYPE_COERCION_ERROR"

    # Configuration Errors
    MISSING_CONFIG = "MISSING_CONFIG"
    INVALID_CONFIG = "INVALID_CONFIG"

    # File Errors
    FILE_READ_ERROR = "FILE_READ_ERROR"

    # Resource Errors
    RESOURCE_UNAVAILABLE = "RESOURCE_UNAVAILABLE"

    # CLI Errors
    CLI_UNEXPECTED_ERROR = "CLI_UNEXPECTED_ERROR"


class FetchErrorKind(str, Enum):
    """Classification of a failed call to the upstream catalog."""

    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    TIMEOUT = "timeout"
    UPSTREAM_ERROR = "upstream_error"
    TRANSPORT_ERROR = "transport_error"
    MALFORMED_RESPONSE = "malformed_response"

    @property
    def error_code(self) -> ErrorCode:
        """Map the kind onto its ErrorCode."""
        return _FETCH_KIND_CODES[self]


_FETCH_KIND_CODES: dict[FetchErrorKind, ErrorCode] = {
    FetchErrorKind.RATE_LIMIT_EXCEEDED: ErrorCode.RATE_LIMIT_EXCEEDED,
    FetchErrorKind.TIMEOUT: ErrorCode.API_TIMEOUT,
    FetchErrorKind.UPSTREAM_ERROR: ErrorCode.API_UPSTREAM_ERROR,
    FetchErrorKind.TRANSPORT_ERROR: ErrorCode.API_TRANSPORT_ERROR,
    FetchErrorKind.MALFORMED_RESPONSE: ErrorCode.API_MALFORMED_RESPONSE,
}


@dataclass(frozen=True)
class FetchError:
    """A classified catalog failure, returned inside ``Err`` rather than raised.

    Attributes:
        kind: Failure class
        message: Human-readable description
        endpoint: Endpoint that was called (or would have been)
        status_code: HTTP status for UPSTREAM_ERROR, else None
    """

    kind: FetchErrorKind
    message: str
    endpoint: str = ""
    status_code: int | None = None

    @property
    def code(self) -> ErrorCode:
        return self.kind.error_code

    def describe(self) -> str:
        """Short reason string recorded in ``category_errors``."""
        if self.status_code is not None:
            return f"{self.kind.value} ({self.status_code}): {self.message}"
        return f"{self.kind.value}: {self.message}"


@dataclass(frozen=True)
class ProviderError:
    """A failed media provider query. Never propagated past the resolver."""

    provider: str
    code: ErrorCode
    message: str


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Converts Path, Enum, Decimal to primitive types.

    Args:
        value: Input dictionary or None

    Returns:
        Dictionary with primitive values only, or None

    Raises:
        TypeError: If value is not a dict or contains unconvertible types
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, Enum):
            coerced[key] = val.value
        elif isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Decimal):
            coerced[key] = float(val)
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum, Decimal are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContext:
    """Context information for errors.

    Only primitive types (str, int, float, bool) are allowed in
    additional_data to ensure safe serialization.

    Attributes:
        operation: Optional operation name that caused the error
        subject_id: Optional subject identity (masked in logs)
        additional_data: Optional dict with primitive values only
    """

    operation: str | None = None
    subject_id: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self, *, mask_keys: tuple[str, ...] | None = None) -> dict[str, Any]:
        """Export context as dict with PII masking.

        Args:
            mask_keys: Fields to exclude from output. Defaults to SAFE_DICT_MASK_KEYS.

        Returns:
            Dictionary with masked sensitive fields and guaranteed additional_data key.

        Example:
            >>> context = ErrorContext(subject_id="u-1", operation="run")
            >>> context.safe_dict()
            {'operation': 'run', 'additional_data': {}}
        """
        if mask_keys is None:
            mask_keys = SAFE_DICT_MASK_KEYS

        data: dict[str, Any] = {}
        if self.operation is not None and "operation" not in mask_keys:
            data["operation"] = self.operation
        if self.subject_id is not None and "subject_id" not in mask_keys:
            data["subject_id"] = self.subject_id

        if self.additional_data is not None and "additional_data" not in mask_keys:
            data["additional_data"] = self.additional_data
        else:
            data["additional_data"] = {}

        return data


class FitrecError(Exception):
    """Base exception class for all fitrec errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize FitrecError.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context information
            original_error: Original exception that caused this error
        """
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error

        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging with PII masking."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(FitrecError):
    """Domain-specific errors.

    These errors occur when business rules are violated, e.g. a request
    without categories or a run in which nothing could be fetched.
    """


class InfrastructureError(FitrecError):
    """Infrastructure-related errors.

    These errors occur when interacting with external systems like the
    exercise catalog, media providers or the file system.
    """


class ApplicationError(FitrecError):
    """Application-level errors.

    Configuration mistakes, invalid construction arguments and CLI failures.
    """


class AllCategoriesFailedError(DomainError):
    """Every requested category failed at the fetching step.

    Attributes:
        category_errors: Failure reason per requested category key
    """

    def __init__(
        self,
        category_errors: dict[str, str],
        context: ErrorContext | None = None,
    ) -> None:
        self.category_errors = dict(category_errors)
        categories = ", ".join(sorted(self.category_errors))
        super().__init__(
            ErrorCode.ALL_CATEGORIES_FAILED,
            f"All categories failed: {categories}",
            context,
        )


class TypeCoercionError(DomainError):
    """Raised when an upstream payload cannot be converted into a model.

    Attributes:
        model_name: Name of the target Pydantic model
        validation_errors: List of field-level validation errors
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        model_name: str | None = None,
        validation_errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(code, message, context, original_error)
        self.model_name = model_name
        self.validation_errors = validation_errors or []


def create_validation_error(
    message: str,
    field: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> DomainError:
    """Create a validation error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"field": field} if field else None
    )
    context = ErrorContext(
        operation=operation,
        additional_data=additional_data,
    )
    return DomainError(
        ErrorCode.VALIDATION_ERROR,
        message,
        context,
        original_error,
    )


def create_type_coercion_error(
    message: str,
    model_name: str,
    validation_errors: list[dict[str, Any]] | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> TypeCoercionError:
    """Create a type coercion error with context.

    Example:
        >>> from pydantic import ValidationError
        >>> try:
        ...     CatalogItem.model_validate(raw)
        ... except ValidationError as e:
        ...     error = create_type_coercion_error(
        ...         message="Invalid catalog item",
        ...         model_name="CatalogItem",
        ...         validation_errors=e.errors(),
        ...         original_error=e,
        ...     )
    """
    additional_data: dict[str, PrimitiveContextValue] = {
        "model_name": model_name,
        "validation_error_count": len(validation_errors) if validation_errors else 0,
    }
    context = ErrorContext(
        operation=operation or "type_conversion",
        additional_data=additional_data,
    )
    return TypeCoercionError(
        code=ErrorCode.TYPE_COERCION_ERROR,
        message=message,
        context=context,
        original_error=original_error,
        model_name=model_name,
        validation_errors=validation_errors,
    )
