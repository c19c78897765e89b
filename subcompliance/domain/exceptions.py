"""Domain exceptions for the compliance engine.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class ComplianceException(Exception):
    """Base exception for all compliance engine errors.

    All custom exceptions inherit from this class to allow consistent
    error handling and logging. Presentation layer maps these to HTTP
    responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the HTTP exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(ComplianceException):
    """Raised when input validation fails (e.g. rejection reason too short)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class InvalidTransitionException(ComplianceException):
    """Raised when a lifecycle operation is not allowed from the current status."""

    def __init__(
        self,
        operation: str,
        current_status: str,
        requirement_id: str | None = None,
    ) -> None:
        """Initialize with the attempted operation and the current status.

        Args:
            operation: Attempted operation (e.g. 'accept').
            current_status: Effective status at the time of the attempt.
            requirement_id: Optional requirement id for context.
        """
        details: dict[str, Any] = {
            "operation": operation,
            "current_status": current_status,
        }
        if requirement_id:
            details["requirement_id"] = requirement_id
        super().__init__(
            f"Cannot {operation} a requirement in status '{current_status}'",
            "INVALID_TRANSITION",
            details,
        )


class ResourceNotFoundException(ComplianceException):
    """Raised when a requested resource (subcontractor, requirement, document type) is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'subcontractor', 'requirement').
            resource_id: Identifier that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ConcurrentModificationException(ComplianceException):
    """Raised when an optimistic-lock check fails (row changed since it was read)."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with the resource whose version check failed.

        Args:
            resource_type: Type of resource (e.g. 'requirement').
            resource_id: Identifier of the stale row.
        """
        super().__init__(
            f"{resource_type} {resource_id} was modified concurrently; reload and retry",
            "CONCURRENT_MODIFICATION",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ComplianceNotSatisfiedException(ComplianceException):
    """Raised when activation is attempted for a subcontractor that is not compliant."""

    def __init__(
        self,
        subcontractor_id: str,
        compliance_status: str,
        missing_documents: list[str],
    ) -> None:
        """Initialize with the aggregate result that blocked the operation.

        Args:
            subcontractor_id: Subcontractor id.
            compliance_status: Recomputed aggregate status.
            missing_documents: Required document type ids that are not satisfied.
        """
        super().__init__(
            f"Subcontractor {subcontractor_id} is not compliant ({compliance_status})",
            "NOT_COMPLIANT",
            {
                "subcontractor_id": subcontractor_id,
                "compliance_status": compliance_status,
                "missing_documents": missing_documents,
            },
        )


class ConfigurationException(ComplianceException):
    """Raised at startup when the document catalog or rule table is inconsistent."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize with a description of the configuration problem.

        Args:
            message: What is wrong with the configuration.
            details: Optional context (e.g. offending document type id).
        """
        super().__init__(message, "CONFIGURATION_ERROR", details)


class SqlNotConfiguredException(ComplianceException):
    """Raised when a SQL-backed dependency is used but DATABASE_URL is not set."""

    def __init__(self) -> None:
        super().__init__(
            "SQL database not configured. Set DATABASE_URL and run: alembic upgrade head",
            "SERVICE_UNAVAILABLE",
        )


class StaleAggregateWarning(ComplianceException):
    """Signals that a cached compliance aggregate no longer matches its inputs.

    Raised and handled internally by the compliance query path, which logs
    and recomputes. Never surfaced to API callers.
    """

    def __init__(
        self,
        subcontractor_id: str,
        cached_revision: int | None,
        current_revision: int,
    ) -> None:
        super().__init__(
            f"Cached compliance for {subcontractor_id} is stale",
            "STALE_AGGREGATE",
            {
                "subcontractor_id": subcontractor_id,
                "cached_revision": cached_revision,
                "current_revision": current_revision,
            },
        )
