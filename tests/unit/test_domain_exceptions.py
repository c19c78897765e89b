"""Tests for domain exceptions (error_code, message, details)."""

from subcompliance.domain.exceptions import (
    ComplianceException,
    ComplianceNotSatisfiedException,
    ConcurrentModificationException,
    ConfigurationException,
    InvalidTransitionException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    StaleAggregateWarning,
    ValidationException,
)


def test_compliance_exception_default_error_code() -> None:
    """Base ComplianceException uses class name as error_code when not provided."""
    exc = ComplianceException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "ComplianceException"
    assert exc.details == {}


def test_compliance_exception_to_dict() -> None:
    """to_dict returns the JSON error body."""
    exc = ComplianceException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {
        "error": "CUSTOM",
        "message": "Oops",
        "details": {"key": "value"},
    }


def test_validation_exception() -> None:
    """ValidationException sets VALIDATION_ERROR and optional field in details."""
    exc = ValidationException("Invalid reason", field="reason")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "reason"}
    assert ValidationException("Invalid").details == {}


def test_invalid_transition_exception() -> None:
    """InvalidTransitionException names the operation and current status."""
    exc = InvalidTransitionException("accept", "missing", "req-1")
    assert exc.error_code == "INVALID_TRANSITION"
    assert exc.message == "Cannot accept a requirement in status 'missing'"
    assert exc.details == {
        "operation": "accept",
        "current_status": "missing",
        "requirement_id": "req-1",
    }


def test_resource_not_found_exception() -> None:
    """ResourceNotFoundException sets RESOURCE_NOT_FOUND and resource details."""
    exc = ResourceNotFoundException("subcontractor", "sub-1")
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.details == {"resource_type": "subcontractor", "resource_id": "sub-1"}


def test_concurrent_modification_exception() -> None:
    """ConcurrentModificationException sets CONCURRENT_MODIFICATION."""
    exc = ConcurrentModificationException("requirement", "req-1")
    assert exc.error_code == "CONCURRENT_MODIFICATION"
    assert exc.details["resource_id"] == "req-1"


def test_compliance_not_satisfied_exception() -> None:
    """ComplianceNotSatisfiedException carries status and missing documents."""
    exc = ComplianceNotSatisfiedException("sub-1", "non_compliant", ["haftpflicht"])
    assert exc.error_code == "NOT_COMPLIANT"
    assert exc.details["missing_documents"] == ["haftpflicht"]


def test_configuration_exception() -> None:
    """ConfigurationException sets CONFIGURATION_ERROR."""
    exc = ConfigurationException("bad catalog", {"document_type_id": "a"})
    assert exc.error_code == "CONFIGURATION_ERROR"
    assert exc.details == {"document_type_id": "a"}


def test_sql_not_configured_exception() -> None:
    """SqlNotConfiguredException maps to SERVICE_UNAVAILABLE."""
    assert SqlNotConfiguredException().error_code == "SERVICE_UNAVAILABLE"


def test_stale_aggregate_warning() -> None:
    """StaleAggregateWarning records both revisions."""
    exc = StaleAggregateWarning("sub-1", 2, 3)
    assert exc.error_code == "STALE_AGGREGATE"
    assert exc.details["cached_revision"] == 2
    assert exc.details["current_revision"] == 3
