"""Compliance read use cases: status, summary, requirements, assignment validation."""

from subcompliance.application.use_cases.compliance.compliance_queries import (
    ComplianceQueryUseCase,
)

__all__ = ["ComplianceQueryUseCase"]
