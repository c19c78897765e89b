"""Subcontractor use cases: lifecycle, profile updates, requirement derivation, custom documents."""

from subcompliance.application.use_cases.subcontractors.add_custom_document import (
    AddCustomDocumentUseCase,
)
from subcompliance.application.use_cases.subcontractors.manage_subcontractor import (
    ActivateSubcontractorUseCase,
    CreateSubcontractorUseCase,
    DeactivateSubcontractorUseCase,
    DeleteSubcontractorUseCase,
)
from subcompliance.application.use_cases.subcontractors.recompute_requirements import (
    RecomputeRequirementsUseCase,
)
from subcompliance.application.use_cases.subcontractors.update_profile import (
    UpdateProfileUseCase,
)

__all__ = [
    "ActivateSubcontractorUseCase",
    "AddCustomDocumentUseCase",
    "CreateSubcontractorUseCase",
    "DeactivateSubcontractorUseCase",
    "DeleteSubcontractorUseCase",
    "RecomputeRequirementsUseCase",
    "UpdateProfileUseCase",
]
