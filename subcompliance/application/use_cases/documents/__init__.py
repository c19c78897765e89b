"""Document use cases: upload, review and re-request (lifecycle transitions)."""

from subcompliance.application.use_cases.documents.document_lifecycle import (
    DocumentLifecycleUseCase,
)

__all__ = ["DocumentLifecycleUseCase"]
