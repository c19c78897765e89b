"""Requirement rule engine: organizational profile -> level per document type.

Pure and deterministic. Precedence per document type:
custom types are skipped; an UNKNOWN answer on a relevant question gives
OPTIONAL; gated rules only look at their own question when the gate is YES;
the sole-proprietor override downgrades REQUIRED to OPTIONAL; without a
rule the catalog default applies.
"""

from subcompliance.application.services.document_catalog import (
    ConditionalRule,
    DocumentCatalog,
)
from subcompliance.domain.enums import (
    Answer,
    CompanyType,
    RequirementLevel,
)
from subcompliance.domain.value_objects import DocumentType, OrganizationalProfile


def derive_requirements(
    profile: OrganizationalProfile, catalog: DocumentCatalog
) -> dict[str, RequirementLevel]:
    """Derive the requirement level of every catalog document type.

    Args:
        profile: Canonical organizational profile.
        catalog: Validated document catalog.

    Returns:
        Mapping of document type id to level, in catalog order. Custom
        document types never appear.
    """
    return {
        doc_type.id: _level_for(doc_type, catalog.rule_for(doc_type.id), profile)
        for doc_type in catalog
    }


def uncertain_document_types(
    profile: OrganizationalProfile, catalog: DocumentCatalog
) -> list[str]:
    """Return document types that are OPTIONAL only because an answer is UNKNOWN."""
    result = []
    for doc_type in catalog:
        rule = catalog.rule_for(doc_type.id)
        if rule is None:
            continue
        if _deciding_answer(rule, profile) == Answer.UNKNOWN:
            result.append(doc_type.id)
    return result


def _deciding_answer(
    rule: ConditionalRule, profile: OrganizationalProfile
) -> Answer:
    """Return the answer that decides the rule (gate first, then the rule's question)."""
    if rule.gate is not None:
        gate_answer = profile.answer(rule.gate.question)
        if gate_answer != Answer.YES:
            return gate_answer
    return profile.answer(rule.question)


def _level_for(
    doc_type: DocumentType,
    rule: ConditionalRule | None,
    profile: OrganizationalProfile,
) -> RequirementLevel:
    if rule is None:
        level = (
            RequirementLevel.REQUIRED
            if doc_type.required_by_default
            else RequirementLevel.OPTIONAL
        )
    else:
        level = _evaluate_rule(rule, profile)
    # Sole proprietors see flagged types as optional whatever the other answers say
    if (
        doc_type.optional_for_sole_proprietor
        and profile.company_type == CompanyType.SOLE_PROPRIETOR
    ):
        return RequirementLevel.OPTIONAL
    return level


def _evaluate_rule(
    rule: ConditionalRule, profile: OrganizationalProfile
) -> RequirementLevel:
    if rule.gate is not None:
        gate_answer = profile.answer(rule.gate.question)
        if gate_answer == Answer.UNKNOWN:
            return RequirementLevel.OPTIONAL
        if gate_answer == Answer.NO:
            return rule.gate.if_no
    answer = profile.answer(rule.question)
    if answer == Answer.YES:
        return rule.if_yes
    if answer == Answer.NO:
        return rule.if_no
    return RequirementLevel.OPTIONAL
