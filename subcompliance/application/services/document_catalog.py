"""Document catalog: document types plus the conditional requirement rule table.

The catalog is built once at process start and validated eagerly; any
inconsistency raises ConfigurationException so a broken catalog never
reaches the rule engine. A JSON file (Settings.catalog_file) can replace
the built-in German catalog.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from subcompliance.domain.enums import ProfileQuestion, RequirementLevel
from subcompliance.domain.exceptions import (
    ConfigurationException,
    ResourceNotFoundException,
)
from subcompliance.domain.value_objects import (
    DocumentType,
    FixedCalendarDate,
    FixedMonths,
    NoExpiry,
    UserDeclaredUnknown,
    ValidityPolicy,
    is_custom_document_type,
)

# Validity of custom (admin-added) document types
CUSTOM_DOCUMENT_VALIDITY = FixedMonths(12)


@dataclass(frozen=True)
class Gate:
    """Prerequisite question a rule depends on.

    The rule's own question is only evaluated when the gate is YES. A NO
    gate yields if_no; an UNKNOWN gate yields OPTIONAL.
    """

    question: ProfileQuestion
    if_no: RequirementLevel = RequirementLevel.HIDDEN


@dataclass(frozen=True)
class ConditionalRule:
    """Maps one profile question to a requirement level for a document type."""

    document_type_id: str
    question: ProfileQuestion
    if_yes: RequirementLevel
    if_no: RequirementLevel
    gate: Gate | None = None


class DocumentCatalog:
    """Immutable registry of document types and their conditional rules.

    Iteration order is catalog order (stable for derivation output).
    """

    def __init__(
        self,
        document_types: Iterable[DocumentType],
        rules: Iterable[ConditionalRule] = (),
    ) -> None:
        self._types: dict[str, DocumentType] = {}
        for doc_type in document_types:
            if doc_type.id in self._types:
                raise ConfigurationException(
                    f"Duplicate document type id: {doc_type.id}",
                    {"document_type_id": doc_type.id},
                )
            if is_custom_document_type(doc_type.id):
                raise ConfigurationException(
                    f"Catalog document type ids must not use the custom prefix: {doc_type.id}",
                    {"document_type_id": doc_type.id},
                )
            self._types[doc_type.id] = doc_type
        self._rules: dict[str, ConditionalRule] = {}
        for rule in rules:
            self._validate_rule(rule)
            self._rules[rule.document_type_id] = rule

    def _validate_rule(self, rule: ConditionalRule) -> None:
        if rule.document_type_id not in self._types:
            raise ConfigurationException(
                f"Rule references unknown document type: {rule.document_type_id}",
                {"document_type_id": rule.document_type_id},
            )
        if rule.document_type_id in self._rules:
            raise ConfigurationException(
                f"More than one rule for document type: {rule.document_type_id}",
                {"document_type_id": rule.document_type_id},
            )
        if rule.gate is not None and rule.gate.question == rule.question:
            raise ConfigurationException(
                f"Rule for {rule.document_type_id} is gated on its own question",
                {"document_type_id": rule.document_type_id},
            )

    def __iter__(self) -> Iterator[DocumentType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, document_type_id: object) -> bool:
        return document_type_id in self._types

    def get(self, document_type_id: str) -> DocumentType | None:
        """Return the document type, or None for unknown and custom ids."""
        return self._types.get(document_type_id)

    def rule_for(self, document_type_id: str) -> ConditionalRule | None:
        """Return the conditional rule of a document type, if any."""
        return self._rules.get(document_type_id)

    def label_for(self, document_type_id: str) -> str:
        """Return the display label (the id itself for custom or unknown types)."""
        doc_type = self._types.get(document_type_id)
        return doc_type.label if doc_type else document_type_id

    def validity_policy_for(self, document_type_id: str) -> ValidityPolicy:
        """Return the validity policy for a catalog or custom document type.

        Raises:
            ResourceNotFoundException: If the id is neither custom nor in the catalog.
        """
        if is_custom_document_type(document_type_id):
            return CUSTOM_DOCUMENT_VALIDITY
        doc_type = self._types.get(document_type_id)
        if doc_type is None:
            raise ResourceNotFoundException("document_type", document_type_id)
        return doc_type.validity_policy


def default_catalog() -> DocumentCatalog:
    """Return the built-in catalog for German subcontractor compliance."""
    document_types = [
        DocumentType(
            "gewerbeanmeldung", "Gewerbeanmeldung", validity_policy=NoExpiry()
        ),
        DocumentType(
            "haftpflicht",
            "Betriebshaftpflichtversicherung",
            validity_policy=FixedMonths(12),
        ),
        DocumentType(
            "freistellungsbescheinigung",
            "Freistellungsbescheinigung (§ 48b EStG)",
            validity_policy=FixedMonths(12),
        ),
        DocumentType(
            "handelsregisterauszug",
            "Handelsregisterauszug",
            validity_policy=FixedMonths(3),
        ),
        DocumentType(
            "handwerksrolle",
            "Eintragung in die Handwerksrolle",
            required_by_default=False,
            validity_policy=NoExpiry(),
        ),
        DocumentType(
            "unbedenklichkeitsbescheinigung",
            "Bescheinigung in Steuersachen (Unbedenklichkeit)",
            required_by_default=False,
            validity_policy=FixedMonths(3),
        ),
        DocumentType(
            "bg_mitgliedschaft",
            "Mitgliedschaft in der Berufsgenossenschaft",
            validity_policy=FixedMonths(12),
            optional_for_sole_proprietor=True,
        ),
        DocumentType(
            "kk_unbedenklichkeit",
            "Unbedenklichkeitsbescheinigung der Krankenkasse",
            validity_policy=FixedMonths(3),
        ),
        DocumentType(
            "sicherheitsunterweisung",
            "Sicherheitsunterweisung (jährlich)",
            validity_policy=FixedMonths(12),
        ),
        DocumentType(
            "soka_bau",
            "SOKA-BAU Bescheinigung",
            validity_policy=FixedMonths(12),
        ),
        DocumentType(
            "a1_bescheinigung",
            "A1-Bescheinigung (bei Entsendung ins Ausland)",
            validity_policy=UserDeclaredUnknown(default_months=6),
        ),
        DocumentType(
            "avv",
            "Auftragsverarbeitungsvertrag (AVV, Art. 28 DSGVO)",
            validity_policy=NoExpiry(),
        ),
        DocumentType(
            "arbeitserlaubnis",
            "Aufenthaltstitel mit Arbeitserlaubnis",
            validity_policy=UserDeclaredUnknown(),
        ),
        DocumentType(
            "entsendemeldung",
            "Meldung nach AEntG (Entsendung)",
            validity_policy=FixedMonths(6),
        ),
    ]
    required, optional, hidden = (
        RequirementLevel.REQUIRED,
        RequirementLevel.OPTIONAL,
        RequirementLevel.HIDDEN,
    )
    q = ProfileQuestion
    rules = [
        ConditionalRule("handelsregisterauszug", q.HR_REGISTERED, required, hidden),
        ConditionalRule("bg_mitgliedschaft", q.HAS_EMPLOYEES, required, hidden),
        ConditionalRule("kk_unbedenklichkeit", q.HAS_EMPLOYEES, optional, hidden),
        ConditionalRule(
            "sicherheitsunterweisung",
            q.DOES_CONSTRUCTION_WORK,
            required,
            optional,
            gate=Gate(q.HAS_EMPLOYEES),
        ),
        ConditionalRule(
            "freistellungsbescheinigung", q.DOES_CONSTRUCTION_WORK, required, optional
        ),
        ConditionalRule(
            "soka_bau",
            q.SOKA_BAU_SUBJECT,
            required,
            hidden,
            gate=Gate(q.DOES_CONSTRUCTION_WORK),
        ),
        ConditionalRule("a1_bescheinigung", q.SENDS_WORKERS_ABROAD, required, hidden),
        ConditionalRule("avv", q.PROCESSES_PERSONAL_DATA, required, hidden),
        ConditionalRule("arbeitserlaubnis", q.NON_EU_WORKERS, required, hidden),
        ConditionalRule(
            "entsendemeldung", q.WORKERS_NOT_EMPLOYED_IN_GERMANY, required, hidden
        ),
    ]
    return DocumentCatalog(document_types, rules)


class _ValidityPolicyModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal[
        "no_expiry", "fixed_months", "fixed_calendar_date", "user_declared_unknown"
    ]
    months: int | None = None
    month: int | None = None
    day: int | None = None
    default_months: int | None = None

    def to_policy(self) -> ValidityPolicy:
        if self.kind == "no_expiry":
            return NoExpiry()
        if self.kind == "fixed_months":
            if self.months is None:
                raise ValueError("fixed_months requires 'months'")
            return FixedMonths(self.months)
        if self.kind == "fixed_calendar_date":
            if self.month is None or self.day is None:
                raise ValueError("fixed_calendar_date requires 'month' and 'day'")
            return FixedCalendarDate(self.month, self.day)
        return UserDeclaredUnknown(self.default_months)


class _DocumentTypeModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)
    required_by_default: bool = True
    optional_for_sole_proprietor: bool = False
    validity: _ValidityPolicyModel = Field(
        default_factory=lambda: _ValidityPolicyModel(kind="no_expiry")
    )


class _GateModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    question: ProfileQuestion
    if_no: RequirementLevel = RequirementLevel.HIDDEN


class _RuleModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    document_type_id: str
    question: ProfileQuestion
    if_yes: RequirementLevel
    if_no: RequirementLevel
    gate: _GateModel | None = None


class _CatalogFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    document_types: list[_DocumentTypeModel]
    rules: list[_RuleModel] = Field(default_factory=list)


def parse_catalog(data: object) -> DocumentCatalog:
    """Build a catalog from decoded JSON data.

    Raises:
        ConfigurationException: If the data does not describe a valid catalog.
    """
    try:
        model = _CatalogFileModel.model_validate(data)
        document_types = [
            DocumentType(
                id=d.id,
                label=d.label,
                required_by_default=d.required_by_default,
                validity_policy=d.validity.to_policy(),
                optional_for_sole_proprietor=d.optional_for_sole_proprietor,
            )
            for d in model.document_types
        ]
    except (ValidationError, ValueError) as e:
        raise ConfigurationException(f"Invalid document catalog: {e}") from e
    rules = [
        ConditionalRule(
            document_type_id=r.document_type_id,
            question=r.question,
            if_yes=r.if_yes,
            if_no=r.if_no,
            gate=Gate(r.gate.question, r.gate.if_no) if r.gate else None,
        )
        for r in model.rules
    ]
    return DocumentCatalog(document_types, rules)


def load_catalog_file(path: str | Path) -> DocumentCatalog:
    """Load and validate a catalog from a JSON file.

    Raises:
        ConfigurationException: If the file is unreadable, not JSON, or inconsistent.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationException(
            f"Cannot read document catalog file {path}: {e}", {"path": str(path)}
        ) from e
    return parse_catalog(data)
