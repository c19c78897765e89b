"""Tests for the requirement rule engine (profile -> level per document type)."""

from fakes import firm_profile
from subcompliance.application.services.document_catalog import (
    ConditionalRule,
    DocumentCatalog,
    Gate,
    default_catalog,
)
from subcompliance.application.services.requirement_rules import (
    derive_requirements,
    uncertain_document_types,
)
from subcompliance.domain.enums import (
    Answer,
    CompanyType,
    ProfileQuestion,
    RequirementLevel,
)
from subcompliance.domain.value_objects import DocumentType, OrganizationalProfile

REQUIRED = RequirementLevel.REQUIRED
OPTIONAL = RequirementLevel.OPTIONAL
HIDDEN = RequirementLevel.HIDDEN


def test_every_catalog_type_gets_a_level_in_catalog_order() -> None:
    """derive_requirements returns one level per catalog type, in catalog order."""
    catalog = default_catalog()
    levels = derive_requirements(firm_profile(), catalog)
    assert list(levels) == [d.id for d in catalog]


def test_all_no_firm_only_requires_defaults() -> None:
    """A firm answering NO everywhere only needs the default-required documents."""
    levels = derive_requirements(firm_profile(), default_catalog())
    assert {k for k, v in levels.items() if v == REQUIRED} == {
        "gewerbeanmeldung",
        "haftpflicht",
    }
    assert levels["freistellungsbescheinigung"] == OPTIONAL
    assert levels["handwerksrolle"] == OPTIONAL
    assert levels["handelsregisterauszug"] == HIDDEN
    assert levels["bg_mitgliedschaft"] == HIDDEN
    assert levels["sicherheitsunterweisung"] == HIDDEN


def test_employees_make_bg_required_and_kk_optional() -> None:
    """hasEmployees=yes requires BG membership and offers the health insurer certificate."""
    levels = derive_requirements(
        firm_profile(has_employees=Answer.YES), default_catalog()
    )
    assert levels["bg_mitgliedschaft"] == REQUIRED
    assert levels["kk_unbedenklichkeit"] == OPTIONAL


def test_sole_proprietor_bg_is_optional_without_employees() -> None:
    """Sole proprietors see BG membership as optional even when hasEmployees=no."""
    profile = firm_profile(company_type=CompanyType.SOLE_PROPRIETOR)
    levels = derive_requirements(profile, default_catalog())
    assert levels["bg_mitgliedschaft"] == OPTIONAL


def test_sole_proprietor_override_downgrades_required() -> None:
    """The sole-proprietor override turns REQUIRED into OPTIONAL."""
    profile = firm_profile(
        company_type=CompanyType.SOLE_PROPRIETOR, has_employees=Answer.YES
    )
    levels = derive_requirements(profile, default_catalog())
    assert levels["bg_mitgliedschaft"] == OPTIONAL
    assert levels["kk_unbedenklichkeit"] == OPTIONAL


def test_unknown_answer_gives_optional() -> None:
    """An UNKNOWN answer never yields REQUIRED or HIDDEN."""
    profile = firm_profile(hr_registered=Answer.UNKNOWN)
    levels = derive_requirements(profile, default_catalog())
    assert levels["handelsregisterauszug"] == OPTIONAL


def test_gate_no_hides_gated_rule() -> None:
    """Safety instruction is hidden without employees even for construction work."""
    profile = firm_profile(has_employees=Answer.NO, does_construction_work=Answer.YES)
    levels = derive_requirements(profile, default_catalog())
    assert levels["sicherheitsunterweisung"] == HIDDEN


def test_gate_unknown_gives_optional() -> None:
    """An UNKNOWN gate yields OPTIONAL whatever the rule's own answer is."""
    profile = firm_profile(
        has_employees=Answer.UNKNOWN, does_construction_work=Answer.YES
    )
    levels = derive_requirements(profile, default_catalog())
    assert levels["sicherheitsunterweisung"] == OPTIONAL


def test_gate_yes_evaluates_rule_question() -> None:
    """With the gate answered YES the rule's own question decides."""
    catalog = default_catalog()
    yes = derive_requirements(
        firm_profile(has_employees=Answer.YES, does_construction_work=Answer.YES),
        catalog,
    )
    no = derive_requirements(
        firm_profile(has_employees=Answer.YES, does_construction_work=Answer.NO),
        catalog,
    )
    assert yes["sicherheitsunterweisung"] == REQUIRED
    assert no["sicherheitsunterweisung"] == OPTIONAL


def test_soka_bau_unasked_is_optional_for_construction() -> None:
    """soka_bau_subject left None under construction work counts as UNKNOWN."""
    profile = firm_profile(does_construction_work=Answer.YES)
    levels = derive_requirements(profile, default_catalog())
    assert profile.soka_bau_subject is None
    assert levels["soka_bau"] == OPTIONAL
    assert levels["freistellungsbescheinigung"] == REQUIRED


def test_soka_bau_subject_yes_requires_certificate() -> None:
    """SOKA-BAU subject firms doing construction work need the certificate."""
    profile = firm_profile(
        does_construction_work=Answer.YES, soka_bau_subject=Answer.YES
    )
    assert derive_requirements(profile, default_catalog())["soka_bau"] == REQUIRED


def test_derivation_is_deterministic() -> None:
    """Same profile and catalog always give the same mapping."""
    catalog = default_catalog()
    profile = firm_profile(sends_workers_abroad=Answer.YES)
    assert derive_requirements(profile, catalog) == derive_requirements(
        profile, catalog
    )


def test_type_without_rule_uses_catalog_default() -> None:
    """Types without a rule follow required_by_default."""
    catalog = DocumentCatalog(
        [
            DocumentType("a", "A"),
            DocumentType("b", "B", required_by_default=False),
        ]
    )
    profile = OrganizationalProfile(company_type=CompanyType.PARTNERSHIP_GBR)
    assert derive_requirements(profile, catalog) == {"a": REQUIRED, "b": OPTIONAL}


def test_gate_if_no_level_is_configurable() -> None:
    """A gate may map NO to a level other than HIDDEN."""
    catalog = DocumentCatalog(
        [DocumentType("x", "X")],
        [
            ConditionalRule(
                "x",
                ProfileQuestion.NON_EU_WORKERS,
                REQUIRED,
                HIDDEN,
                gate=Gate(ProfileQuestion.HAS_EMPLOYEES, if_no=OPTIONAL),
            )
        ],
    )
    profile = firm_profile(has_employees=Answer.NO)
    assert derive_requirements(profile, catalog) == {"x": OPTIONAL}


def test_uncertain_document_types_lists_types_decided_by_unknown() -> None:
    """uncertain_document_types names rule types whose deciding answer is UNKNOWN."""
    profile = OrganizationalProfile(company_type=CompanyType.CONSTRUCTION_FIRM)
    uncertain = uncertain_document_types(profile, default_catalog())
    assert "handelsregisterauszug" in uncertain
    assert "sicherheitsunterweisung" in uncertain
    assert "gewerbeanmeldung" not in uncertain


def test_uncertain_document_types_empty_for_fully_answered_profile() -> None:
    """A fully answered profile leaves nothing uncertain."""
    assert uncertain_document_types(firm_profile(), default_catalog()) == []
