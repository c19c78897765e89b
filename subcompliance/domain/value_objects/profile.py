"""Organizational profile value object (canonical answer model)."""

from dataclasses import asdict, dataclass
from typing import Any

from subcompliance.domain.enums import Answer, CompanyType, ProfileQuestion


@dataclass(frozen=True)
class OrganizationalProfile:
    """Facts about a subcontractor that determine which documents apply.

    Every question is tri-state; unanswered questions are UNKNOWN.
    soka_bau_subject is only meaningful when does_construction_work is YES
    and stays None when it was never asked.
    """

    company_type: CompanyType
    has_employees: Answer = Answer.UNKNOWN
    does_construction_work: Answer = Answer.UNKNOWN
    soka_bau_subject: Answer | None = None
    sends_workers_abroad: Answer = Answer.UNKNOWN
    processes_personal_data: Answer = Answer.UNKNOWN
    hr_registered: Answer = Answer.UNKNOWN
    non_eu_workers: Answer = Answer.UNKNOWN
    workers_not_employed_in_germany: Answer = Answer.UNKNOWN

    def answer(self, question: ProfileQuestion) -> Answer:
        """Return the answer for a question; None is read as UNKNOWN."""
        value = getattr(self, question.value)
        return value if value is not None else Answer.UNKNOWN

    def unknown_questions(self) -> list[ProfileQuestion]:
        """Return questions still answered UNKNOWN (soka_bau only when relevant)."""
        result = []
        for question in ProfileQuestion:
            if (
                question == ProfileQuestion.SOKA_BAU_SUBJECT
                and self.does_construction_work != Answer.YES
            ):
                continue
            if self.answer(question) == Answer.UNKNOWN:
                result.append(question)
        return result

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict (enum values as strings)."""
        return {
            key: (value.value if value is not None else None)
            for key, value in asdict(self).items()
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrganizationalProfile":
        """Build from a dict produced by to_dict(); missing answers become UNKNOWN.

        Raises:
            ValueError: If company_type or an answer value is not a valid enum value.
        """
        kwargs: dict[str, Any] = {"company_type": CompanyType(data["company_type"])}
        for question in ProfileQuestion:
            raw = data.get(question.value)
            if raw is None:
                if question != ProfileQuestion.SOKA_BAU_SUBJECT:
                    kwargs[question.value] = Answer.UNKNOWN
                continue
            kwargs[question.value] = Answer(raw)
        return cls(**kwargs)
