"""
Profile Completion

Scores how much of a student's profile is complete, as a percentage of
the sections visible to the student's batch.

Each of the nine sections is either complete or not. Course details,
university and post-admission have no user-fillable fields yet and are
never complete; batches that do not use them hide them through form
visibility.
"""

import enum
import re
from collections.abc import Mapping
from typing import Any

from erp.modules.students.profile import DocumentRef, ProfileSnapshot
from erp.modules.students.sections import ProfileSection

# Financial proofs are prefixed with the party whose income they document
FINANCIAL_DOC_PATTERN = re.compile(r"^(PERSONAL|MOTHER|FATHER|OTHER_SOURCE)_")
EDUCATION_DOC_PATTERN = re.compile(
    r"^(MARKSHEET_10TH|MARKSHEET_12TH|GRE_SCORECARD|TOEFL_SCORECARD|LANGUAGE_TEST_SCORECARD)$"
)


class DocumentCategory(str, enum.Enum):
    """Which profile section a document counts towards."""

    FINANCIAL = "financial"
    EDUCATION = "education"
    GENERAL = "general"


def classify_document_type(doc_type: str | None) -> DocumentCategory:
    """
    Classify a document type tag.

    Anything that is neither financial nor education is general,
    including missing tags.
    """
    if not isinstance(doc_type, str) or not doc_type:
        return DocumentCategory.GENERAL
    if FINANCIAL_DOC_PATTERN.match(doc_type):
        return DocumentCategory.FINANCIAL
    if EDUCATION_DOC_PATTERN.match(doc_type):
        return DocumentCategory.EDUCATION
    return DocumentCategory.GENERAL


def is_filled(value: Any) -> bool:
    """None, blank strings and empty lists count as not filled."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, list | tuple):
        return len(value) > 0
    return True


def _has_document(documents: list[DocumentRef], category: DocumentCategory) -> bool:
    return any(classify_document_type(doc.type) == category for doc in documents)


def evaluate_sections(profile: ProfileSnapshot) -> dict[ProfileSection, bool]:
    """
    Evaluate the completion predicate of every section.

    Args:
        profile: Profile snapshot

    Returns:
        Mapping of each section to whether it is complete
    """
    personal = profile.personal
    education = profile.education
    travel = profile.travel
    work = profile.work
    financials = profile.financials
    documents = profile.documents

    personal_completed = all(
        is_filled(value)
        for value in (
            personal.first_name,
            personal.last_name,
            personal.phone,
            personal.date_of_birth,
            personal.gender,
            personal.nationality,
        )
    )

    education_completed = all(
        is_filled(value)
        for value in (
            education.school,
            education.school_grade,
            education.high_school,
            education.high_school_grade,
        )
    )

    # An explicit "no" to the visa question counts as answered
    travel_completed = is_filled(travel.travel_history) or travel.visa_refused is not None

    work_completed = work.has_work_experience is False or (
        work.has_work_experience is True and is_filled(work.work_experiences)
    )

    financials_completed = (
        is_filled(financials.personal_ever_employed)
        and is_filled(financials.mother_income_type)
        and is_filled(financials.father_income_type)
        and _has_document(documents.documents, DocumentCategory.FINANCIAL)
    )

    documents_completed = is_filled(documents.passport_photo) and _has_document(
        documents.documents, DocumentCategory.GENERAL
    )

    return {
        ProfileSection.PERSONAL_DETAILS: personal_completed,
        ProfileSection.EDUCATION: education_completed,
        ProfileSection.TRAVEL: travel_completed,
        ProfileSection.WORK_DETAILS: work_completed,
        ProfileSection.FINANCIALS: financials_completed,
        ProfileSection.DOCUMENTS: documents_completed,
        ProfileSection.COURSE_DETAILS: False,
        ProfileSection.UNIVERSITY: False,
        ProfileSection.POST_ADMISSION: False,
    }


def is_section_visible(visibility: Mapping[str, Any] | None, section: ProfileSection) -> bool:
    """A section is visible unless the mapping holds an explicit False for it."""
    if not visibility:
        return True
    value = visibility.get(section.value, True)
    if isinstance(value, bool):
        return value
    return True


def calculate_profile_completion(
    profile: ProfileSnapshot,
    visibility: Mapping[str, Any] | None = None,
) -> float:
    """
    Compute the profile completion percentage.

    Only sections visible to the student count. Unknown visibility keys
    are ignored and non-boolean values count as visible.

    Args:
        profile: Profile snapshot
        visibility: Section key -> visible mapping (None shows every section)

    Returns:
        Percentage in [0, 100], rounded to two decimals. 0 when no section is visible.
    """
    sections = evaluate_sections(profile)
    visible = [
        completed
        for section, completed in sections.items()
        if is_section_visible(visibility, section)
    ]

    if not visible:
        return 0.0

    completed_count = sum(1 for completed in visible if completed)
    return round(completed_count * 100 / len(visible), 2)
