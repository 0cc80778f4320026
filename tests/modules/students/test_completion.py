"""
Unit tests for the profile completion evaluator.

These tests cover:
- Document classification
- Per-section completion predicates
- Visibility filtering and percentage rounding
"""

import pytest

from erp.modules.students.completion import (
    DocumentCategory,
    calculate_profile_completion,
    classify_document_type,
    evaluate_sections,
    is_filled,
    is_section_visible,
)
from erp.modules.students.profile import (
    DocumentDetails,
    DocumentRef,
    FinancialDetails,
    PersonalDetails,
    ProfileSnapshot,
    TravelDetails,
    WorkDetails,
)
from erp.modules.students.sections import ProfileSection

PLACEHOLDERS_HIDDEN = {"course_details": False, "university": False, "post_admission": False}
ALL_HIDDEN = {section.value: False for section in ProfileSection}


class TestClassifyDocumentType:
    """Tests for classify_document_type."""

    @pytest.mark.parametrize(
        "doc_type",
        ["MOTHER_INCOME_PROOF", "PERSONAL_ITR", "FATHER_PAN_CARD", "OTHER_SOURCE_SALARY_SLIPS"],
    )
    def test_financial(self, doc_type):
        assert classify_document_type(doc_type) == DocumentCategory.FINANCIAL

    @pytest.mark.parametrize(
        "doc_type",
        ["MARKSHEET_10TH", "MARKSHEET_12TH", "GRE_SCORECARD", "TOEFL_SCORECARD"],
    )
    def test_education(self, doc_type):
        assert classify_document_type(doc_type) == DocumentCategory.EDUCATION

    @pytest.mark.parametrize("doc_type", ["RESUME", "PASSPORT", "VISA", "", None])
    def test_everything_else_is_general(self, doc_type):
        assert classify_document_type(doc_type) == DocumentCategory.GENERAL

    def test_financial_prefix_must_lead(self):
        assert classify_document_type("COPY_OF_MOTHER_ITR") == DocumentCategory.GENERAL


class TestIsFilled:
    """Tests for the emptiness rule."""

    @pytest.mark.parametrize("value", [None, "", "   ", []])
    def test_empty_values(self, value):
        assert is_filled(value) is False

    @pytest.mark.parametrize("value", ["x", ["trip"], False, 0])
    def test_filled_values(self, value):
        assert is_filled(value) is True


class TestEvaluateSections:
    """Tests for the per-section predicates."""

    def test_empty_profile_completes_nothing(self):
        sections = evaluate_sections(ProfileSnapshot())
        assert not any(sections.values())

    def test_whitespace_name_is_not_filled(self, personal_complete):
        personal = personal_complete.model_copy(update={"first_name": "   "})
        sections = evaluate_sections(ProfileSnapshot(personal=personal))
        assert sections[ProfileSection.PERSONAL_DETAILS] is False

    @pytest.mark.parametrize(
        ("has_work_experience", "work_experiences", "expected"),
        [
            (False, None, True),
            (False, [{"company": "Acme"}], True),
            (True, [{"company": "Acme"}], True),
            (True, [], False),
            (True, None, False),
            (None, None, False),
            (None, [{"company": "Acme"}], False),
        ],
    )
    def test_work_details_truth_table(self, has_work_experience, work_experiences, expected):
        profile = ProfileSnapshot(
            work=WorkDetails(
                has_work_experience=has_work_experience,
                work_experiences=work_experiences,
            )
        )
        assert evaluate_sections(profile)[ProfileSection.WORK_DETAILS] is expected

    def test_travel_answered_by_visa_question_alone(self):
        profile = ProfileSnapshot(travel=TravelDetails(visa_refused=False))
        assert evaluate_sections(profile)[ProfileSection.TRAVEL] is True

    def test_travel_answered_by_history_alone(self):
        profile = ProfileSnapshot(travel=TravelDetails(travel_history=[{"country": "UAE"}]))
        assert evaluate_sections(profile)[ProfileSection.TRAVEL] is True

    def test_financials_need_a_financial_document(self):
        financials = FinancialDetails(
            personal_ever_employed="no",
            mother_income_type="salaried",
            father_income_type="business",
        )
        without_doc = ProfileSnapshot(
            financials=financials,
            documents=DocumentDetails(documents=[DocumentRef(type="PASSPORT")]),
        )
        with_doc = ProfileSnapshot(
            financials=financials,
            documents=DocumentDetails(documents=[DocumentRef(type="MOTHER_INCOME_PROOF")]),
        )

        assert evaluate_sections(without_doc)[ProfileSection.FINANCIALS] is False
        assert evaluate_sections(with_doc)[ProfileSection.FINANCIALS] is True

    def test_documents_need_photo_and_general_document(self):
        only_education_doc = ProfileSnapshot(
            documents=DocumentDetails(
                passport_photo="/uploads/photo.png",
                documents=[DocumentRef(type="MARKSHEET_10TH")],
            )
        )
        untyped_doc = ProfileSnapshot(
            documents=DocumentDetails(
                passport_photo="/uploads/photo.png",
                documents=[DocumentRef(type=None)],
            )
        )

        assert evaluate_sections(only_education_doc)[ProfileSection.DOCUMENTS] is False
        assert evaluate_sections(untyped_doc)[ProfileSection.DOCUMENTS] is True

    def test_placeholder_sections_never_complete(self, complete_profile):
        sections = evaluate_sections(complete_profile)

        assert sections[ProfileSection.COURSE_DETAILS] is False
        assert sections[ProfileSection.UNIVERSITY] is False
        assert sections[ProfileSection.POST_ADMISSION] is False


class TestCalculateProfileCompletion:
    """Tests for calculate_profile_completion."""

    def test_empty_profile_is_zero(self):
        assert calculate_profile_completion(ProfileSnapshot()) == 0.0

    def test_personal_and_education_only(self, personal_complete, education_complete):
        profile = ProfileSnapshot(personal=personal_complete, education=education_complete)
        assert calculate_profile_completion(profile, {}) == 22.22

    def test_complete_profile_with_placeholders_hidden(self, complete_profile):
        assert calculate_profile_completion(complete_profile, PLACEHOLDERS_HIDDEN) == 100.0

    def test_complete_profile_with_everything_visible(self, complete_profile):
        assert calculate_profile_completion(complete_profile) == 66.67

    def test_all_sections_hidden_is_zero(self, complete_profile):
        assert calculate_profile_completion(complete_profile, ALL_HIDDEN) == 0.0

    def test_hidden_incomplete_section_is_not_counted(self, personal_complete):
        profile = ProfileSnapshot(personal=personal_complete)
        visibility = {section.value: False for section in ProfileSection}
        visibility["personal_details"] = True
        visibility["education"] = True

        assert calculate_profile_completion(profile, visibility) == 50.0

    def test_non_boolean_visibility_counts_as_visible(self, complete_profile):
        visibility = {**PLACEHOLDERS_HIDDEN, "university": "no"}
        # Six complete of seven visible
        assert calculate_profile_completion(complete_profile, visibility) == 85.71

    def test_unknown_visibility_keys_are_ignored(self, complete_profile):
        visibility = {**PLACEHOLDERS_HIDDEN, "scholarships": False}
        assert calculate_profile_completion(complete_profile, visibility) == 100.0

    def test_result_stays_in_range(self, complete_profile):
        for visibility in (None, {}, PLACEHOLDERS_HIDDEN, ALL_HIDDEN):
            assert 0.0 <= calculate_profile_completion(complete_profile, visibility) <= 100.0


class TestIsSectionVisible:
    """Tests for is_section_visible."""

    def test_missing_mapping_shows_section(self):
        assert is_section_visible(None, ProfileSection.TRAVEL) is True

    def test_missing_key_shows_section(self):
        assert is_section_visible({"education": False}, ProfileSection.TRAVEL) is True

    def test_explicit_false_hides_section(self):
        assert is_section_visible({"travel": False}, ProfileSection.TRAVEL) is False

    @pytest.mark.parametrize("value", [None, 0, "false", []])
    def test_non_boolean_values_show_section(self, value):
        assert is_section_visible({"travel": value}, ProfileSection.TRAVEL) is True


def test_personal_dates_accept_iso_strings():
    profile = ProfileSnapshot(
        personal=PersonalDetails(
            first_name="Aisha",
            last_name="Khan",
            phone="1",
            date_of_birth="2003-04-12",
            gender="female",
            nationality="Indian",
        )
    )
    assert evaluate_sections(profile)[ProfileSection.PERSONAL_DETAILS] is True
