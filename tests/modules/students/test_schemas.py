"""
Unit tests for student request schemas.
"""

from datetime import date

import pytest
from pydantic import ValidationError

from erp.modules.batches.models import Program
from erp.modules.students.schemas import (
    EducationUpdate,
    OnboardingRequest,
    PersonalDetailsUpdate,
    ProfileUpdateRequest,
    TravelEntry,
    TravelUpdate,
    WorkUpdate,
)


class TestOnboardingRequest:
    """Tests for OnboardingRequest validation."""

    def test_minimal_request(self):
        request = OnboardingRequest(
            first_name="Aisha",
            last_name="Khan",
            program="BBA",
            intake_year=2024,
        )
        assert request.program == Program.BBA
        assert request.phone is None

    def test_intake_year_before_2020_rejected(self):
        with pytest.raises(ValidationError):
            OnboardingRequest(first_name="A", last_name="K", program="BS", intake_year=2019)

    def test_unknown_program_rejected(self):
        with pytest.raises(ValidationError):
            OnboardingRequest(first_name="A", last_name="K", program="MBA", intake_year=2025)

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            OnboardingRequest(first_name="", last_name="K", program="BS", intake_year=2025)


class TestProfileUpdateRequest:
    """Tests for flattening section updates into column values."""

    def test_only_sent_fields_are_included(self):
        request = ProfileUpdateRequest(
            personal=PersonalDetailsUpdate(phone="+911234567890"),
            education=EducationUpdate(school="DPS", gre_taken=False),
        )

        assert request.to_column_values() == {
            "phone": "+911234567890",
            "school": "DPS",
            "gre_taken": False,
        }

    def test_explicit_null_clears_field(self):
        request = ProfileUpdateRequest.model_validate({"personal": {"gender": None}})
        assert request.to_column_values() == {"gender": None}

    def test_null_names_are_dropped(self):
        request = ProfileUpdateRequest.model_validate({"personal": {"first_name": None}})
        assert request.to_column_values() == {}

    def test_dates_stay_dates(self):
        request = ProfileUpdateRequest(
            personal=PersonalDetailsUpdate(date_of_birth=date(2003, 4, 12))
        )
        assert request.to_column_values()["date_of_birth"] == date(2003, 4, 12)

    def test_list_sections_are_json_serialized(self):
        request = ProfileUpdateRequest(
            travel=TravelUpdate(
                travel_history=[TravelEntry(country="UAE", from_date=date(2022, 1, 5))],
                visa_refused=False,
            ),
            work=WorkUpdate(has_work_experience=False),
        )

        values = request.to_column_values()

        assert values["travel_history"] == [
            {"country": "UAE", "from_date": "2022-01-05", "to_date": None, "purpose": None}
        ]
        assert values["visa_refused"] is False
        assert values["has_work_experience"] is False

    def test_work_entries_have_uniform_shape(self):
        request = ProfileUpdateRequest.model_validate(
            {
                "work": {
                    "work_experiences": [
                        {"company": "Acme"},
                        {"company": "Globex", "role": "Intern"},
                    ]
                }
            }
        )

        values = request.to_column_values()

        assert set(values) == {"work_experiences"}
        assert [set(entry) for entry in values["work_experiences"]] == [
            {"company", "role", "start_date", "end_date", "description"}
        ] * 2

    def test_empty_request_changes_nothing(self):
        assert ProfileUpdateRequest().to_column_values() == {}
