"""
Profile Sections

The nine fixed sections of a student profile. The enum values double as
the column names of form_visibility and the keys of a visibility mapping.
"""

import enum


class ProfileSection(str, enum.Enum):
    """Profile sections, in display order."""

    PERSONAL_DETAILS = "personal_details"
    EDUCATION = "education"
    TRAVEL = "travel"
    WORK_DETAILS = "work_details"
    FINANCIALS = "financials"
    DOCUMENTS = "documents"
    COURSE_DETAILS = "course_details"
    UNIVERSITY = "university"
    POST_ADMISSION = "post_admission"
