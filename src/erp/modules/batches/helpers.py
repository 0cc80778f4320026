"""
Batch Helpers

Pure functions shared by the batch service and the student module.
"""

from erp.modules.batches.models import FormVisibility, Program
from erp.modules.students.sections import ProfileSection


def generate_batch_name(program: Program | str, intake_year: int) -> str:
    """
    Build the display name of a batch.

    Args:
        program: Program enum member or its code
        intake_year: Four-digit intake year

    Returns:
        Uppercase program code, hyphen, year (e.g. "BS-2025")
    """
    code = program.value if isinstance(program, Program) else str(program)
    return f"{code.upper()}-{intake_year}"


def default_visibility() -> dict[str, bool]:
    """Visibility mapping with every section visible."""
    return {section.value: True for section in ProfileSection}


def visibility_to_dict(visibility: FormVisibility | None) -> dict[str, bool]:
    """
    Convert a FormVisibility row into the evaluator's mapping.

    A missing row means every section is visible.
    """
    if visibility is None:
        return default_visibility()
    return {section.value: bool(getattr(visibility, section.value)) for section in ProfileSection}
