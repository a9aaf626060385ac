"""Schema validation tests for projects."""

import pytest
from pydantic import ValidationError

from models.project import ProjectCreate

PROJECT_DATA = {
    "project_name": "Podcast intro jingle",
    "description": "Ten second sting for a weekly podcast",
    "skills": ["jingles"],
    "min_budget": 500,
    "max_budget": 1500,
    "duration_days": 7,
}


@pytest.mark.parametrize("field", ["project_name", "description"])
def test_blank_text_is_rejected(field):
    """Test: Whitespace-only names and descriptions fail validation."""
    with pytest.raises(ValidationError):
        ProjectCreate(**{**PROJECT_DATA, field: "  \t "})


def test_text_is_stripped():
    """Test: Surrounding whitespace is removed from name and description."""
    project = ProjectCreate(
        **{**PROJECT_DATA, "project_name": "  Podcast intro jingle ", "description": " Ten seconds\n"}
    )

    assert project.project_name == "Podcast intro jingle"
    assert project.description == "Ten seconds"
