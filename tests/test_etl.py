import json
import pytest
from etl.pipeline import (
    group_all_regulations,
    group_by_category,
    group_by_semester,
    load,
    normalize_code,
    normalize_course,
    read_csv,
    run,
)

CSV_HEADER = "department,regulation,semester,category,course_code,course_title,credits\n"


@pytest.fixture
def sample_courses():
    """Sample course records, deliberately untidy."""
    return [
        normalize_course(c) for c in [
            {"department": "CSE ", "regulation": "r21", "semester": 1, "category": " pcc",
             "course_code": "cs 2301", "course_title": "Data Structures", "credits": 4},
            {"department": "CSE", "regulation": "R21", "semester": "2", "category": "BSC",
             "course_code": "MA1201", "course_title": "Linear Algebra", "credits": 4},
            {"department": "CSE", "regulation": "R22", "semester": "1", "category": "PCC",
             "course_code": "CS1201", "course_title": "Programming", "credits": 3},
            {"department": "CSE", "regulation": "R22", "semester": "1", "category": "",
             "course_code": "XX0000", "course_title": "Uncategorised", "credits": 0},
        ]
    ]


class TestNormalisation:
    """Test record clean-up."""

    def test_course_code(self):
        """Test that codes lose spaces and are upper-cased."""
        assert normalize_code("cs 2301") == "CS2301"

    def test_grouping_keys(self, sample_courses):
        """Test that grouping keys are canonical strings."""
        first = sample_courses[0]
        assert first["department"] == "CSE"
        assert first["regulation"] == "R21"
        assert first["semester"] == "1"
        assert first["category"] == "PCC"
        assert first["course_title"] == "Data Structures"

    def test_original_untouched(self):
        """Test that normalisation copies the record."""
        raw = {"course_code": "cs 1", "category": "pcc"}
        normalize_course(raw)
        assert raw == {"course_code": "cs 1", "category": "pcc"}


class TestGrouping:
    """Test the mappings served by the API."""

    def test_by_category(self, sample_courses):
        """Test one regulation grouped by category."""
        groups = group_by_category(sample_courses, "CSE", "R21")
        assert sorted(groups) == ["BSC", "PCC"]

    def test_by_semester(self, sample_courses):
        """Test one regulation grouped by semester."""
        groups = group_by_semester(sample_courses, "cse", "R22")
        assert list(groups) == ["1"]
        assert len(groups["1"]) == 2

    def test_blank_category_skipped(self, sample_courses):
        """Test that a record without a category is not grouped under ''."""
        assert "" not in group_by_category(sample_courses, "CSE", "R22")

    def test_all_regulations(self, sample_courses):
        """Test the department snapshot across configured regulations."""
        snapshot = group_all_regulations(sample_courses, "CSE")
        assert list(snapshot) == ["R21", "R22", "R22R", "R24"]
        assert sorted(snapshot["R21"]) == ["BSC", "PCC"]
        assert list(snapshot["R22"]) == ["PCC"]
        assert snapshot["R24"] == {}


class TestFiles:
    """Test loading and CSV conversion."""

    def test_load_missing_file(self, tmp_path):
        """Test that a missing courses.json loads as no records."""
        assert load(tmp_path / "courses.json") == []

    def test_csv_to_json(self, tmp_path):
        """Test converting a CSV export into courses.json."""
        source = tmp_path / "export.csv"
        source.write_text(
            CSV_HEADER
            + "CSE,R21,1,bsc,ma 1101,Calculus,4\n"
            + "CSE,R21,2,PCC,CS1201,Programming,n/a\n",
            encoding="utf-8",
        )
        output = tmp_path / "data" / "courses.json"

        courses = run(source, output)

        assert [c["course_code"] for c in courses] == ["MA1101", "CS1201"]
        assert courses[0]["credits"] == 4.0
        assert courses[1]["credits"] is None
        assert json.loads(output.read_text(encoding="utf-8")) == courses
        assert load(output) == courses

    def test_csv_missing_columns(self, tmp_path):
        """Test that an export without the expected columns is rejected."""
        source = tmp_path / "bad.csv"
        source.write_text("department,course_code\nCSE,CS1\n", encoding="utf-8")
        with pytest.raises(ValueError, match="missing columns"):
            read_csv(source)
