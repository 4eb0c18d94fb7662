import pytest
from fastapi.testclient import TestClient

import api.app as api_app
from api.app import app
from etl.pipeline import normalize_course


@pytest.fixture
def sample_courses():
    """Course records for two regulations of CSE and one of IT."""
    raw = [
        {"department": "CSE", "regulation": "R21", "semester": "1", "category": "BSC",
         "course_code": "MA1101", "course_title": "Calculus", "credits": 4},
        {"department": "CSE", "regulation": "R21", "semester": "1", "category": "HSMC",
         "course_code": "EN1101", "course_title": "English", "credits": 3},
        {"department": "CSE", "regulation": "R21", "semester": "3", "category": "PCC",
         "course_code": "CS2301", "course_title": "Data Structures", "credits": 4},
        {"department": "CSE", "regulation": "R21", "semester": "3", "category": "LAB",
         "course_code": "CS2311", "course_title": "Data Structures Lab", "credits": 2},
        {"department": "CSE", "regulation": "R24", "semester": "1", "category": "ESC",
         "course_code": "GE1401", "course_title": "Engineering Graphics", "credits": 3},
        {"department": "IT", "regulation": "R21", "semester": "2", "category": "PCC",
         "course_code": "IT1201", "course_title": "Web Basics", "credits": 3},
    ]
    return [normalize_course(c) for c in raw]


@pytest.fixture
def client(monkeypatch, sample_courses):
    """FastAPI test client serving the sample courses."""
    monkeypatch.setattr(api_app, "_courses", sample_courses)
    return TestClient(app)


class TestCourseEndpoints:
    """Test the three course queries."""

    def test_category(self, client):
        """Test grouping one department + regulation by category."""
        response = client.get("/api/courses/category", params={"department": "CSE", "regulation": "R21"})
        assert response.status_code == 200
        data = response.json()
        assert sorted(data) == ["BSC", "HSMC", "LAB", "PCC"]
        assert [c["course_code"] for c in data["PCC"]] == ["CS2301"]

    def test_semester(self, client):
        """Test grouping one department + regulation by semester."""
        response = client.get("/api/courses/semester", params={"department": "CSE", "regulation": "R21"})
        assert response.status_code == 200
        data = response.json()
        assert sorted(data) == ["1", "3"]
        assert len(data["1"]) == 2

    def test_all_regulations(self, client):
        """Test that every configured regulation is present in the snapshot."""
        response = client.get("/api/courses/category/all", params={"department": "CSE"})
        assert response.status_code == 200
        data = response.json()
        assert list(data) == ["R21", "R22", "R22R", "R24"]
        assert data["R22"] == {}
        assert list(data["R24"]) == ["ESC"]

    def test_department_is_case_insensitive(self, client):
        """Test that 'cse' resolves to the configured CSE."""
        response = client.get("/api/courses/category", params={"department": "cse", "regulation": "r21"})
        assert response.status_code == 200
        assert "PCC" in response.json()

    def test_departments_do_not_leak(self, client):
        """Test that IT courses never appear under CSE."""
        data = client.get("/api/courses/category/all", params={"department": "IT"}).json()
        assert list(data["R21"]) == ["PCC"]
        assert data["R24"] == {}

    def test_no_data_is_empty_mapping(self, client):
        """Test that a configured department with no courses returns {}."""
        response = client.get("/api/courses/semester", params={"department": "BME", "regulation": "R22"})
        assert response.status_code == 200
        assert response.json() == {}


class TestValidation:
    """Test request validation."""

    def test_unknown_department(self, client):
        """Test that an unconfigured department is a 404."""
        response = client.get("/api/courses/category/all", params={"department": "ASTRO"})
        assert response.status_code == 404

    def test_unknown_regulation(self, client):
        """Test that an unconfigured regulation is a 404."""
        response = client.get("/api/courses/category", params={"department": "CSE", "regulation": "R99"})
        assert response.status_code == 404

    def test_missing_parameters(self, client):
        """Test that missing query parameters fail validation."""
        assert client.get("/api/courses/category", params={"department": "CSE"}).status_code == 422
        assert client.get("/api/courses/category/all").status_code == 422


class TestConfiguredValues:
    """Test the listing endpoints."""

    def test_departments(self, client):
        """Test the configured department list."""
        data = client.get("/api/departments").json()
        assert len(data) == 14
        assert data[0] == {"id": 1, "name": "CSE"}

    def test_regulations(self, client):
        """Test the configured regulation list."""
        assert client.get("/api/regulations").json() == ["R21", "R22", "R22R", "R24"]
