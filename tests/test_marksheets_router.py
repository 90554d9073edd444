# /tests/test_marksheets_router.py

from io import BytesIO

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from app.core.deps import require_admin
from app.main import app
from app.services.database_service import DatabaseService, get_db_service


def form_payload(**overrides):
    payload = {
        "studentName": "Asha Kumari",
        "fatherName": "Ram Kumar",
        "motherName": "Sita Devi",
        "rollNumber": "2024101",
        "registrationNo": "R-77",
        "dateOfBirth": "2006-04-02",
        "gender": "Female",
        "faculty": "SCIENCE",
        "studentClass": "12th",
        "sessionStartYear": 2023,
        "sessionEndYear": 2024,
        "subjects": [
            {"subjectName": "English", "category": "Compulsory", "totalMarks": 100, "theoryMarksObtained": 65},
            {"subjectName": "Physics", "category": "Elective", "totalMarks": 100, "theoryMarksObtained": 50, "practicalMarksObtained": 25},
            {"subjectName": "Computer Science", "category": "Additional", "totalMarks": 100, "theoryMarksObtained": 10},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def client(db_session):
    app.dependency_overrides[get_db_service] = lambda: DatabaseService(db_session=db_session)
    app.dependency_overrides[require_admin] = lambda: "test-token"
    yield TestClient(app)
    app.dependency_overrides.clear()


def create(client, **overrides):
    response = client.post("/api/marksheets", json=form_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()["studentId"]


# --- Create ---

def test_create_then_view_marksheet(client):
    student_id = create(client)

    display = client.get(f"/api/marksheets/{student_id}").json()

    assert display["systemId"] == student_id
    assert display["aggregateMarksCompulsoryElective"] == 140
    assert display["totalPossibleMarksCompulsoryElective"] == 200
    assert display["overallResult"] == "Pass"
    assert display["totalMarksInWords"] == "One Hundred Forty"
    assert display["marksheetNo"].startswith("SC/")
    assert display["marksheetNo"].endswith("/2024/101")
    assert display["subjects"][2]["isFailed"] is True


def test_view_accepts_passing_percentage(client):
    student_id = create(client)
    display = client.get(f"/api/marksheets/{student_id}", params={"passingPercentage": 75}).json()
    assert display["overallResult"] == "Fail"
    assert display["overallPassingThresholdPercentage"] == 75


def test_creating_the_same_student_twice_conflicts(client):
    create(client)
    response = client.post("/api/marksheets", json=form_payload(studentName="Someone Else"))
    assert response.status_code == 409
    assert "already exists" in response.json()["detail"]


@pytest.mark.parametrize("overrides", [
    {"sessionEndYear": 2025},
    {"subjects": []},
    {"subjects": [
        {"subjectName": "English", "category": "Compulsory", "totalMarks": 100},
        {"subjectName": "english", "category": "Compulsory", "totalMarks": 100},
    ]},
    {"subjects": [{"subjectName": "Physics", "category": "Elective", "totalMarks": 50, "theoryMarksObtained": 40, "practicalMarksObtained": 20}]},
    {"overallPassingThresholdPercentage": 120},
    {"rollNumber": "x" * 21},
])
def test_invalid_forms_are_rejected(client, overrides):
    assert client.post("/api/marksheets", json=form_payload(**overrides)).status_code == 422


# --- Preview ---

def test_preview_does_not_persist(client):
    response = client.post("/api/marksheets/preview", json=form_payload())
    assert response.status_code == 200
    assert response.json()["systemId"] is None
    assert client.get("/api/students").json() == []


# --- Edit ---

def test_form_round_trip_and_update(client):
    student_id = create(client)

    form = client.get(f"/api/marksheets/{student_id}/form").json()
    assert form["rollNumber"] == "2024101"
    assert [s["subjectName"] for s in form["subjects"]] == ["English", "Physics", "Computer Science"]

    form["studentName"] = "Asha K."
    form["subjects"] = form["subjects"][:2]
    response = client.put(f"/api/marksheets/{student_id}", json=form)
    assert response.status_code == 200
    assert response.json()["studentId"] == student_id

    display = client.get(f"/api/marksheets/{student_id}").json()
    assert display["studentName"] == "Asha K."
    assert len(display["subjects"]) == 2


def test_update_into_another_students_identity_conflicts(client):
    create(client)
    other_id = create(client, rollNumber="2024102")

    response = client.put(f"/api/marksheets/{other_id}", json=form_payload())
    assert response.status_code == 409


def test_replace_subjects(client):
    student_id = create(client)
    response = client.put(
        f"/api/marksheets/{student_id}/subjects",
        json=[{"subjectName": "Biology", "category": "Elective", "totalMarks": 100, "theoryMarksObtained": 45}],
    )
    assert response.status_code == 200
    assert response.json()["subjectCount"] == 1

    display = client.get(f"/api/marksheets/{student_id}").json()
    assert [s["subjectName"] for s in display["subjects"]] == ["Biology"]


def test_unknown_student_is_404(client):
    assert client.get("/api/marksheets/missing").status_code == 404
    assert client.get("/api/marksheets/missing/form").status_code == 404
    assert client.put("/api/marksheets/missing", json=form_payload()).status_code == 404
    assert client.delete("/api/students/missing").status_code == 404


# --- Dashboard: delete & export ---

def test_delete_student(client):
    student_id = create(client)
    assert client.delete(f"/api/students/{student_id}").status_code == 204
    assert client.get(f"/api/marksheets/{student_id}").status_code == 404


def test_export_produces_importable_workbook(client):
    student_id = create(client)

    response = client.get("/api/students/export", params={"ids": [student_id]})

    assert response.status_code == 200
    sheets = pd.read_excel(BytesIO(response.content), sheet_name=None)
    assert set(sheets) == {"Student Details", "Student Marks Details"}
    assert sheets["Student Details"]["Student Name"].tolist() == ["Asha Kumari"]
    assert sheets["Student Marks Details"]["Subject Name"].tolist() == ["English", "Physics", "Computer Science"]


def test_export_of_unknown_ids_is_404(client):
    assert client.get("/api/students/export", params={"ids": ["missing"]}).status_code == 404


# --- Subject templates ---

def test_subject_suggestions_and_defaults(client):
    electives = client.get("/api/subjects/suggestions", params={"faculty": "COMMERCE", "category": "Elective"}).json()
    assert [s["subjectName"] for s in electives] == ["Business Studies", "Entrepreneurship", "Economics", "Accountancy"]

    defaults = client.get("/api/subjects/defaults/SCIENCE").json()
    assert defaults[0] == {"subjectName": "English", "category": "Compulsory", "totalMarks": 100}
    assert len(defaults) == 6

    assert client.get("/api/subjects/suggestions").json() == []
