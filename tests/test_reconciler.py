# /tests/test_reconciler.py

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from app.models.import_model import FeedbackStatus, STUDENT_DETAILS_SHEET, STUDENT_MARKS_SHEET, SummaryType
from app.services.database_helpers.student_repository_sql import BulkInsertResult
from app.services.import_helpers.reconciler import ImportReconciler

SESSION = "2023-2024"


def student_row(student_id="S1", **overrides):
    row = {
        "Student ID": student_id,
        "Student Name": "A",
        "Father Name": "F",
        "Mother Name": "M",
        "Date of Birth": "15-07-2003",
        "Gender": "Male",
        "Registration No": None,
        "Faculty": "SCIENCE",
        "Class": "12th",
    }
    row.update(overrides)
    return row


def mark_row(student_id="S1", subject="Physics", **overrides):
    row = {
        "Student ID": student_id,
        "Name": "A",
        "Subject Name": subject,
        "Subject Category": "Elective",
        "Max Marks": 100,
        "Theory Pass Marks": None,
        "Practical Pass Marks": None,
        "Theory Marks Obtained": 60,
        "Practical Marks Obtained": 20,
    }
    row.update(overrides)
    return row


@pytest.fixture
def mock_db():
    """A DatabaseService stand-in: empty storage that accepts every insert."""
    db = MagicMock()
    db.find_student_by_identity_key.return_value = None
    db.bulk_insert_students.side_effect = lambda records: BulkInsertResult(inserted=[True] * len(records))
    db.bulk_insert_marks.side_effect = lambda records: BulkInsertResult(inserted=[True] * len(records))
    return db


def run_import(db, students, marks):
    reconciler = ImportReconciler(db=db, academic_session=SESSION)
    return reconciler, reconciler.run({STUDENT_DETAILS_SHEET: students, STUDENT_MARKS_SHEET: marks})


# --- Happy path ---

def test_clean_import_adds_student_and_marks(mock_db):
    reconciler, results = run_import(mock_db, [student_row()], [mark_row()])

    student_feedback = results.studentFeedback[0]
    assert student_feedback.status == FeedbackStatus.ADDED
    assert student_feedback.rowNumber == 2
    assert student_feedback.generatedSystemId

    mark_feedback = results.marksFeedback[0]
    assert mark_feedback.status == FeedbackStatus.ADDED
    assert mark_feedback.generatedSystemId == student_feedback.generatedSystemId

    inserted_mark = mock_db.bulk_insert_marks.call_args.args[0][0]
    assert inserted_mark["obtained_total_marks"] == 80
    assert inserted_mark["student_id"] == student_feedback.generatedSystemId
    assert inserted_mark["subject_key"] == "physics"

    inserted_student = mock_db.bulk_insert_students.call_args.args[0][0]
    assert inserted_student["academic_session"] == SESSION
    assert inserted_student["registration_no"] is None
    assert str(inserted_student["dob"]) == "2003-07-15"

    assert results.studentCounters.added == 1
    assert results.marksCounters.added == 1
    assert any(m.type == SummaryType.SUCCESS for m in results.summaryMessages)


# --- Row validation ---

def test_over_max_marks_row_is_skipped(mock_db):
    _, results = run_import(
        mock_db,
        [student_row()],
        [mark_row(**{"Max Marks": 50, "Theory Marks Obtained": 40, "Practical Marks Obtained": 20})],
    )
    feedback = results.marksFeedback[0]
    assert feedback.status == FeedbackStatus.SKIPPED
    assert "60" in feedback.message and "50" in feedback.message
    mock_db.bulk_insert_marks.assert_not_called()
    assert results.marksCounters.skipped == 1


def test_missing_required_fields_are_listed(mock_db):
    _, results = run_import(mock_db, [student_row(**{"Father Name": "", "Gender": None})], [])
    feedback = results.studentFeedback[0]
    assert feedback.status == FeedbackStatus.SKIPPED
    assert "Father Name" in feedback.message
    assert "Gender" in feedback.message


def test_bad_date_of_birth_is_skipped(mock_db):
    _, results = run_import(mock_db, [student_row(**{"Date of Birth": "31/31/2003"})], [])
    assert results.studentFeedback[0].status == FeedbackStatus.SKIPPED
    assert "Invalid Date of Birth" in results.studentFeedback[0].message


def test_unknown_faculty_is_skipped(mock_db):
    _, results = run_import(mock_db, [student_row(Faculty="ENGINEERING")], [])
    assert results.studentFeedback[0].status == FeedbackStatus.SKIPPED
    assert "Faculty" in results.studentFeedback[0].message


def test_threshold_above_max_is_skipped(mock_db):
    _, results = run_import(mock_db, [student_row()], [mark_row(**{"Theory Pass Marks": 120})])
    assert results.marksFeedback[0].status == FeedbackStatus.SKIPPED
    assert "Theory Pass Marks" in results.marksFeedback[0].message


def test_non_numeric_max_marks_is_skipped(mock_db):
    _, results = run_import(mock_db, [student_row()], [mark_row(**{"Max Marks": "abc"})])
    assert results.marksFeedback[0].status == FeedbackStatus.SKIPPED
    assert "Max Marks" in results.marksFeedback[0].message


# --- Deduplication ---

def test_duplicate_student_id_in_file_keeps_first_occurrence(mock_db):
    _, results = run_import(mock_db, [student_row("S1"), student_row("S1", **{"Student Name": "B"})], [])
    first, second = results.studentFeedback
    assert first.status == FeedbackStatus.ADDED
    assert second.status == FeedbackStatus.SKIPPED
    assert "Duplicate Student ID" in second.message
    assert len(mock_db.bulk_insert_students.call_args.args[0]) == 1


def test_duplicate_subject_ignores_case(mock_db):
    _, results = run_import(mock_db, [student_row()], [mark_row(subject="Physics"), mark_row(subject=" physics ")])
    assert results.marksFeedback[0].status == FeedbackStatus.ADDED
    assert results.marksFeedback[1].status == FeedbackStatus.SKIPPED
    assert "Duplicate subject" in results.marksFeedback[1].message


def test_rejected_mark_row_does_not_block_a_later_valid_row(mock_db):
    _, results = run_import(
        mock_db,
        [student_row()],
        [mark_row(**{"Max Marks": 10}), mark_row()],
    )
    assert results.marksFeedback[0].status == FeedbackStatus.SKIPPED
    assert results.marksFeedback[1].status == FeedbackStatus.ADDED


def test_existing_student_is_skipped_but_receives_marks(mock_db):
    mock_db.find_student_by_identity_key.return_value = SimpleNamespace(id="existing-id")

    _, results = run_import(mock_db, [student_row()], [mark_row()])

    assert results.studentFeedback[0].status == FeedbackStatus.SKIPPED
    assert "already exists" in results.studentFeedback[0].message
    mock_db.bulk_insert_students.assert_not_called()
    assert results.marksFeedback[0].status == FeedbackStatus.ADDED
    assert mock_db.bulk_insert_marks.call_args.args[0][0]["student_id"] == "existing-id"


def test_marks_for_unknown_student_are_skipped(mock_db):
    _, results = run_import(mock_db, [student_row("S1")], [mark_row("S9")])
    assert results.marksFeedback[0].status == FeedbackStatus.SKIPPED
    assert "not found" in results.marksFeedback[0].message


# --- Storage failures ---

def test_storage_conflict_marks_only_that_row(mock_db):
    mock_db.bulk_insert_students.side_effect = lambda records: BulkInsertResult(inserted=[True, False])

    _, results = run_import(mock_db, [student_row("S1"), student_row("S2")], [mark_row("S1"), mark_row("S2")])

    assert results.studentFeedback[0].status == FeedbackStatus.ADDED
    assert results.studentFeedback[1].status == FeedbackStatus.ERROR
    assert results.studentCounters.added == 1
    # S2 never reached the database, so its marks cannot resolve.
    assert results.marksFeedback[0].status == FeedbackStatus.ADDED
    assert results.marksFeedback[1].status == FeedbackStatus.SKIPPED


def test_student_insert_failure_halts_only_the_student_sheet(mock_db):
    mock_db.bulk_insert_students.side_effect = OperationalError("INSERT", {}, Exception("database is locked"))

    _, results = run_import(mock_db, [student_row()], [mark_row()])

    assert results.studentFeedback[0].status == FeedbackStatus.ERROR
    assert results.studentCounters.added == 0
    assert any(m.type == SummaryType.ERROR and "Error inserting student details" in m.message for m in results.summaryMessages)
    assert results.marksFeedback[0].status == FeedbackStatus.SKIPPED
    assert results.marksCounters.processed == 1


def test_existence_check_failure_is_reported_as_summary(mock_db):
    mock_db.find_student_by_identity_key.side_effect = OperationalError("SELECT", {}, Exception("connection lost"))

    _, results = run_import(mock_db, [student_row()], [])

    mock_db.rollback.assert_called_once()
    mock_db.bulk_insert_students.assert_not_called()
    assert any(m.type == SummaryType.ERROR for m in results.summaryMessages)


# --- Sheet-level problems ---

def test_missing_marks_sheet_still_imports_students(mock_db):
    reconciler = ImportReconciler(db=mock_db, academic_session=SESSION)
    results = reconciler.run({STUDENT_DETAILS_SHEET: [student_row()]})

    assert results.studentCounters.added == 1
    assert results.marksCounters.processed == 0
    assert any(m.type == SummaryType.ERROR and STUDENT_MARKS_SHEET in m.message for m in results.summaryMessages)


def test_empty_sheets_produce_info_summary(mock_db):
    _, results = run_import(mock_db, [], [])
    assert len(results.summaryMessages) == 1
    assert results.summaryMessages[0].type == SummaryType.INFO
