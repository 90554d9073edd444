# /marksheet-backend/app/services/marksheet_service.py

"""
This service module is the business logic layer for single-entry marksheets:
creating a student with all their subjects, editing them, and producing the
printable marksheet display for a stored student or an unsaved draft.

It orchestrates the `DatabaseService` and the pure helpers in
`marksheet_helpers`; nothing in here talks to SQLAlchemy directly except to
recognise a unique-constraint failure.
"""

import logging
import uuid
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from ..models.marksheet_model import MarksheetDisplay, MarksheetForm, MarksheetRecord, MarksheetSaveResponse, SubjectEntry
from .database_service import DatabaseService
from .marksheet_helpers.display_assembly import build_display, record_from_student

logger = logging.getLogger(__name__)


class StudentConflictError(ValueError):
    """The identity key (roll no, session, class, faculty, registration no) is already taken."""


def _student_record_from_form(form: MarksheetForm) -> Dict:
    return {
        "roll_no": form.rollNumber,
        "name": form.studentName,
        "father_name": form.fatherName,
        "mother_name": form.motherName,
        "dob": form.dateOfBirth,
        "gender": form.gender.value,
        "registration_no": form.registrationNo,
        "faculty": form.faculty.value,
        "student_class": form.studentClass.value,
        "academic_session": form.academicSession,
    }


def _mark_records_from_subjects(subjects: List[SubjectEntry]) -> List[Dict]:
    # student_id is attached by the repository.
    return [
        {
            "subject_name": subject.subjectName,
            "subject_key": subject.subjectName.strip().lower(),
            "category": subject.category.value,
            "max_marks": subject.totalMarks,
            "theory_pass_marks": subject.theoryPassMarks,
            "practical_pass_marks": subject.practicalPassMarks,
            "theory_marks_obtained": subject.theoryMarksObtained,
            "practical_marks_obtained": subject.practicalMarksObtained,
            "obtained_total_marks": (subject.theoryMarksObtained or 0) + (subject.practicalMarksObtained or 0),
        }
        for subject in subjects
    ]


def _conflict_message(form: MarksheetForm) -> str:
    return (
        f"A student with Roll No {form.rollNumber}, Reg No {form.registrationNo or '(empty)'} in Session "
        f"{form.academicSession}, Class {form.studentClass.value}, Faculty {form.faculty.value} already exists."
    )


def _find_conflicting_student(form: MarksheetForm, db: DatabaseService):
    return db.find_student_by_identity_key(
        form.rollNumber, form.academicSession, form.studentClass.value, form.faculty.value, form.registrationNo
    )


# --- Writes ---

def create_marksheet(form: MarksheetForm, db: DatabaseService) -> MarksheetSaveResponse:
    """
    Saves a new student and all their subjects in one transaction.
    Raises StudentConflictError when the identity key is already taken.
    """
    if _find_conflicting_student(form, db):
        raise StudentConflictError(_conflict_message(form))

    student_record = {"id": str(uuid.uuid4()), **_student_record_from_form(form)}
    try:
        student = db.create_student_with_marks(student_record, _mark_records_from_subjects(form.subjects))
    except IntegrityError:
        # Another request took the identity key between the check and the insert.
        raise StudentConflictError(_conflict_message(form))

    logger.info("Created student %s with %d subject(s)", student.id, len(form.subjects))
    return MarksheetSaveResponse(message="Marksheet saved successfully.", studentId=student.id)


def update_marksheet(student_id: str, form: MarksheetForm, db: DatabaseService) -> Optional[MarksheetSaveResponse]:
    """
    Replaces every mutable field of a stored student and all their marks.
    Returns None when the student does not exist.
    """
    conflicting = _find_conflicting_student(form, db)
    if conflicting and conflicting.id != student_id:
        raise StudentConflictError(_conflict_message(form))

    try:
        student = db.update_student_with_marks(
            student_id, _student_record_from_form(form), _mark_records_from_subjects(form.subjects)
        )
    except IntegrityError:
        raise StudentConflictError(_conflict_message(form))
    if student is None:
        return None

    logger.info("Updated student %s with %d subject(s)", student_id, len(form.subjects))
    return MarksheetSaveResponse(message="Marksheet updated successfully.", studentId=student_id)


def replace_subject_marks(student_id: str, subjects: List[SubjectEntry], db: DatabaseService) -> Optional[int]:
    """Swaps a student's marks for the given list. Returns the new count, or None if the student is unknown."""
    if not subjects:
        raise ValueError("At least one subject is required.")
    names = [subject.subjectName.strip().lower() for subject in subjects]
    if len(names) != len(set(names)):
        raise ValueError("Duplicate subject names are not allowed. Each subject name must be unique.")
    if db.get_student_by_id(student_id) is None:
        return None
    return db.replace_all_marks_for_student(student_id, _mark_records_from_subjects(subjects))


# --- Reads ---

def get_marksheet_form(student_id: str, db: DatabaseService) -> Optional[MarksheetRecord]:
    """
    Loads a stored student as data for the edit screen. Imported students may
    not satisfy the form's limits yet; that is checked when the edit is saved.
    """
    student = db.get_student_by_id(student_id)
    if student is None:
        return None
    return record_from_student(student)


def get_marksheet_display(student_id: str, db: DatabaseService, passing_percentage: Optional[float] = None) -> Optional[MarksheetDisplay]:
    """Computes the printable marksheet straight from the stored rows. A student without marks shows an empty table."""
    student = db.get_student_by_id(student_id)
    if student is None:
        return None
    return build_display(record_from_student(student), system_id=student.id, passing_percentage=passing_percentage)


def preview_marksheet(form: MarksheetForm) -> MarksheetDisplay:
    """Computes the display for an unsaved draft. Nothing is persisted."""
    return build_display(form)
