# /marksheet-backend/app/services/student_service.py

"""
Business logic for the admin dashboard: listing stored students, deleting
them, and exporting a selection back to a workbook the importer accepts.
"""

import logging
from io import BytesIO
from typing import List

import pandas as pd

from ..models.import_model import STUDENT_DETAILS_SHEET, STUDENT_MARKS_SHEET
from ..models.student_model import StudentSummary, student_summary_from_record
from .database_service import DatabaseService

logger = logging.getLogger(__name__)

STUDENT_DETAILS_COLUMNS = [
    "Student ID", "Student Name", "Father Name", "Mother Name", "Date of Birth",
    "Gender", "Registration No", "Faculty", "Class",
]
STUDENT_MARKS_COLUMNS = [
    "Student ID", "Name", "Subject Name", "Subject Category", "Max Marks",
    "Theory Pass Marks", "Practical Pass Marks", "Theory Marks Obtained", "Practical Marks Obtained",
]


def get_all_student_summaries(db: DatabaseService) -> List[StudentSummary]:
    return [student_summary_from_record(record) for record in db.get_all_students()]


def delete_student(student_id: str, db: DatabaseService) -> bool:
    """Deletes a student together with all their marks. False if the student was not found."""
    was_deleted = db.delete_student_cascade(student_id)
    if was_deleted:
        logger.info("Deleted student %s and their marks", student_id)
    return was_deleted


def export_students_xlsx(student_ids: List[str], db: DatabaseService) -> bytes:
    """
    Writes the selected students and their marks to an .xlsx workbook laid out
    exactly like an import file: the same two sheets and the same headers.
    Raises ValueError when none of the ids match a stored student.
    """
    students = db.get_students_by_ids(student_ids)
    if not students:
        raise ValueError("None of the selected students were found.")

    detail_rows = [
        {
            "Student ID": s.roll_no,
            "Student Name": s.name,
            "Father Name": s.father_name,
            "Mother Name": s.mother_name,
            "Date of Birth": s.dob.strftime("%Y-%m-%d"),
            "Gender": s.gender,
            "Registration No": s.registration_no or "",
            "Faculty": s.faculty,
            "Class": s.student_class,
        }
        for s in students
    ]
    mark_rows = [
        {
            "Student ID": s.roll_no,
            "Name": s.name,
            "Subject Name": m.subject_name,
            "Subject Category": m.category,
            "Max Marks": m.max_marks,
            "Theory Pass Marks": m.theory_pass_marks,
            "Practical Pass Marks": m.practical_pass_marks,
            "Theory Marks Obtained": m.theory_marks_obtained,
            "Practical Marks Obtained": m.practical_marks_obtained,
        }
        for s in students
        for m in s.marks
    ]

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        pd.DataFrame(detail_rows, columns=STUDENT_DETAILS_COLUMNS).to_excel(writer, index=False, sheet_name=STUDENT_DETAILS_SHEET)
        pd.DataFrame(mark_rows, columns=STUDENT_MARKS_COLUMNS).to_excel(writer, index=False, sheet_name=STUDENT_MARKS_SHEET)

    logger.info("Exported %d student(s) and %d mark row(s)", len(detail_rows), len(mark_rows))
    return buffer.getvalue()
