# /marksheet-backend/app/services/import_helpers/reconciler.py

"""
This module contains the import reconciler: it turns the raw rows of the
"Student Details" and "Student Marks Details" sheets into validated,
deduplicated records, persists them, and reports an outcome for every row.

Rows are processed strictly in input order. Later rows depend on state built
by earlier ones in the same import: the Excel-ID → system-ID mapping table
(which lets a marks row find the student it belongs to) and the set of
subject keys already accepted. All of that state lives on one
`ImportReconciler` instance, created per import and discarded afterwards.

Data-quality problems never raise; each one becomes a `skipped` feedback
entry. Only storage failures are reported at the summary level, and they
halt the affected sheet alone.
"""

import logging
import math
import uuid
from typing import Dict, List, Optional, Set, Tuple

from sqlalchemy.exc import SQLAlchemyError

from ...models.import_model import (
    HEADER_ROW_OFFSET,
    STUDENT_DETAILS_SHEET,
    STUDENT_MARKS_SHEET,
    FeedbackStatus,
    ImportResults,
    MarksImportFeedback,
    StudentDetailsRow,
    StudentImportFeedback,
    StudentMarksRow,
    SummaryType,
)
from ...models.student_model import Faculty, Gender, StudentClass, SubjectCategory
from ..database_service import DatabaseService
from .row_parsing import (
    convert_empty_to_null,
    format_number,
    match_enum,
    nan_to_none,
    parse_excel_date,
    parse_number,
)

logger = logging.getLogger(__name__)

PreparedStudent = Tuple[Dict, StudentImportFeedback]
PreparedMark = Tuple[Dict, MarksImportFeedback]


def _expected_values(enum_cls) -> str:
    return ", ".join(member.value for member in enum_cls)


class ImportReconciler:
    def __init__(self, db: DatabaseService, academic_session: str):
        self.db = db
        self.academic_session = academic_session
        self.results = ImportResults()

        # Excel "Student ID" -> system id, for new and already-stored students alike.
        self.excel_id_to_system_id: Dict[str, str] = {}
        # (system id, lower-cased subject name) pairs accepted so far in this file.
        self._subject_keys_seen: Set[Tuple[str, str]] = set()
        self._duplicate_student_rows = 0

        self.students_to_insert: List[Dict] = []
        self.marks_to_insert: List[Dict] = []

    # --- Orchestration ---

    def run(self, rows_by_sheet: Dict[str, List[Dict]]) -> ImportResults:
        """Reconciles both sheets in order. Student rows must come first: marks rows resolve against them."""
        student_rows = rows_by_sheet.get(STUDENT_DETAILS_SHEET)
        if student_rows is None:
            self.results.add_summary(SummaryType.ERROR, f'Sheet "{STUDENT_DETAILS_SHEET}" not found in the Excel file.')
        else:
            self.reconcile_student_rows(student_rows)

        mark_rows = rows_by_sheet.get(STUDENT_MARKS_SHEET)
        if mark_rows is None:
            self.results.add_summary(SummaryType.ERROR, f'Sheet "{STUDENT_MARKS_SHEET}" not found in the Excel file. Marks were not imported.')
        else:
            self.reconcile_mark_rows(mark_rows)

        self._add_closing_summary()
        students, marks = self.results.studentCounters, self.results.marksCounters
        logger.info(
            "Import for session %s finished: students %d added / %d processed, marks %d added / %d processed",
            self.academic_session, students.added, students.processed, marks.added, marks.processed,
        )
        return self.results

    # --- Student Details ---

    def reconcile_student_rows(self, raw_rows: List[Dict]) -> None:
        counters = self.results.studentCounters
        counters.processed = len(raw_rows)
        prepared: List[PreparedStudent] = []

        try:
            for index, raw_row in enumerate(raw_rows):
                feedback, record = self._reconcile_student_row(index + HEADER_ROW_OFFSET, raw_row)
                self.results.studentFeedback.append(feedback)
                if record is not None:
                    prepared.append((record, feedback))
        except SQLAlchemyError as e:
            logger.exception("Existence check failed while importing '%s'", STUDENT_DETAILS_SHEET)
            self.db.rollback()
            self.results.add_summary(SummaryType.ERROR, f"Failed to check for existing students: {e}. No student details were inserted.")
            self._abandon(prepared, f"Not inserted: processing of '{STUDENT_DETAILS_SHEET}' was halted by a database error.")
            counters.skipped = counters.processed - counters.added
            return

        self.students_to_insert = [record for record, _ in prepared]
        if prepared:
            self._insert_students(prepared)
        elif counters.processed > 0:
            if self._duplicate_student_rows == counters.processed:
                self.results.add_summary(
                    SummaryType.INFO,
                    f"No new student details were inserted. All {counters.processed} rows in '{STUDENT_DETAILS_SHEET}' "
                    "were duplicates or already exist in the database with the same key identifiers.",
                )
            else:
                self.results.add_summary(
                    SummaryType.INFO,
                    f"No student details were inserted from '{STUDENT_DETAILS_SHEET}' sheet. "
                    f"All {counters.processed} rows had issues or were duplicates.",
                )
        counters.skipped = counters.processed - counters.added

    def _reconcile_student_row(self, row_number: int, raw_row: Dict) -> Tuple[StudentImportFeedback, Optional[Dict]]:
        row = StudentDetailsRow.model_validate(raw_row)
        feedback = StudentImportFeedback(rowNumber=row_number, excelStudentId=row.studentId, name=row.studentName)

        missing = row.missing_required_fields()
        if missing:
            feedback.message = f"Missing required field(s): {', '.join(missing)}."
            return feedback, None

        dob = parse_excel_date(row.dateOfBirth)
        if dob is None:
            feedback.message = f'Invalid Date of Birth format: "{row.dateOfBirth}".'
            return feedback, None

        gender = match_enum(Gender, row.gender)
        if gender is None:
            feedback.message = f'Unrecognized Gender "{row.gender}". Expected one of: {_expected_values(Gender)}.'
            return feedback, None
        faculty = match_enum(Faculty, row.faculty)
        if faculty is None:
            feedback.message = f'Unrecognized Faculty "{row.faculty}". Expected one of: {_expected_values(Faculty)}.'
            return feedback, None
        student_class = match_enum(StudentClass, row.studentClass)
        if student_class is None:
            feedback.message = f'Unrecognized Class "{row.studentClass}". Expected one of: {_expected_values(StudentClass)}.'
            return feedback, None

        registration_no = convert_empty_to_null(row.registrationNo)

        existing = self.db.find_student_by_identity_key(
            row.studentId, self.academic_session, student_class.value, faculty.value, registration_no
        )
        if existing:
            # Marks rows for this Excel ID still attach to the stored student.
            self.excel_id_to_system_id[row.studentId] = existing.id
            self._duplicate_student_rows += 1
            feedback.message = (
                f"Student with Roll No {row.studentId}, Reg No {registration_no or '(empty)'} in Session "
                f"{self.academic_session}, Class {student_class.value}, Faculty {faculty.value} already exists in DB. Skipped."
            )
            return feedback, None

        if row.studentId in self.excel_id_to_system_id:
            self._duplicate_student_rows += 1
            feedback.message = f'Duplicate Student ID "{row.studentId}" within this file. Only the first occurrence is used. Skipped.'
            return feedback, None

        system_id = str(uuid.uuid4())
        self.excel_id_to_system_id[row.studentId] = system_id
        feedback.generatedSystemId = system_id
        feedback.status = FeedbackStatus.ADDED
        feedback.message = "Prepared for database insertion."

        record = {
            "id": system_id,
            "roll_no": row.studentId,
            "name": row.studentName,
            "father_name": row.fatherName,
            "mother_name": row.motherName,
            "dob": dob,
            "gender": gender.value,
            "registration_no": registration_no,
            "faculty": faculty.value,
            "student_class": student_class.value,
            "academic_session": self.academic_session,
        }
        return feedback, record

    def _insert_students(self, prepared: List[PreparedStudent]) -> None:
        try:
            outcome = self.db.bulk_insert_students([record for record, _ in prepared])
        except SQLAlchemyError as e:
            logger.exception("Bulk insert of student details failed")
            self.results.add_summary(SummaryType.ERROR, f"Error inserting student details: {e}")
            self._abandon(prepared, f"DB insert failed: {e}")
            return

        for (record, feedback), inserted in zip(prepared, outcome.inserted):
            if inserted:
                feedback.message = "Successfully added to database."
            else:
                self._forget_student(feedback.excelStudentId, record["id"])
                feedback.status = FeedbackStatus.ERROR
                feedback.message = "Not inserted: a student with the same identity key already exists in the database."
        self.results.studentCounters.added = outcome.inserted_count
        self.results.add_summary(SummaryType.SUCCESS, f"{outcome.inserted_count} new student(s) details successfully inserted.")

    # --- Student Marks Details ---

    def reconcile_mark_rows(self, raw_rows: List[Dict]) -> None:
        counters = self.results.marksCounters
        counters.processed = len(raw_rows)
        prepared: List[PreparedMark] = []

        for index, raw_row in enumerate(raw_rows):
            feedback, record = self._reconcile_mark_row(index + HEADER_ROW_OFFSET, raw_row)
            self.results.marksFeedback.append(feedback)
            if record is not None:
                prepared.append((record, feedback))

        self.marks_to_insert = [record for record, _ in prepared]
        if prepared:
            self._insert_marks(prepared)
        elif counters.processed > 0:
            self.results.add_summary(
                SummaryType.INFO,
                f"No marks details were inserted. All {counters.processed} rows in '{STUDENT_MARKS_SHEET}' "
                "had issues or their corresponding student was not processed.",
            )
        counters.skipped = counters.processed - counters.added

    def _reconcile_mark_row(self, row_number: int, raw_row: Dict) -> Tuple[MarksImportFeedback, Optional[Dict]]:
        row = StudentMarksRow.model_validate(raw_row)
        feedback = MarksImportFeedback(
            rowNumber=row_number,
            excelStudentId=row.studentId,
            studentName=row.studentName,
            subjectName=row.subjectName,
        )

        missing = row.missing_required_fields()
        if missing:
            feedback.message = f"Missing required field(s): {', '.join(missing)}."
            return feedback, None

        category = match_enum(SubjectCategory, row.subjectCategory)
        if category is None:
            feedback.message = (
                f'Unrecognized Subject Category "{row.subjectCategory}". '
                f"Expected one of: {_expected_values(SubjectCategory)}."
            )
            return feedback, None

        system_id = self.excel_id_to_system_id.get(row.studentId)
        if system_id is None:
            feedback.message = (
                f"Student ID \"{row.studentId}\" not found from '{STUDENT_DETAILS_SHEET}' processing "
                "(new or existing mapping). Marks skipped."
            )
            return feedback, None

        subject_key = (system_id, row.subjectName.strip().lower())
        if subject_key in self._subject_keys_seen:
            feedback.message = f'Duplicate subject "{row.subjectName}" for Student ID "{row.studentId}" in this file. Skipped.'
            return feedback, None

        max_marks = parse_number(row.maxMarks)
        theory_pass = parse_number(row.theoryPassMarks)
        practical_pass = parse_number(row.practicalPassMarks)
        theory_obtained = parse_number(row.theoryMarksObtained)
        practical_obtained = parse_number(row.practicalMarksObtained)

        if math.isnan(max_marks) or max_marks < 0:
            feedback.message = f'Invalid Max Marks "{row.maxMarks if row.maxMarks is not None else ""}". Must be a non-negative number.'
            return feedback, None

        for label, threshold in (("Theory Pass Marks", theory_pass), ("Practical Pass Marks", practical_pass)):
            if not math.isnan(threshold) and not (0 <= threshold <= max_marks):
                feedback.message = (
                    f"{label} ({format_number(threshold)}) must be between 0 and "
                    f"Max Marks ({format_number(max_marks)}). Skipped."
                )
                return feedback, None

        for label, obtained in (("Theory Marks Obtained", theory_obtained), ("Practical Marks Obtained", practical_obtained)):
            if not math.isnan(obtained) and obtained < 0:
                feedback.message = f"{label} ({format_number(obtained)}) cannot be negative. Skipped."
                return feedback, None

        obtained_total = (0 if math.isnan(theory_obtained) else theory_obtained) + (
            0 if math.isnan(practical_obtained) else practical_obtained
        )
        if obtained_total > max_marks:
            feedback.message = (
                f"Obtained marks ({format_number(obtained_total)}) exceed "
                f"Max Marks ({format_number(max_marks)}). Skipped."
            )
            return feedback, None

        self._subject_keys_seen.add(subject_key)
        feedback.status = FeedbackStatus.ADDED
        feedback.generatedSystemId = system_id
        feedback.message = "Prepared for database insertion."

        record = {
            "student_id": system_id,
            "subject_name": row.subjectName,
            "subject_key": subject_key[1],
            "category": category.value,
            "max_marks": max_marks,
            "theory_pass_marks": nan_to_none(theory_pass),
            "practical_pass_marks": nan_to_none(practical_pass),
            "theory_marks_obtained": nan_to_none(theory_obtained),
            "practical_marks_obtained": nan_to_none(practical_obtained),
            "obtained_total_marks": float(obtained_total),
        }
        return feedback, record

    def _insert_marks(self, prepared: List[PreparedMark]) -> None:
        try:
            outcome = self.db.bulk_insert_marks([record for record, _ in prepared])
        except SQLAlchemyError as e:
            logger.exception("Bulk insert of marks details failed")
            self.results.add_summary(SummaryType.ERROR, f"Error inserting marks details: {e}")
            for _, feedback in prepared:
                feedback.status = FeedbackStatus.ERROR
                feedback.message = f"DB insert failed: {e}"
            return

        for (_, feedback), inserted in zip(prepared, outcome.inserted):
            if inserted:
                feedback.message = "Successfully added to database."
            else:
                feedback.status = FeedbackStatus.ERROR
                feedback.message = "Not inserted: this subject already exists for the student in the database."
        self.results.marksCounters.added = outcome.inserted_count
        self.results.add_summary(SummaryType.SUCCESS, f"{outcome.inserted_count} marks records successfully inserted.")

    # --- Bookkeeping ---

    def _forget_student(self, excel_student_id: str, system_id: str) -> None:
        """A student that never reached the database cannot own marks rows."""
        if self.excel_id_to_system_id.get(excel_student_id) == system_id:
            del self.excel_id_to_system_id[excel_student_id]

    def _abandon(self, prepared: List[PreparedStudent], message: str) -> None:
        for record, feedback in prepared:
            self._forget_student(feedback.excelStudentId, record["id"])
            feedback.status = FeedbackStatus.ERROR
            feedback.message = message

    def _add_closing_summary(self) -> None:
        if self.results.summaryMessages:
            return
        students, marks = self.results.studentCounters, self.results.marksCounters
        if students.processed == 0 and marks.processed == 0:
            self.results.add_summary(
                SummaryType.INFO,
                f"Both '{STUDENT_DETAILS_SHEET}' and '{STUDENT_MARKS_SHEET}' sheets were empty or had no data.",
            )
        elif students.added == 0 and marks.added == 0:
            self.results.add_summary(
                SummaryType.INFO,
                "Import complete. No new data was added. All records were either skipped due to issues or already existed.",
            )
        else:
            self.results.add_summary(SummaryType.SUCCESS, "Import processing complete.")
