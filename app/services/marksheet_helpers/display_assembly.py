# /marksheet-backend/app/services/marksheet_helpers/display_assembly.py

"""
Assembles the printable `MarksheetDisplay` from form or stored data, and maps
stored ORM records onto the `MarksheetRecord` contract.
"""

import random
from datetime import datetime
from typing import Optional

from app.core import config
from ...models.marksheet_model import MarksheetDisplay, MarksheetRecord, SubjectRecord
from .computation import compute_marksheet


def generate_marksheet_no(faculty: str, roll_number: str, session_end_year: int, now: Optional[datetime] = None, rng=random) -> str:
    """
    Builds "FA/MMM/YYYY/NNN". NNN is the last three characters of the roll
    number, or a random 100-999 when the roll number is shorter than that.
    Not unique and not reproducible; it is recomputed on every view.
    """
    now = now or datetime.now()
    faculty_code = faculty[:2].upper()
    month = now.strftime("%b").upper()
    roll_number = (roll_number or "").strip()
    sequence = roll_number[-3:] if len(roll_number) >= 3 else str(rng.randint(100, 999))
    return f"{faculty_code}/{month}/{session_end_year}/{sequence}"


def record_from_student(student) -> MarksheetRecord:
    """Maps a `StudentDetail` (with its marks loaded) onto the stored-marksheet contract."""
    start_year, end_year = (int(part) for part in student.academic_session.split("-"))
    subjects = [
        SubjectRecord(
            subjectName=mark.subject_name,
            category=mark.category,
            totalMarks=mark.max_marks,
            theoryPassMarks=mark.theory_pass_marks,
            practicalPassMarks=mark.practical_pass_marks,
            theoryMarksObtained=mark.theory_marks_obtained,
            practicalMarksObtained=mark.practical_marks_obtained,
        )
        for mark in student.marks
    ]
    return MarksheetRecord(
        studentName=student.name,
        fatherName=student.father_name,
        motherName=student.mother_name,
        rollNumber=student.roll_no,
        registrationNo=student.registration_no,
        dateOfBirth=student.dob,
        gender=student.gender,
        faculty=student.faculty,
        studentClass=student.student_class,
        sessionStartYear=start_year,
        sessionEndYear=end_year,
        subjects=subjects,
    )


def build_display(
    form: MarksheetRecord,
    system_id: Optional[str] = None,
    passing_percentage: Optional[float] = None,
    now: Optional[datetime] = None,
) -> MarksheetDisplay:
    now = now or datetime.now()
    if passing_percentage is None:
        passing_percentage = form.overallPassingThresholdPercentage

    computed = compute_marksheet(form.subjects, passing_percentage)

    return MarksheetDisplay(
        systemId=system_id,
        studentName=form.studentName,
        fatherName=form.fatherName,
        motherName=form.motherName,
        rollNumber=form.rollNumber,
        registrationNo=form.registrationNo,
        dateOfBirth=form.dateOfBirth,
        gender=form.gender,
        faculty=form.faculty,
        studentClass=form.studentClass,
        sessionStartYear=form.sessionStartYear,
        sessionEndYear=form.sessionEndYear,
        overallPassingThresholdPercentage=passing_percentage,
        subjects=computed.subjects,
        marksheetNo=generate_marksheet_no(form.faculty.value, form.rollNumber, form.sessionEndYear, now=now),
        sessionDisplay=form.academicSession,
        classDisplay=f"{form.studentClass.value} ({form.faculty.value.title()})",
        aggregateMarksCompulsoryElective=computed.aggregateMarks,
        totalPossibleMarksCompulsoryElective=computed.totalPossibleMarks,
        overallPercentageDisplay=computed.overallPercentage,
        overallResult=computed.overallResult,
        totalMarksInWords=computed.totalMarksInWords,
        dateOfIssue=now.strftime("%B %Y"),
        place=config.MARKSHEET_ISSUE_PLACE,
        collegeCode=config.COLLEGE_CODE,
    )
