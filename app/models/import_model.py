# /marksheet-backend/app/models/import_model.py

"""
Data contracts for the bulk spreadsheet import.

Two groups live here:
1. The tagged row shapes (`StudentDetailsRow`, `StudentMarksRow`) that every
   raw sheet row is validated into before the reconciler sees it. Column
   names are the exact spreadsheet headers, exposed as aliases.
2. The response payload (`ImportResults`) with per-row feedback, per-sheet
   counters, and summary messages.
"""

import math
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator

# --- Sheet Contract ---
STUDENT_DETAILS_SHEET = "Student Details"
STUDENT_MARKS_SHEET = "Student Marks Details"

# Feedback row numbers are 1-based spreadsheet rows; data starts below one header row.
HEADER_ROW_OFFSET = 2


def _cell_text(value: Any) -> str:
    """Coerces one spreadsheet cell to a trimmed string; empty cells become ''."""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def _blank_to_none(value: Any) -> Any:
    # NaN and NaT are the only cell values not equal to themselves.
    if value is None or value != value:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


class StudentDetailsRow(BaseModel):
    """One data row of the "Student Details" sheet."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    studentId: str = Field(default="", alias="Student ID")
    studentName: str = Field(default="", alias="Student Name")
    fatherName: str = Field(default="", alias="Father Name")
    motherName: str = Field(default="", alias="Mother Name")
    # Left raw: the date parser needs to know whether the cell was numeric, a date, or text.
    dateOfBirth: Any = Field(default=None, alias="Date of Birth")
    gender: str = Field(default="", alias="Gender")
    registrationNo: str = Field(default="", alias="Registration No")
    faculty: str = Field(default="", alias="Faculty")
    studentClass: str = Field(default="", alias="Class")

    @field_validator(
        "studentId", "studentName", "fatherName", "motherName",
        "gender", "registrationNo", "faculty", "studentClass",
        mode="before",
    )
    @classmethod
    def coerce_to_trimmed_string(cls, v):
        return _cell_text(v)

    @field_validator("dateOfBirth", mode="before")
    @classmethod
    def empty_date_is_none(cls, v):
        v = _blank_to_none(v)
        return v.strip() if isinstance(v, str) else v

    def missing_required_fields(self) -> List[str]:
        required = {
            "Student ID": self.studentId,
            "Student Name": self.studentName,
            "Father Name": self.fatherName,
            "Mother Name": self.motherName,
            "Date of Birth": self.dateOfBirth,
            "Gender": self.gender,
            "Faculty": self.faculty,
            "Class": self.studentClass,
        }
        return [column for column, value in required.items() if value is None or value == ""]


class StudentMarksRow(BaseModel):
    """One data row of the "Student Marks Details" sheet."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    studentId: str = Field(default="", alias="Student ID")
    # Informational only; echoed back in feedback.
    studentName: str = Field(default="", alias="Name")
    subjectName: str = Field(default="", alias="Subject Name")
    subjectCategory: str = Field(default="", alias="Subject Category")
    maxMarks: Any = Field(default=None, alias="Max Marks")
    theoryPassMarks: Any = Field(default=None, alias="Theory Pass Marks")
    practicalPassMarks: Any = Field(default=None, alias="Practical Pass Marks")
    theoryMarksObtained: Any = Field(default=None, alias="Theory Marks Obtained")
    practicalMarksObtained: Any = Field(default=None, alias="Practical Marks Obtained")

    @field_validator("studentId", "studentName", "subjectName", "subjectCategory", mode="before")
    @classmethod
    def coerce_to_trimmed_string(cls, v):
        return _cell_text(v)

    @field_validator(
        "maxMarks", "theoryPassMarks", "practicalPassMarks",
        "theoryMarksObtained", "practicalMarksObtained",
        mode="before",
    )
    @classmethod
    def empty_number_is_none(cls, v):
        return _blank_to_none(v)

    def missing_required_fields(self) -> List[str]:
        required = {
            "Student ID": self.studentId,
            "Subject Name": self.subjectName,
            "Subject Category": self.subjectCategory,
        }
        return [column for column, value in required.items() if not value]


# --- Response Contract ---

class FeedbackStatus(str, Enum):
    ADDED = "added"; SKIPPED = "skipped"; ERROR = "error"

class SummaryType(str, Enum):
    SUCCESS = "success"; INFO = "info"; WARNING = "warning"; ERROR = "error"


class SummaryMessage(BaseModel):
    type: SummaryType
    message: str


class StudentImportFeedback(BaseModel):
    rowNumber: int
    excelStudentId: str
    name: str
    status: FeedbackStatus = FeedbackStatus.SKIPPED
    message: str = ""
    generatedSystemId: Optional[str] = None


class MarksImportFeedback(BaseModel):
    rowNumber: int
    excelStudentId: str
    studentName: str = ""
    subjectName: str
    status: FeedbackStatus = FeedbackStatus.SKIPPED
    message: str = ""
    generatedSystemId: Optional[str] = None


class ImportCounters(BaseModel):
    processed: int = 0
    added: int = 0
    skipped: int = 0


class ImportResults(BaseModel):
    """
    The complete outcome of one workbook import. Always returned in full,
    even when a sheet could not be read or storage failed mid-way.
    """
    summaryMessages: List[SummaryMessage] = Field(default_factory=list)
    studentFeedback: List[StudentImportFeedback] = Field(default_factory=list)
    marksFeedback: List[MarksImportFeedback] = Field(default_factory=list)
    studentCounters: ImportCounters = Field(default_factory=ImportCounters)
    marksCounters: ImportCounters = Field(default_factory=ImportCounters)

    def add_summary(self, summary_type: SummaryType, message: str) -> None:
        self.summaryMessages.append(SummaryMessage(type=summary_type, message=message))
