# /marksheet-backend/app/models/marksheet_model.py

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from app.core.config import DEFAULT_PASSING_PERCENTAGE
from .student_model import Gender, Faculty, StudentClass, SubjectCategory


class OverallResult(str, Enum):
    PASS = "Pass"; FAIL = "Fail"


# --- Engine Input ---

class SubjectRecord(BaseModel):
    """
    One subject's marks as the engine consumes them. A missing pass mark means
    "use the fixed fallback threshold"; a missing obtained mark counts as 0 in
    totals but never fails the subject.

    No input limits here: stored rows are taken as they are.
    """
    model_config = ConfigDict(from_attributes=True)

    subjectName: str
    category: SubjectCategory
    totalMarks: float
    theoryPassMarks: Optional[float] = None
    practicalPassMarks: Optional[float] = None
    theoryMarksObtained: Optional[float] = None
    practicalMarksObtained: Optional[float] = None


class SubjectEntry(SubjectRecord):
    """A subject as typed into the marksheet form, with the form's input limits."""
    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    subjectName: str = Field(..., min_length=1, max_length=100)
    totalMarks: float = Field(..., ge=0)
    theoryPassMarks: Optional[float] = Field(default=None, ge=0)
    practicalPassMarks: Optional[float] = Field(default=None, ge=0)
    theoryMarksObtained: Optional[float] = Field(default=None, ge=0)
    practicalMarksObtained: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def marks_must_fit_within_total(self):
        obtained = (self.theoryMarksObtained or 0) + (self.practicalMarksObtained or 0)
        if obtained > self.totalMarks:
            raise ValueError("Obtained marks (Theory + Practical) cannot exceed Total Marks")
        if self.theoryPassMarks is not None and self.theoryPassMarks > self.totalMarks:
            raise ValueError("Theory Pass Marks cannot exceed Total Marks")
        if self.practicalPassMarks is not None and self.practicalPassMarks > self.totalMarks:
            raise ValueError("Practical Pass Marks cannot exceed Total Marks")
        return self


# --- Engine Output ---

class SubjectResult(SubjectRecord):
    obtainedTotal: float
    isTheoryFailed: bool
    isPracticalFailed: bool
    isFailed: bool


class MarksheetComputation(BaseModel):
    subjects: List[SubjectResult]
    aggregateMarks: float
    totalPossibleMarks: float
    overallPercentage: float
    overallResult: OverallResult
    totalMarksInWords: str


# --- Stored Marksheet ---

class MarksheetRecord(BaseModel):
    """
    A persisted student and their subjects, as loaded for display or for
    pre-filling the edit screen. Imported students may exceed the form's
    limits or have no subjects at all, so none are enforced here.
    """
    studentName: str
    fatherName: str
    motherName: str
    rollNumber: str
    registrationNo: Optional[str] = None
    dateOfBirth: date
    gender: Gender
    faculty: Faculty
    studentClass: StudentClass
    sessionStartYear: int
    sessionEndYear: int
    overallPassingThresholdPercentage: float = DEFAULT_PASSING_PERCENTAGE
    subjects: List[SubjectRecord] = Field(default_factory=list)

    @property
    def academicSession(self) -> str:
        return f"{self.sessionStartYear}-{self.sessionEndYear}"


# --- Form Contract ---

class MarksheetForm(MarksheetRecord):
    """
    The single-entry marksheet form: student details plus every subject.
    Used for create, update and preview.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    studentName: str = Field(..., min_length=1, max_length=100)
    fatherName: str = Field(..., min_length=1, max_length=100)
    motherName: str = Field(..., min_length=1, max_length=100)
    rollNumber: str = Field(..., min_length=1, max_length=20)
    sessionStartYear: int = Field(..., ge=1900, le=9998)
    sessionEndYear: int = Field(..., ge=1901, le=9999)
    overallPassingThresholdPercentage: float = Field(default=DEFAULT_PASSING_PERCENTAGE, ge=0, le=100)
    subjects: List[SubjectEntry] = Field(..., min_length=1)

    @field_validator("registrationNo")
    @classmethod
    def blank_registration_is_null(cls, v):
        if v is None or not v.strip():
            return None
        return v

    @field_validator("subjects")
    @classmethod
    def subject_names_must_be_unique(cls, v):
        names = [s.subjectName.strip().lower() for s in v]
        if len(names) != len(set(names)):
            raise ValueError("Duplicate subject names are not allowed. Each subject name must be unique.")
        return v

    @model_validator(mode="after")
    def session_must_span_one_year(self):
        if self.sessionEndYear != self.sessionStartYear + 1:
            raise ValueError("Session end year must be exactly one year after the start year.")
        return self


class MarksheetSaveResponse(BaseModel):
    message: str
    studentId: str


# --- Display Contract ---

class MarksheetDisplay(BaseModel):
    """
    Everything the printable marksheet needs. Derived on every request and
    never persisted; `marksheetNo` in particular is not a stable identifier.
    """
    systemId: Optional[str] = None
    studentName: str
    fatherName: str
    motherName: str
    rollNumber: str
    registrationNo: Optional[str] = None
    dateOfBirth: date
    gender: Gender
    faculty: Faculty
    studentClass: StudentClass
    sessionStartYear: int
    sessionEndYear: int
    overallPassingThresholdPercentage: float

    subjects: List[SubjectResult]

    marksheetNo: str
    sessionDisplay: str
    classDisplay: str

    aggregateMarksCompulsoryElective: float
    totalPossibleMarksCompulsoryElective: float
    overallPercentageDisplay: float
    overallResult: OverallResult
    totalMarksInWords: str

    dateOfIssue: str
    place: str
    collegeCode: str
