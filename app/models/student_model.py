# /marksheet-backend/app/models/student_model.py

# --- Core Imports ---
from enum import Enum

from pydantic import BaseModel, Field, ConfigDict

# --- Core Enumerations ---

class Gender(str, Enum):
    MALE = "Male"; FEMALE = "Female"; OTHER = "Other"

class Faculty(str, Enum):
    ARTS = "ARTS"; COMMERCE = "COMMERCE"; SCIENCE = "SCIENCE"

class StudentClass(str, Enum):
    ELEVENTH = "11th"
    TWELFTH = "12th"
    FIRST_YEAR = "1st Year"
    SECOND_YEAR = "2nd Year"
    THIRD_YEAR = "3rd Year"

class SubjectCategory(str, Enum):
    COMPULSORY = "Compulsory"
    ELECTIVE = "Elective"
    # Shown on the marksheet but never counted in the aggregate.
    ADDITIONAL = "Additional"


# --- Model Definitions ---

class StudentSummary(BaseModel):
    """
    One row of the admin dashboard's student table.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="The unique, server-generated identifier for the student.")
    rollNo: str
    name: str
    academicSession: str
    studentClass: str
    faculty: str


def student_summary_from_record(record) -> StudentSummary:
    """Maps a `StudentDetail` ORM object onto the dashboard contract."""
    return StudentSummary(
        id=record.id,
        rollNo=record.roll_no,
        name=record.name,
        academicSession=record.academic_session,
        studentClass=record.student_class,
        faculty=record.faculty,
    )
