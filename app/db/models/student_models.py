# /marksheet-backend/app/db/models/student_models.py

"""
This module defines the SQLAlchemy ORM models for the `StudentDetail` and
`StudentMarksDetail` entities: one enrolled student in one academic session,
and the per-subject marks that student owns.
"""

from sqlalchemy import Column, String, Integer, Float, Date, DateTime, ForeignKey, Index, UniqueConstraint, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..base_class import Base


class StudentDetail(Base):
    """
    SQLAlchemy model representing a single student enrolment.

    The identity key (roll_no, academic_session, student_class, faculty,
    registration_no) is unique. Databases treat NULLs as distinct inside a
    UNIQUE constraint, so students without a registration number get their
    own partial unique index over the other four columns.
    """
    __tablename__ = "student_details"
    __table_args__ = (
        UniqueConstraint(
            "roll_no", "academic_session", "student_class", "faculty", "registration_no",
            name="uq_student_identity_key",
        ),
        Index(
            "uq_student_identity_key_without_registration",
            "roll_no", "academic_session", "student_class", "faculty",
            unique=True,
            sqlite_where=text("registration_no IS NULL"),
            postgresql_where=text("registration_no IS NULL"),
        ),
    )

    id = Column(String, primary_key=True, index=True)
    roll_no = Column(String, index=True, nullable=False)
    name = Column(String, index=True, nullable=False)
    father_name = Column(String, nullable=False)
    mother_name = Column(String, nullable=False)
    dob = Column(Date, nullable=False)
    gender = Column(String, nullable=False)
    registration_no = Column(String, nullable=True)
    faculty = Column(String, nullable=False)
    student_class = Column(String, nullable=False)
    academic_session = Column(String, index=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Deleting a student removes every mark row it owns.
    marks = relationship(
        "StudentMarksDetail",
        back_populates="student",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="StudentMarksDetail.mark_id",
    )


class StudentMarksDetail(Base):
    """
    SQLAlchemy model representing one subject's marks for one student.
    `subject_key` is the trimmed, lower-cased subject name; it carries the
    per-student uniqueness of subjects.
    """
    __tablename__ = "student_marks_details"
    __table_args__ = (
        UniqueConstraint("student_id", "subject_key", name="uq_student_subject"),
    )

    mark_id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(String, ForeignKey("student_details.id", ondelete="CASCADE"), nullable=False, index=True)

    subject_name = Column(String, nullable=False)
    subject_key = Column(String, nullable=False)
    category = Column(String, nullable=False)
    max_marks = Column(Float, nullable=False)
    theory_pass_marks = Column(Float, nullable=True)
    practical_pass_marks = Column(Float, nullable=True)
    theory_marks_obtained = Column(Float, nullable=True)
    practical_marks_obtained = Column(Float, nullable=True)
    # Redundant copy of theory + practical, kept for query convenience.
    obtained_total_marks = Column(Float, nullable=False, default=0)

    student = relationship("StudentDetail", back_populates="marks")
