# /marksheet-backend/app/services/database_helpers/student_repository_sql.py

"""
This module contains all the raw SQLAlchemy queries for the StudentDetail and
StudentMarksDetail tables. It is the direct interface to the database for all
student and marks data.

Bulk inserts follow "skip duplicates" semantics: a record that collides with a
unique constraint is silently not inserted while its siblings are, and the
caller is told exactly which records made it in.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional

from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

# Import the SQLAlchemy models this repository will interact with.
from app.db.models.student_models import StudentDetail, StudentMarksDetail


@dataclass
class BulkInsertResult:
    """Outcome of a skip-duplicates bulk insert, one flag per submitted record, in order."""
    inserted: List[bool] = field(default_factory=list)

    @property
    def inserted_count(self) -> int:
        return sum(1 for flag in self.inserted if flag)


class StudentRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    def rollback(self) -> None:
        """Clears a failed transaction so the session can be used again."""
        self.db.rollback()

    # --- Student Lookups ---

    def get_student_by_id(self, student_id: str) -> Optional[StudentDetail]:
        """Fetches a single student with their marks eagerly loaded."""
        return (
            self.db.query(StudentDetail)
            .options(selectinload(StudentDetail.marks))
            .filter(StudentDetail.id == student_id)
            .first()
        )

    def get_students_by_ids(self, student_ids: List[str]) -> List[StudentDetail]:
        if not student_ids:
            return []
        return (
            self.db.query(StudentDetail)
            .options(selectinload(StudentDetail.marks))
            .filter(StudentDetail.id.in_(student_ids))
            .order_by(StudentDetail.academic_session.desc(), StudentDetail.name.asc())
            .all()
        )

    def get_all_students(self) -> List[StudentDetail]:
        """Dashboard ordering: newest session first, then alphabetical."""
        return (
            self.db.query(StudentDetail)
            .order_by(StudentDetail.academic_session.desc(), StudentDetail.name.asc())
            .all()
        )

    def find_student_by_identity_key(
        self,
        roll_no: str,
        academic_session: str,
        student_class: str,
        faculty: str,
        registration_no: Optional[str],
    ) -> Optional[StudentDetail]:
        """
        Looks a student up by the full identity key. A `None` registration
        number only matches rows whose registration number IS NULL; it is a
        value to compare, not a wildcard.
        """
        query = self.db.query(StudentDetail).filter(
            StudentDetail.roll_no == roll_no,
            StudentDetail.academic_session == academic_session,
            StudentDetail.student_class == student_class,
            StudentDetail.faculty == faculty,
        )
        if registration_no is None:
            query = query.filter(StudentDetail.registration_no.is_(None))
        else:
            query = query.filter(StudentDetail.registration_no == registration_no)
        return query.first()

    # --- Bulk Inserts (skip duplicates) ---

    def bulk_insert_students(self, records: List[Dict]) -> BulkInsertResult:
        return self._insert_skipping_duplicates(StudentDetail, records)

    def bulk_insert_marks(self, records: List[Dict]) -> BulkInsertResult:
        return self._insert_skipping_duplicates(StudentMarksDetail, records)

    def _insert_skipping_duplicates(self, model, records: List[Dict]) -> BulkInsertResult:
        """
        Inserts every record with ON CONFLICT DO NOTHING inside one transaction.
        Unique-key conflicts are skipped per record; any other database error
        rolls the whole batch back and is re-raised for the caller to report.
        """
        result = BulkInsertResult()
        if not records:
            return result

        dialect_insert = postgresql_insert if self.db.get_bind().dialect.name == "postgresql" else sqlite_insert
        try:
            for record in records:
                statement = dialect_insert(model).values(**record).on_conflict_do_nothing()
                outcome = self.db.execute(statement)
                result.inserted.append(outcome.rowcount == 1)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return result

    # --- Single-Entry Writes ---

    def create_student_with_marks(self, student_record: Dict, mark_records: List[Dict]) -> StudentDetail:
        """Creates a student and all their marks as one unit."""
        try:
            new_student = StudentDetail(**student_record)
            new_student.marks = [StudentMarksDetail(**mark) for mark in mark_records]
            self.db.add(new_student)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(new_student)
        return new_student

    def update_student_with_marks(self, student_id: str, data: Dict, mark_records: List[Dict]) -> Optional[StudentDetail]:
        """
        Replaces every mutable field of a student (the identifier is kept) and
        swaps their marks wholesale, all in one transaction.
        """
        db_student = self.db.query(StudentDetail).filter(StudentDetail.id == student_id).first()
        if not db_student:
            return None
        try:
            for key, value in data.items():
                setattr(db_student, key, value)
            self._replace_marks(student_id, mark_records)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(db_student)
        return db_student

    def replace_all_marks_for_student(self, student_id: str, mark_records: List[Dict]) -> int:
        """Atomic delete-then-insert of a student's marks. Returns the new row count."""
        try:
            self._replace_marks(student_id, mark_records)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return len(mark_records)

    def _replace_marks(self, student_id: str, mark_records: List[Dict]) -> None:
        # "fetch" evicts the deleted rows from the session; SQLite may hand their ids to the new rows.
        self.db.query(StudentMarksDetail).filter(StudentMarksDetail.student_id == student_id).delete(synchronize_session="fetch")
        self.db.add_all([StudentMarksDetail(student_id=student_id, **mark) for mark in mark_records])
        self.db.flush()

    def delete_student_cascade(self, student_id: str) -> bool:
        """
        Deletes a student and every mark row they own in one transaction.
        Loaded marks go through the ORM cascade; the rest through ON DELETE CASCADE.
        """
        db_student = self.db.query(StudentDetail).filter(StudentDetail.id == student_id).first()
        if not db_student:
            return False
        try:
            self.db.delete(db_student)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return True
