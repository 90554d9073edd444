# /marksheet-backend/app/services/database_service.py

from typing import List, Dict, Optional, Generator
from sqlalchemy.orm import Session
from fastapi import Depends

# --- Core Database Setup ---
from app.db.database import get_db

# --- Repository Imports ---
from .database_helpers.student_repository_sql import StudentRepositorySQL, BulkInsertResult


class DatabaseService:
    def __init__(self, db_session: Session):
        """
        Initializes the DatabaseService.
        Every method is a thin delegation to the SQL repository so services
        and tests depend on this one facade only.
        """
        if db_session is None:
            raise ValueError("A database session is required.")
        self.student_repo = StudentRepositorySQL(db_session)

    def rollback(self) -> None: self.student_repo.rollback()

    # --- STUDENT METHODS (DELEGATED) ---
    def get_all_students(self) -> List: return self.student_repo.get_all_students()
    def get_student_by_id(self, student_id: str): return self.student_repo.get_student_by_id(student_id)
    def get_students_by_ids(self, student_ids: List[str]) -> List: return self.student_repo.get_students_by_ids(student_ids)
    def find_student_by_identity_key(self, roll_no: str, academic_session: str, student_class: str, faculty: str, registration_no: Optional[str]):
        return self.student_repo.find_student_by_identity_key(roll_no, academic_session, student_class, faculty, registration_no)
    def create_student_with_marks(self, student_record: Dict, mark_records: List[Dict]): return self.student_repo.create_student_with_marks(student_record, mark_records)
    def update_student_with_marks(self, student_id: str, data: Dict, mark_records: List[Dict]): return self.student_repo.update_student_with_marks(student_id, data, mark_records)
    def delete_student_cascade(self, student_id: str) -> bool: return self.student_repo.delete_student_cascade(student_id)

    # --- MARKS METHODS (DELEGATED) ---
    def replace_all_marks_for_student(self, student_id: str, mark_records: List[Dict]) -> int: return self.student_repo.replace_all_marks_for_student(student_id, mark_records)

    # --- BULK IMPORT METHODS (DELEGATED) ---
    def bulk_insert_students(self, records: List[Dict]) -> BulkInsertResult: return self.student_repo.bulk_insert_students(records)
    def bulk_insert_marks(self, records: List[Dict]) -> BulkInsertResult: return self.student_repo.bulk_insert_marks(records)


# --- DEPENDENCY PROVIDER ---
def get_db_service(db: Session = Depends(get_db)) -> Generator[DatabaseService, None, None]:
    """
    FastAPI dependency that provides a DatabaseService instance bound to the
    request's SQLAlchemy session.
    """
    yield DatabaseService(db_session=db)
