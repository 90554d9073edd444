# /marksheet-backend/app/routers/marksheets_router.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..models.marksheet_model import MarksheetDisplay, MarksheetForm, MarksheetRecord, MarksheetSaveResponse, SubjectEntry
from ..services import marksheet_service
from ..services.database_service import DatabaseService, get_db_service
from ..services.marksheet_service import StudentConflictError

router = APIRouter()


def _not_found(student_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Student with ID {student_id} not found")

# --- MARKSHEET COLLECTION ENDPOINTS (/api/marksheets) ---

@router.post("", response_model=MarksheetSaveResponse, status_code=status.HTTP_201_CREATED, summary="Create a Student with All Subject Marks")
def create_marksheet(form: MarksheetForm, db: DatabaseService = Depends(get_db_service)):
    try:
        return marksheet_service.create_marksheet(form=form, db=db)
    except StudentConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

@router.post("/preview", response_model=MarksheetDisplay, summary="Preview a Marksheet Without Saving")
def preview_marksheet(form: MarksheetForm):
    return marksheet_service.preview_marksheet(form=form)

# --- INDIVIDUAL MARKSHEET ENDPOINTS (/api/marksheets/{student_id}) ---

@router.get("/{student_id}", response_model=MarksheetDisplay, summary="Get the Printable Marksheet for a Student")
def get_marksheet(
    student_id: str,
    passingPercentage: Optional[float] = Query(default=None, ge=0, le=100),
    db: DatabaseService = Depends(get_db_service),
):
    display = marksheet_service.get_marksheet_display(student_id=student_id, db=db, passing_percentage=passingPercentage)
    if display is None:
        raise _not_found(student_id)
    return display

@router.get("/{student_id}/form", response_model=MarksheetRecord, summary="Get a Student's Marksheet as Editable Form Data")
def get_marksheet_form(student_id: str, db: DatabaseService = Depends(get_db_service)):
    form = marksheet_service.get_marksheet_form(student_id=student_id, db=db)
    if form is None:
        raise _not_found(student_id)
    return form

@router.put("/{student_id}", response_model=MarksheetSaveResponse, summary="Update a Student and Replace All Their Marks")
def update_marksheet(student_id: str, form: MarksheetForm, db: DatabaseService = Depends(get_db_service)):
    try:
        result = marksheet_service.update_marksheet(student_id=student_id, form=form, db=db)
    except StudentConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if result is None:
        raise _not_found(student_id)
    return result

@router.put("/{student_id}/subjects", summary="Replace All Subject Marks for a Student")
def replace_subject_marks(student_id: str, subjects: List[SubjectEntry], db: DatabaseService = Depends(get_db_service)):
    try:
        count = marksheet_service.replace_subject_marks(student_id=student_id, subjects=subjects, db=db)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if count is None:
        raise _not_found(student_id)
    return {"studentId": student_id, "subjectCount": count}
