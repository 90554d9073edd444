# /marksheet-backend/app/routers/students_router.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import StreamingResponse

from ..models.student_model import StudentSummary
from ..services import student_service
from ..services.database_service import DatabaseService, get_db_service

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# --- STUDENT COLLECTION ENDPOINTS (/api/students) ---

@router.get("", response_model=List[StudentSummary], summary="Get All Students")
def get_all_students(db: DatabaseService = Depends(get_db_service)):
    return student_service.get_all_student_summaries(db=db)

@router.get("/export", summary="Export Selected Students as an Importable Workbook", response_class=StreamingResponse)
def export_students(ids: List[str] = Query(..., description="System ids of the students to export."), db: DatabaseService = Depends(get_db_service)):
    try:
        workbook_bytes = student_service.export_students_xlsx(student_ids=ids, db=db)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return StreamingResponse(
        iter([workbook_bytes]),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=students_export.xlsx"},
    )

# --- INDIVIDUAL STUDENT ENDPOINTS (/api/students/{student_id}) ---

@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a Student and All Their Marks")
def delete_student(student_id: str, db: DatabaseService = Depends(get_db_service)):
    was_deleted = student_service.delete_student(student_id=student_id, db=db)
    if not was_deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Student with ID {student_id} not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
