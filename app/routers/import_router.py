# /marksheet-backend/app/routers/import_router.py

# --- Core FastAPI Imports ---
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Form

# --- Service and Model Imports ---
from ..services import import_service
from ..services.database_service import DatabaseService, get_db_service
from ..models.import_model import ImportResults

router = APIRouter()


@router.post(
    "",
    response_model=ImportResults,
    summary="Import Students and Marks from an Excel Workbook",
    description=(
        "Reads the 'Student Details' and 'Student Marks Details' sheets and stores every valid, "
        "non-duplicate row under the given academic session. Data problems never fail the request; "
        "each row is reported individually in the response."
    ),
)
async def import_students_workbook(
    academicSession: str = Form(..., description='Academic session label, e.g. "2023-2024".'),
    file: UploadFile = File(...),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        return await import_service.import_from_upload(file=file, academic_session=academicSession, db=db)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
