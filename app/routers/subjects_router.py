# /marksheet-backend/app/routers/subjects_router.py

from typing import Dict, List, Optional

from fastapi import APIRouter, Query

from ..models.student_model import Faculty, SubjectCategory
from ..services import subject_templates

router = APIRouter()


@router.get("/suggestions", response_model=List[Dict], summary="Get Subject Suggestions for a Faculty and Category")
def get_subject_suggestions(faculty: Optional[Faculty] = Query(default=None), category: Optional[SubjectCategory] = Query(default=None)):
    return subject_templates.get_subject_suggestions(faculty, category)


@router.get("/defaults/{faculty}", response_model=List[Dict], summary="Get the Default Subjects for a New Marksheet")
def get_default_subjects(faculty: Faculty):
    return subject_templates.get_default_subjects(faculty)
