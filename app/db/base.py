# /marksheet-backend/app/db/base.py

# Central registry for all SQLAlchemy models. Importing them here guarantees
# Base.metadata knows every table before `create_all` runs at startup.

from .base_class import Base

from .models.student_models import StudentDetail, StudentMarksDetail
