# /marksheet-backend/app/db/base_class.py

from sqlalchemy.orm import declarative_base

# All ORM models inherit from this Base so a single metadata object knows every table.
Base = declarative_base()
