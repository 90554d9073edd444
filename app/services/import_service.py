# /marksheet-backend/app/services/import_service.py

"""
This service module is the business logic layer for the bulk spreadsheet
import. It decodes the uploaded workbook and hands the rows to a fresh
`ImportReconciler`; whatever happens, the caller gets a complete
`ImportResults` payload back rather than an exception.
"""

import logging
import re

from fastapi import UploadFile

from ..models.import_model import ImportResults, SummaryType
from .database_service import DatabaseService
from .import_helpers.reconciler import ImportReconciler
from .import_helpers.workbook_reader import WorkbookReadError, read_workbook_sheets

logger = logging.getLogger(__name__)

SESSION_LABEL_PATTERN = re.compile(r"^(\d{4})-(\d{4})$")


def validate_session_label(session_label: str) -> str:
    """
    Checks an academic session label of the form "YYYY-YYYY" where the second
    year is the first plus one. Returns the trimmed label or raises ValueError.
    """
    label = (session_label or "").strip()
    match = SESSION_LABEL_PATTERN.match(label)
    if not match:
        raise ValueError(f'Academic session "{session_label}" must be in YYYY-YYYY format.')
    start_year, end_year = int(match.group(1)), int(match.group(2))
    if end_year != start_year + 1:
        raise ValueError(f'Academic session "{session_label}" must span exactly one year (e.g. 2023-2024).')
    return label


def import_workbook(file_bytes: bytes, academic_session: str, db: DatabaseService) -> ImportResults:
    """
    Runs one import. The session label must already be validated.
    """
    reconciler = ImportReconciler(db=db, academic_session=academic_session)

    try:
        rows_by_sheet = read_workbook_sheets(file_bytes)
    except WorkbookReadError as e:
        logger.warning("Rejected upload for session %s: %s", academic_session, e)
        reconciler.results.add_summary(SummaryType.ERROR, str(e))
        return reconciler.results

    try:
        return reconciler.run(rows_by_sheet)
    except Exception as e:
        logger.exception("Import failed for session %s", academic_session)
        reconciler.results.add_summary(SummaryType.ERROR, f"Import failed at a high level: {e}")
        return reconciler.results


async def import_from_upload(file: UploadFile, academic_session: str, db: DatabaseService) -> ImportResults:
    """Reads the uploaded file and runs the import for the given session."""
    label = validate_session_label(academic_session)
    file_bytes = await file.read()
    logger.info("Importing %s (%d bytes) for session %s", file.filename, len(file_bytes), label)
    return import_workbook(file_bytes, label, db)
