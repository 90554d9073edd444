# /tests/test_import_service.py

from unittest.mock import MagicMock

import pytest

from app.models.import_model import SummaryType
from app.services import import_service


@pytest.mark.parametrize("label", ["2023-2024", " 2023-2024 "])
def test_valid_session_labels(label):
    assert import_service.validate_session_label(label) == "2023-2024"


@pytest.mark.parametrize("label", ["", "2023", "2023/2024", "2023-2023", "2023-2025", "abcd-efgh"])
def test_invalid_session_labels(label):
    with pytest.raises(ValueError):
        import_service.validate_session_label(label)


def test_empty_upload_is_reported_not_raised():
    results = import_service.import_workbook(b"", "2023-2024", db=MagicMock())
    assert len(results.summaryMessages) == 1
    assert results.summaryMessages[0].type == SummaryType.ERROR


def test_unexpected_failure_becomes_high_level_error(mocker):
    mocker.patch.object(import_service, "read_workbook_sheets", return_value={"Student Details": [], "Student Marks Details": []})
    mocker.patch.object(import_service.ImportReconciler, "run", side_effect=RuntimeError("boom"))

    results = import_service.import_workbook(b"xlsx", "2023-2024", db=MagicMock())

    assert results.summaryMessages[-1].type == SummaryType.ERROR
    assert "Import failed at a high level: boom" in results.summaryMessages[-1].message
