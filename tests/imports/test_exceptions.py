import pytest

from knowns.imports.exceptions import (
    ConflictError,
    DuplicateNameError,
    EmptyImportError,
    ImportErrorCode,
    InvalidSourceError,
    NetworkError,
    ProjectConfigError,
    SourceImportError,
    SourceNotFoundError,
)


@pytest.mark.parametrize(
    "cls,code",
    [
        (SourceNotFoundError, ImportErrorCode.SOURCE_NOT_FOUND),
        (NetworkError, ImportErrorCode.NETWORK_ERROR),
        (DuplicateNameError, ImportErrorCode.NAME_CONFLICT),
        (ConflictError, ImportErrorCode.CONFLICT),
        (InvalidSourceError, ImportErrorCode.INVALID_SOURCE),
        (EmptyImportError, ImportErrorCode.EMPTY_IMPORT),
        (ProjectConfigError, ImportErrorCode.INVALID_CONFIG),
    ],
)
def test_error_codes(cls, code):
    exc = cls("message")

    assert isinstance(exc, SourceImportError)
    assert exc.code == code
    assert str(exc) == "message"


def test_to_json_error_with_hint():
    exc = DuplicateNameError('Import "kb" already exists', hint="Use --force")

    assert exc.to_json_error() == {
        "message": 'Import "kb" already exists',
        "code": "NAME_CONFLICT",
        "hint": "Use --force",
    }


def test_to_json_error_without_hint():
    assert "hint" not in NetworkError("offline").to_json_error()
