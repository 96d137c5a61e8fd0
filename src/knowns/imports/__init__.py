"""
Knowns imports

Pull templates and docs from git repositories, npm packages and local
directories into .knowns/imports/<name>/, and keep them in sync while
protecting local edits.
"""

from .exceptions import (
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
from .models import (
    ChangeAction,
    FileChange,
    FileRecord,
    ImportConfig,
    ImportEntry,
    ImportMetadata,
    ImportOptions,
    ImportResult,
    ImportType,
    SyncOptions,
)
from .service import (
    ImportService,
    get_imports_with_metadata,
    import_source,
    remove_import,
    sync_all_imports,
    sync_import,
)

__all__ = [
    "import_source",
    "sync_import",
    "sync_all_imports",
    "remove_import",
    "get_imports_with_metadata",
    "ImportService",
    "ChangeAction",
    "FileChange",
    "FileRecord",
    "ImportConfig",
    "ImportEntry",
    "ImportMetadata",
    "ImportOptions",
    "ImportResult",
    "ImportType",
    "SyncOptions",
    "ImportErrorCode",
    "SourceImportError",
    "SourceNotFoundError",
    "NetworkError",
    "DuplicateNameError",
    "ConflictError",
    "InvalidSourceError",
    "EmptyImportError",
    "ProjectConfigError",
]
