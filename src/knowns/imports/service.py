"""
Import orchestration.

One pipeline serves both first imports and syncs:

    INIT -> FETCHING -> MATCHING -> DETECTING_CHANGES
         -> DRY_RUN_REPORT | MATERIALIZING -> REGISTRY_UPDATE -> DONE

Any stage may end in FAILED. Failures inside the pipeline come back as an
unsuccessful ImportResult; checks that run before there is anything to
sync (type detection, naming, duplicate names) raise.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional

from knowns.imports.detector import collect_candidates, detect_changes
from knowns.imports.exceptions import (
    DuplicateNameError,
    EmptyImportError,
    InvalidSourceError,
    SourceImportError,
)
from knowns.imports.fetchers import SourceFetcher, StagedSource, get_fetcher
from knowns.imports.materializer import ImportMaterializer
from knowns.imports.matcher import match_files
from knowns.imports.models import (
    FileRecord,
    ImportConfig,
    ImportEntry,
    ImportMetadata,
    ImportOptions,
    ImportResult,
    ImportType,
    SyncOptions,
    utc_now,
)
from knowns.imports.naming import (
    detect_import_type,
    generate_import_name,
    validate_import_name,
)
from knowns.imports.registry import ImportRegistry
from knowns.logging import get_logger, log_application_event, log_transaction

logger = get_logger("knowns.imports.service")

FetcherFactory = Callable[[ImportType], SourceFetcher]


class ImportService:
    """Imports and syncs external sources into one project"""

    def __init__(
        self,
        project_root: Path,
        registry: Optional[ImportRegistry] = None,
        materializer: Optional[ImportMaterializer] = None,
        fetcher_factory: Optional[FetcherFactory] = None,
    ):
        self.project_root = Path(project_root)
        self.registry = registry or ImportRegistry(self.project_root)
        self.materializer = materializer or ImportMaterializer(self.project_root)
        self.fetcher_factory = fetcher_factory or get_fetcher

    def import_source(self, source: str, options: Optional[ImportOptions] = None) -> ImportResult:
        """
        Register a new source and run its first sync.

        The config is saved only after the sync succeeded, and never on a
        dry run.

        Raises:
            InvalidSourceError: Unknown type, invalid name, or --link on a non-local source
            DuplicateNameError: The name is registered and force is not set
            ProjectConfigError: config.json cannot be parsed, so it cannot be updated
        """
        options = options or ImportOptions()
        import_type = ImportType(options.type) if options.type else detect_import_type(
            source, self.project_root
        )
        name = validate_import_name(options.name or generate_import_name(source, import_type))

        if options.link and import_type != ImportType.LOCAL:
            raise InvalidSourceError(
                "--link is only supported for local imports",
                hint="Remove --link or import from a local path",
            )

        if not options.dry_run:
            self.registry.check_writable()

        existing = self.registry.get_import(name)
        if existing and not options.force:
            raise DuplicateNameError(
                f'Import "{name}" already exists',
                hint="Use --force to overwrite or --name to specify a different name",
            )

        config = ImportConfig(
            name=name,
            source=source,
            type=import_type,
            ref=options.ref,
            include=list(options.include),
            exclude=list(options.exclude),
            link=options.link,
        )
        if existing:
            config.created_at = existing.created_at

        result = self._run(config, existing, force=options.force, dry_run=options.dry_run)

        if result.success and not options.dry_run:
            self.registry.add_import(config, force=True)
            log_application_event(
                f"Imported {name} from {source}",
                details={"type": import_type.value, "changes": len(result.changes)},
            )
        return result

    def sync_import(self, name: str, options: Optional[SyncOptions] = None) -> ImportResult:
        """
        Re-fetch a registered import and apply what changed.

        Raises:
            SourceNotFoundError: No import with this name is registered
        """
        options = options or SyncOptions()
        config = self.registry.require_import(name)
        result = self._run(config, config, force=options.force, dry_run=options.dry_run)
        if result.success and not options.dry_run:
            log_application_event(
                f"Synced {name}", details={"changes": len(result.changes)}
            )
        return result

    def sync_all_imports(self, options: Optional[SyncOptions] = None) -> List[ImportResult]:
        """Sync every registered import, in config order. One failure never stops the rest."""
        options = options or SyncOptions()
        results = []
        for config in self.registry.list_imports():
            try:
                result = self._run(config, config, force=options.force, dry_run=options.dry_run)
            except Exception as e:
                logger.exception(f"Unexpected error while syncing {config.name}")
                result = self._failed(config, str(e) or type(e).__name__)
            results.append(result)

        failed = sum(1 for result in results if not result.success)
        log_application_event(
            "Synced all imports",
            level="warning" if failed else "info",
            details={"total": len(results), "failed": failed},
        )
        return results

    def remove_import(self, name: str, delete_files: bool = False) -> Dict[str, bool]:
        """
        Unregister an import.

        Without delete_files the materialized files stay on disk as plain
        content; only the registry entry and the manifest go away.

        Raises:
            SourceNotFoundError: No import with this name is registered
            ProjectConfigError: config.json cannot be parsed, so it cannot be updated
        """
        self.registry.check_writable()
        self.registry.require_import(name)
        self.registry.remove_import(name)

        if delete_files:
            self.materializer.remove(name)
        self.registry.delete_metadata(name)

        log_application_event(f"Removed import {name}", details={"deleted": delete_files})
        return {"success": True, "deleted": delete_files}

    def get_imports_with_metadata(self) -> List[ImportEntry]:
        return self.registry.get_imports_with_metadata()

    def _run(
        self,
        config: ImportConfig,
        previous_config: Optional[ImportConfig],
        force: bool,
        dry_run: bool,
    ) -> ImportResult:
        details = {"name": config.name, "source": config.source, "type": config.type.value}
        log_transaction("INIT", {**details, "force": force, "dry_run": dry_run})

        previous = self.registry.read_metadata(previous_config) if previous_config else None
        try:
            fetcher = self.fetcher_factory(config.type)
            log_transaction("FETCHING", details)
            with fetcher.fetch(config.source, config.ref, self.project_root) as staged:
                if config.link:
                    result = self._sync_link(config, staged, previous, force, dry_run)
                else:
                    result = self._sync_copy(config, staged, previous, force, dry_run)
        except SourceImportError as e:
            return self._failed(config, e.message, e.hint)
        except OSError as e:
            return self._failed(config, f"Filesystem error: {e}")

        log_transaction("DONE", {**details, "changes": len(result.changes)})
        return result

    def _failed(self, config: ImportConfig, message: str, hint: Optional[str] = None) -> ImportResult:
        log_transaction("FAILED", {"name": config.name, "error": message})
        logger.error(f"Import {config.name} failed: {message}")
        return ImportResult(
            success=False,
            name=config.name,
            source=config.source,
            type=config.type,
            error=message,
            hint=hint,
        )

    def _sync_copy(
        self,
        config: ImportConfig,
        staged: StagedSource,
        previous: Optional[ImportMetadata],
        force: bool,
        dry_run: bool,
    ) -> ImportResult:
        content_root = staged.content_root
        include = config.include or staged.default_include()

        log_transaction("MATCHING", {"include": include, "exclude": config.exclude})
        paths = match_files(content_root, include, config.exclude)
        if not paths and previous is None:
            raise EmptyImportError(
                f"No files matched in {config.source}",
                hint="Check the --include and --exclude patterns",
            )

        log_transaction("DETECTING_CHANGES", {"files": len(paths)})
        destination = self.materializer.destination(config.name)
        planned = detect_changes(
            collect_candidates(content_root, paths), previous, destination, force=force
        )
        result = ImportResult(
            success=True,
            name=config.name,
            source=config.source,
            type=config.type,
            changes=[change.to_file_change() for change in planned],
        )

        if dry_run:
            log_transaction("DRY_RUN_REPORT", {"changes": len(planned)})
            return result

        log_transaction("MATERIALIZING", {"destination": str(destination)})
        records = self.materializer.apply(config.name, planned, previous, force=force)

        result.metadata = self._update_metadata(config, staged, previous, records)
        return result

    def _sync_link(
        self,
        config: ImportConfig,
        staged: StagedSource,
        previous: Optional[ImportMetadata],
        force: bool,
        dry_run: bool,
    ) -> ImportResult:
        if config.type != ImportType.LOCAL:
            raise InvalidSourceError(f"Only local imports can be linked: {config.name}")

        log_transaction("MATERIALIZING", {"link": str(staged.content_root)})
        change = self.materializer.link(
            config.name, staged.content_root, force=force, dry_run=dry_run
        )
        result = ImportResult(
            success=True,
            name=config.name,
            source=config.source,
            type=config.type,
            changes=[change] if change else [],
        )
        if dry_run:
            log_transaction("DRY_RUN_REPORT", {"changes": len(result.changes)})
            return result

        result.metadata = self._update_metadata(config, staged, previous, [])
        return result

    def _update_metadata(
        self,
        config: ImportConfig,
        staged: StagedSource,
        previous: Optional[ImportMetadata],
        records: List[FileRecord],
    ) -> ImportMetadata:
        """Write the new manifest unless nothing in it changed."""
        metadata = ImportMetadata(
            import_name=config.name,
            source=config.source,
            type=config.type,
            last_sync=utc_now(),
            imported_at=previous.imported_at if previous else utc_now(),
            files=records,
            ref=staged.ref or config.ref,
            commit=staged.commit,
            version=staged.version,
        )

        unchanged = (
            previous is not None
            and self.registry.metadata_path(config).is_file()
            and _same_manifest(previous, metadata)
        )
        if unchanged:
            log_transaction("REGISTRY_UPDATE", {"name": config.name, "written": False})
            return previous

        self.registry.write_metadata(config, metadata)
        log_transaction("REGISTRY_UPDATE", {"name": config.name, "written": True})
        return metadata


def _same_manifest(previous: ImportMetadata, current: ImportMetadata) -> bool:
    return (
        previous.files == current.files
        and previous.import_name == current.import_name
        and previous.source == current.source
        and previous.type == current.type
        and previous.ref == current.ref
        and previous.commit == current.commit
        and previous.version == current.version
    )


def import_source(
    project_root: Path, source: str, options: Optional[ImportOptions] = None
) -> ImportResult:
    return ImportService(project_root).import_source(source, options)


def sync_import(
    project_root: Path, name: str, options: Optional[SyncOptions] = None
) -> ImportResult:
    return ImportService(project_root).sync_import(name, options)


def sync_all_imports(
    project_root: Path, options: Optional[SyncOptions] = None
) -> List[ImportResult]:
    return ImportService(project_root).sync_all_imports(options)


def remove_import(
    project_root: Path, name: str, delete_files: bool = False
) -> Dict[str, bool]:
    return ImportService(project_root).remove_import(name, delete_files)


def get_imports_with_metadata(project_root: Path) -> List[ImportEntry]:
    return ImportService(project_root).get_imports_with_metadata()
