"""
Import commands.

knowns import add | list | sync | remove | auth
"""

import json
from pathlib import Path
from typing import Any, List, Optional

import typer

from knowns.imports import (
    ChangeAction,
    ImportOptions,
    ImportResult,
    ImportType,
    SourceImportError,
    SyncOptions,
    get_imports_with_metadata,
    import_source,
    remove_import,
    sync_all_imports,
    sync_import,
)
from knowns.logging import get_logger
from knowns.utils.config_store import ConfigStore
from knowns.utils.console import console, create_table, error, hint, info, success, warning
from knowns.utils.notify import notify_imports_changed
from knowns.utils.project import find_project_root

app = typer.Typer(help="Import templates and docs from git, npm or local sources")
logger = get_logger("knowns.commands.imports")

ProjectRootOption = typer.Option(
    None, "--project-root", help="Project directory (default: nearest folder with .knowns/)"
)
JsonOption = typer.Option(False, "--json", help="Print machine-readable JSON")


def resolve_project_root(project_root: Optional[Path]) -> Path:
    root = find_project_root(project_root)
    if root is None:
        error("Not a Knowns project: no .knowns/ directory found")
        hint("Run this command inside a Knowns project or pass --project-root")
        raise typer.Exit(1)
    return root


def fail(exc: SourceImportError) -> None:
    error(exc.message)
    if exc.hint:
        hint(exc.hint)
    raise typer.Exit(1)


def print_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2))


def print_result(result: ImportResult, dry_run: bool = False) -> None:
    """Render one import/sync result"""
    if not result.success:
        error(f"{result.name}: {result.error}")
        if result.hint:
            hint(result.hint)
        return

    verb = {
        ChangeAction.ADD: "Would add" if dry_run else "Added",
        ChangeAction.UPDATE: "Would update" if dry_run else "Updated",
    }
    for change in result.changes:
        if change.action in verb:
            style = "green" if change.action == ChangeAction.ADD else "blue"
            console.print(f"  [{style}]{verb[change.action]}[/{style}] {change.path}")

    added = result.count(ChangeAction.ADD)
    updated = result.count(ChangeAction.UPDATE)
    skipped = result.count(ChangeAction.SKIP)
    summary = f"{result.name}: {added} added, {updated} updated, {skipped} skipped"
    if dry_run:
        info(f"[dry run] {summary}")
    else:
        success(summary)

    modified = result.locally_modified
    if modified:
        warning(f"{len(modified)} locally modified file(s) kept:")
        for change in modified:
            console.print(f"    {change.path}", style="yellow")
        hint("Use --force to overwrite")


def notify(project_root: Path, name: Optional[str] = None) -> None:
    notify_imports_changed(project_root, name)


@app.command("add")
def add(
    source: str = typer.Argument(..., help="Git URL, npm package or local path"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Import name"),
    import_type: Optional[ImportType] = typer.Option(
        None, "--type", "-t", help="Source type (detected when omitted)"
    ),
    ref: Optional[str] = typer.Option(
        None, "--ref", "-r", help="Git branch/tag or npm version/dist-tag"
    ),
    include: Optional[List[str]] = typer.Option(
        None, "--include", "-i", help="Glob of files to import (repeatable)"
    ),
    exclude: Optional[List[str]] = typer.Option(
        None, "--exclude", "-e", help="Glob of files to skip (repeatable)"
    ),
    link: bool = typer.Option(False, "--link", help="Symlink a local source instead of copying"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing import"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would change"),
    as_json: bool = JsonOption,
    project_root: Optional[Path] = ProjectRootOption,
):
    """Import a new source"""
    root = resolve_project_root(project_root)
    options = ImportOptions(
        name=name,
        type=import_type,
        ref=ref,
        include=include or [],
        exclude=exclude or [],
        link=link,
        force=force,
        dry_run=dry_run,
    )

    try:
        result = import_source(root, source, options)
    except SourceImportError as e:
        if as_json:
            print_json({"success": False, "error": e.to_json_error()})
            raise typer.Exit(1)
        fail(e)

    if as_json:
        print_json(result.to_dict())
    else:
        print_result(result, dry_run)
        if result.success and link and not dry_run:
            info("  Mode: symlink")

    if not result.success:
        raise typer.Exit(1)
    if not dry_run:
        notify(root, result.name)


@app.command("list")
def list_imports(
    as_json: bool = JsonOption,
    project_root: Optional[Path] = ProjectRootOption,
):
    """List imports"""
    root = resolve_project_root(project_root)
    entries = sorted(
        get_imports_with_metadata(root),
        key=lambda entry: (entry.config.type != ImportType.LOCAL, entry.config.name),
    )

    if as_json:
        print_json([
            {
                "config": entry.config.to_dict(),
                "metadata": entry.metadata.to_dict() if entry.metadata else None,
            }
            for entry in entries
        ])
        return

    if not entries:
        info("No imports yet. Add one with 'knowns import add <source>'")
        return

    table = create_table("Imports", ["Name", "Type", "Source", "Ref", "Files", "Last Sync"])
    for entry in entries:
        config, metadata = entry.config, entry.metadata
        if config.link:
            files = "linked"
        else:
            files = str(len(metadata.files)) if metadata else "-"
        ref = (metadata.version or metadata.ref) if metadata else None
        table.add_row(
            config.name,
            config.type.value,
            config.source,
            ref or config.ref or "-",
            files,
            metadata.last_sync[:19].replace("T", " ") if metadata else "never",
        )
    console.print(table)


@app.command("sync")
def sync(
    name: Optional[str] = typer.Argument(None, help="Import to sync (default: all)"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite local modifications"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would change"),
    as_json: bool = JsonOption,
    project_root: Optional[Path] = ProjectRootOption,
):
    """Sync one import, or all of them"""
    root = resolve_project_root(project_root)
    options = SyncOptions(force=force, dry_run=dry_run)

    if name:
        try:
            results = [sync_import(root, name, options)]
        except SourceImportError as e:
            fail(e)
    else:
        results = sync_all_imports(root, options)

    if as_json:
        print_json([result.to_dict() for result in results])
    else:
        if not results:
            info("No imports to sync")
        for result in results:
            print_result(result, dry_run)

        if not name and results:
            console.print()
            synced = sum(1 for result in results if result.success)
            info(f"Synced: {synced}")
            if synced < len(results):
                error(f"Failed: {len(results) - synced}")

    if not dry_run and any(result.success and result.has_writes for result in results):
        notify(root, name)
    if any(not result.success for result in results):
        raise typer.Exit(1)


@app.command("remove")
def remove(
    name: str = typer.Argument(..., help="Import to remove"),
    delete: bool = typer.Option(False, "--delete", help="Also delete the imported files"),
    project_root: Optional[Path] = ProjectRootOption,
):
    """Remove an import"""
    root = resolve_project_root(project_root)
    try:
        outcome = remove_import(root, name, delete_files=delete)
    except SourceImportError as e:
        fail(e)

    if outcome["deleted"]:
        success(f"Removed import '{name}' and its files")
    else:
        success(f"Removed import '{name}'")
        hint("Imported files were kept. Use --delete to remove them too")
    notify(root, name)


@app.command("auth")
def auth(
    host: str = typer.Argument(..., help="Git host, e.g. github.com"),
    username: Optional[str] = typer.Option(None, "--username", "-u", help="Git username"),
    token: Optional[str] = typer.Option(None, "--token", help="Access token"),
    clear: bool = typer.Option(False, "--clear", help="Forget stored credentials"),
):
    """Store an access token for private HTTPS git sources"""
    config_store = ConfigStore()
    host = host.lower()

    if clear:
        if config_store.clear_git_credentials(host):
            success(f"Cleared credentials for {host}")
        else:
            warning(f"No credentials stored for {host}")
        return

    username = username or typer.prompt("Username")
    token = token or typer.prompt("Token", hide_input=True)
    config_store.store_git_credentials(host, username, token)
    logger.info(f"Stored git credentials for {host}")
    success(f"Credentials stored for {host}")
