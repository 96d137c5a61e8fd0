from knowns.imports.models import (
    ChangeAction,
    FileChange,
    FileRecord,
    ImportConfig,
    ImportMetadata,
    ImportResult,
    ImportType,
)


def test_import_config_persists_camel_case():
    config = ImportConfig(
        name="kb",
        source="https://github.com/org/kb.git",
        type=ImportType.GIT,
        ref="main",
        include=["docs/**"],
        created_at="2026-01-01T00:00:00+00:00",
    )

    data = config.to_dict()

    assert data == {
        "name": "kb",
        "source": "https://github.com/org/kb.git",
        "type": "git",
        "ref": "main",
        "include": ["docs/**"],
        "createdAt": "2026-01-01T00:00:00+00:00",
    }
    assert ImportConfig.from_dict(data) == config


def test_import_config_accepts_legacy_version_key():
    config = ImportConfig.from_dict({"name": "kb", "source": "kb", "type": "npm", "version": "1.2.0"})

    assert config.ref == "1.2.0"
    assert config.link is False


def test_metadata_from_dict_skips_bad_file_entries():
    metadata = ImportMetadata.from_dict(
        {
            "importName": "kb",
            "source": "../kb",
            "type": "local",
            "lastSync": "t1",
            "files": ["(symlinked)", {"path": "a.md", "contentHash": "h", "size": 1}],
        }
    )

    assert [f.path for f in metadata.files] == ["a.md"]
    assert metadata.imported_at == "t1"


def test_metadata_to_dict_omits_empty_revision_fields():
    metadata = ImportMetadata(
        import_name="kb",
        source="kb",
        type=ImportType.NPM,
        last_sync="t1",
        imported_at="t0",
        files=[FileRecord("a.md", "h", 1, "t0")],
        version="1.2.0",
    )

    data = metadata.to_dict()

    assert data["version"] == "1.2.0"
    assert "commit" not in data
    assert data["files"] == [{"path": "a.md", "contentHash": "h", "size": 1, "updatedAt": "t0"}]


def test_result_summary_helpers():
    result = ImportResult(
        success=True,
        name="kb",
        source="../kb",
        type=ImportType.LOCAL,
        changes=[
            FileChange("a.md", ChangeAction.ADD),
            FileChange("b.md", ChangeAction.SKIP, "Local modifications detected"),
            FileChange("c.md", ChangeAction.SKIP, "unchanged"),
        ],
    )

    assert result.count(ChangeAction.SKIP) == 2
    assert [c.path for c in result.locally_modified] == ["b.md"]
    assert result.has_writes
    assert result.to_dict()["changes"][1] == {
        "path": "b.md",
        "action": "skip",
        "skipReason": "Local modifications detected",
    }


def test_failed_result_to_dict():
    result = ImportResult(
        success=False, name="kb", source="kb", type=ImportType.NPM, error="boom", hint="retry"
    )

    data = result.to_dict()

    assert data["success"] is False
    assert data["error"] == "boom"
    assert data["hint"] == "retry"
    assert "metadata" not in data
