import pytest

from knowns.imports.exceptions import SourceNotFoundError
from knowns.imports.fetchers.base import SourceFetcher, StagedFetcher
from knowns.imports.fetchers.local import LocalFetcher, resolve_local_path


def test_resolve_relative_to_project_root(project, tmp_path):
    assert resolve_local_path("../shared-docs", project) == (tmp_path / "shared-docs").resolve()


def test_resolve_home(mocker, tmp_path):
    mocker.patch.dict("os.environ", {"HOME": str(tmp_path)})

    assert resolve_local_path("~/kb") == (tmp_path / "kb").resolve()


def test_fetch_uses_source_in_place(project, source):
    with LocalFetcher().fetch("../shared-docs", project_root=project) as staged:
        assert staged.root == source.resolve()
        assert not staged.is_knowns_project
        assert staged.default_include() == ["**"]

    assert (source / "a.md").exists()


def test_local_fetcher_is_not_staged():
    fetcher = LocalFetcher()

    assert isinstance(fetcher, SourceFetcher)
    assert not isinstance(fetcher, StagedFetcher)
    assert not hasattr(fetcher, "_fetch_into")


def test_fetch_knowns_project_uses_knowns_dir(project, knowns_source):
    with LocalFetcher().fetch(str(knowns_source), project_root=project) as staged:
        assert staged.content_root == knowns_source.resolve() / ".knowns"
        assert staged.default_include() == ["templates/**", "docs/**"]


def test_fetch_pointing_at_knowns_dir(project, knowns_source):
    with LocalFetcher().fetch(str(knowns_source / ".knowns"), project_root=project) as staged:
        assert staged.content_root == staged.root
        assert staged.is_knowns_project


def test_missing_path(project):
    with pytest.raises(SourceNotFoundError) as exc:
        with LocalFetcher().fetch("./nope", project_root=project):
            pass

    assert exc.value.message.startswith("Path not found")
    assert exc.value.hint == "Check the path and try again"


def test_file_is_not_a_source(project):
    (project / "file.md").write_text("x")

    with pytest.raises(SourceNotFoundError):
        with LocalFetcher().fetch("./file.md", project_root=project):
            pass
