from knowns.utils.project import (
    find_project_root,
    get_config_path,
    get_import_dir,
    get_linked_metadata_path,
    get_metadata_path,
)


def test_find_project_root_from_root(project):
    assert find_project_root(project) == project.resolve()


def test_find_project_root_from_nested_dir(project):
    nested = project / "src" / "a" / "b"
    nested.mkdir(parents=True)

    assert find_project_root(nested) == project.resolve()


def test_find_project_root_not_found(tmp_path):
    lonely = tmp_path / "lonely"
    lonely.mkdir()

    assert find_project_root(lonely) is None


def test_find_project_root_depth_limit(tmp_path):
    (tmp_path / ".knowns").mkdir()
    deep = tmp_path.joinpath(*[f"d{i}" for i in range(25)])
    deep.mkdir(parents=True)

    assert find_project_root(deep) is None


def test_find_project_root_defaults_to_cwd(project, monkeypatch):
    monkeypatch.chdir(project)

    assert find_project_root() == project.resolve()


def test_project_paths(project):
    assert get_config_path(project) == project / ".knowns" / "config.json"
    assert get_import_dir(project, "kb") == project / ".knowns" / "imports" / "kb"
    assert get_metadata_path(project, "kb") == project / ".knowns" / "imports" / "kb" / ".import.json"
    assert get_linked_metadata_path(project, "kb") == project / ".knowns" / "imports" / "kb.import.json"
