import io
import tarfile

import httpx
import pytest

from knowns.imports.exceptions import NetworkError, SourceNotFoundError
from knowns.imports.fetchers.npm import (
    NpmFetcher,
    extract_package,
    resolve_version,
    split_package_spec,
)

REGISTRY = "https://registry.test"


def make_tarball(files, extra_members=()):
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, text in files.items():
            data = text.encode()
            info = tarfile.TarInfo(f"package/{name}")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
        for member in extra_members:
            tar.addfile(member)
    return buffer.getvalue()


def packument(name, versions, tags=None):
    return {
        "name": name,
        "dist-tags": tags or {"latest": versions[-1]},
        "versions": {
            v: {"dist": {"tarball": f"{REGISTRY}/{name}/-/{name.split('/')[-1]}-{v}.tgz"}}
            for v in versions
        },
    }


def make_fetcher(handler):
    return NpmFetcher(registry=REGISTRY, transport=httpx.MockTransport(handler))


@pytest.fixture
def tarball():
    return make_tarball(
        {".knowns/templates/t.md": "tpl", ".knowns/docs/d.md": "doc", "package.json": "{}"}
    )


def test_split_package_spec():
    assert split_package_spec("@org/pkg@1.0.0") == ("@org/pkg", "1.0.0")
    assert split_package_spec("@org/pkg") == ("@org/pkg", None)
    assert split_package_spec("pkg@next") == ("pkg", "next")
    assert split_package_spec("pkg") == ("pkg", None)


def test_resolve_version():
    doc = packument("pkg", ["1.0.0", "2.0.0"], {"latest": "2.0.0", "beta": "3.0.0"})

    assert resolve_version(doc, "latest") == "2.0.0"
    assert resolve_version(doc, "1.0.0") == "1.0.0"
    assert resolve_version(doc, "beta") is None
    assert resolve_version(doc, "^1.0.0") is None


def test_fetch_latest(tarball):
    requested = []

    def handler(request):
        requested.append(str(request.url))
        if request.url.path == "/@org/kb":
            return httpx.Response(200, json=packument("@org/kb", ["1.0.0", "1.1.0"]))
        return httpx.Response(200, content=tarball)

    fetcher = make_fetcher(handler)
    with fetcher.fetch("@org/kb") as staged:
        root = staged.root
        assert staged.version == "1.1.0"
        assert staged.is_knowns_project
        assert (staged.content_root / "docs" / "d.md").read_text() == "doc"
        assert (staged.root / "package.json").exists()

    assert not root.exists()
    assert requested[0] == f"{REGISTRY}/@org%2Fkb"
    assert requested[1].endswith("kb-1.1.0.tgz")


def test_fetch_pinned_version_from_ref(tarball):
    def handler(request):
        if request.url.path == "/kb":
            return httpx.Response(200, json=packument("kb", ["1.0.0", "2.0.0"]))
        assert request.url.path.endswith("kb-1.0.0.tgz")
        return httpx.Response(200, content=tarball)

    with make_fetcher(handler).fetch("kb", ref="1.0.0") as staged:
        assert staged.version == "1.0.0"


def test_fetch_version_in_descriptor(tarball):
    def handler(request):
        if request.url.path == "/kb":
            return httpx.Response(200, json=packument("kb", ["1.0.0", "2.0.0"]))
        return httpx.Response(200, content=tarball)

    with make_fetcher(handler).fetch("kb@1.0.0") as staged:
        assert staged.version == "1.0.0"


def test_unknown_package():
    fetcher = make_fetcher(lambda request: httpx.Response(404, json={"error": "Not found"}))

    with pytest.raises(SourceNotFoundError):
        with fetcher.fetch("no-such-package"):
            pass


def test_unknown_version():
    fetcher = make_fetcher(
        lambda request: httpx.Response(200, json=packument("kb", ["1.0.0"]))
    )

    with pytest.raises(SourceNotFoundError) as exc:
        with fetcher.fetch("kb", ref="9.9.9"):
            pass
    assert "dist-tag" in exc.value.hint


def test_registry_server_error():
    fetcher = make_fetcher(lambda request: httpx.Response(503))

    with pytest.raises(NetworkError):
        with fetcher.fetch("kb"):
            pass


def test_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError):
        with make_fetcher(handler).fetch("kb"):
            pass


def test_tarball_download_failure_releases_staging(tmp_path):
    def handler(request):
        if request.url.path == "/kb":
            return httpx.Response(200, json=packument("kb", ["1.0.0"]))
        return httpx.Response(500)

    fetcher = make_fetcher(handler)
    with pytest.raises(NetworkError):
        with fetcher.fetch("kb"):
            pass


def test_registry_from_user_settings(mocker):
    store = mocker.Mock()
    store.get_npm_registry.return_value = "https://npm.internal/"

    assert NpmFetcher(config_store=store).registry == "https://npm.internal"


def test_extract_package_rejects_unsafe_members(tmp_path):
    escape = tarfile.TarInfo("package/../../evil.md")
    escape.size = 0
    link = tarfile.TarInfo("package/link.md")
    link.type = tarfile.SYMTYPE
    link.linkname = "/etc/passwd"
    archive = tmp_path / "pkg.tgz"
    archive.write_bytes(make_tarball({"ok.md": "fine"}, extra_members=[escape, link]))

    count = extract_package(archive, tmp_path / "out")

    assert count == 1
    assert (tmp_path / "out" / "ok.md").read_text() == "fine"
    assert not (tmp_path / "out" / "link.md").exists()
    assert not (tmp_path / "evil.md").exists()
