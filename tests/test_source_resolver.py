"""Tests for source classification and the three resolution strategies."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any, Dict, List

import pytest
import requests

from oictl.core.errors import SourceResolutionError
from oictl.definitions.models import SourceDescriptor
from oictl.sources import ResolvedSource, SourceKind, SourceResolver, classify_locator, has_extension
from oictl.sources import resolver as resolver_module


def _requests_response(status_code: int, body: bytes, url: str = "https://example.com") -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = body
    response.url = url
    return response


class _StubGetSession:
    def __init__(self, result: Any):
        self.result = result
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def get(self, url: str, timeout: Any = None):
        self.calls.append({"url": url, "timeout": timeout})
        if isinstance(self.result, Exception):
            raise self.result
        return self.result

    def close(self) -> None:
        self.closed = True


def _touch(path: Path, text: str = "x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def resolver(work_dir: Path) -> SourceResolver:
    return SourceResolver(work_dir=work_dir, session=_StubGetSession(AssertionError("no HTTP expected")))


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "locator,expected",
    [
        ("git@github.com:acme/handbook.git", SourceKind.REPOSITORY),
        ("git@gitlab.example.com:team/docs", SourceKind.REPOSITORY),
        ("https://github.com/acme/handbook.git", SourceKind.REPOSITORY),
        ("../shared/handbook.git", SourceKind.REPOSITORY),
        ("https://example.com/guide.md", SourceKind.URL),
        ("http://example.com/", SourceKind.URL),
        ("./docs", SourceKind.LOCAL),
        ("notes/readme.md", SourceKind.LOCAL),
        ("HTTPS://EXAMPLE.COM/upper", SourceKind.LOCAL),
    ],
)
def test_classify_locator(locator: str, expected: SourceKind):
    assert classify_locator(locator) is expected


def test_has_extension_is_case_sensitive_suffix_match():
    assert has_extension("/a/b/readme.md", [".md"])
    assert not has_extension("/a/b/README.MD", [".md"])
    assert has_extension("/a/b/archive.tar.gz", [".gz", ".md"])
    assert has_extension("/a/b/anything", [])


# ---------------------------------------------------------------------------
# Local strategy
# ---------------------------------------------------------------------------


def test_local_missing_path_yields_no_files_and_no_error(resolver: SourceResolver, tmp_path: Path):
    resolved = resolver.resolve(SourceDescriptor(source="./does-not-exist"), tmp_path)

    assert resolved.kind is SourceKind.LOCAL
    assert resolved.files == []
    assert resolved.cleanup_path is None


def test_local_single_file_bypasses_extension_filter(resolver: SourceResolver, tmp_path: Path):
    _touch(tmp_path / "guide.txt")
    descriptor = SourceDescriptor(source="guide.txt", extensions=[".md"])

    resolved = resolver.resolve(descriptor, tmp_path)

    assert [f.path for f in resolved.files] == [(tmp_path / "guide.txt").resolve()]
    assert resolved.files[0].display_name == "guide.txt"


def test_local_directory_is_walked_with_extension_filter(resolver: SourceResolver, tmp_path: Path):
    docs = tmp_path / "docs"
    _touch(docs / "a.md")
    _touch(docs / "b.txt")
    _touch(docs / "nested" / "deeper" / "c.md")
    _touch(docs / "nested" / "d.MD")

    resolved = resolver.resolve(SourceDescriptor(source="docs", extensions=[".md"]), tmp_path)

    paths = [f.path for f in resolved.files]
    assert all(str(p).endswith(".md") for p in paths)
    assert sorted(p.name for p in paths) == ["a.md", "c.md"]
    assert all(p.is_absolute() for p in paths)


def test_local_directory_without_extensions_returns_every_file(resolver: SourceResolver, tmp_path: Path):
    docs = tmp_path / "docs"
    for name in ("a.md", "b.txt", "sub/c.pdf", "sub/inner/d"):
        _touch(docs / name)

    resolved = resolver.resolve(SourceDescriptor(source="docs"), tmp_path)

    assert sorted(f.path.relative_to(docs.resolve()).as_posix() for f in resolved.files) == [
        "a.md",
        "b.txt",
        "sub/c.pdf",
        "sub/inner/d",
    ]


def test_local_resolution_is_idempotent(resolver: SourceResolver, tmp_path: Path):
    docs = tmp_path / "docs"
    for name in ("z.md", "a.md", "m/n.md"):
        _touch(docs / name)
    descriptor = SourceDescriptor(source="docs", extensions=[".md"])

    before = sorted(p for p in docs.rglob("*"))
    first = resolver.resolve(descriptor, tmp_path)
    second = resolver.resolve(descriptor, tmp_path)

    assert first.files == second.files
    assert len(first.files) == 3
    assert sorted(p for p in docs.rglob("*")) == before


def test_local_path_is_relative_to_definition_directory(resolver: SourceResolver, tmp_path: Path):
    _touch(tmp_path / "shared" / "faq.md")
    definitions = tmp_path / "definitions"
    definitions.mkdir()

    resolved = resolver.resolve(SourceDescriptor(source="../shared/faq.md"), definitions)

    assert [f.path for f in resolved.files] == [(tmp_path / "shared" / "faq.md").resolve()]


# ---------------------------------------------------------------------------
# Repository strategy
# ---------------------------------------------------------------------------


def _fake_clone(layout: Dict[str, str], calls: List[List[str]]):
    def _run(cmd, **kwargs):
        calls.append(list(cmd))
        checkout = Path(cmd[-1])
        (checkout / ".git").mkdir(parents=True, exist_ok=True)
        _touch(checkout / ".git" / "HEAD", "ref: refs/heads/main")
        for rel, text in layout.items():
            _touch(checkout / rel, text)
        return subprocess.CompletedProcess(cmd, 0, stdout=b"", stderr=b"")

    return _run


def test_repository_clone_collects_declared_dirs(monkeypatch, resolver: SourceResolver, work_dir: Path):
    calls: List[List[str]] = []
    monkeypatch.setattr(
        resolver_module.subprocess,
        "run",
        _fake_clone(
            {
                "docs/intro.md": "intro",
                "docs/img/logo.png": "png",
                "docs/guides/setup.md": "setup",
                "README.md": "readme",
                "LICENSE": "mit",
            },
            calls,
        ),
    )
    descriptor = SourceDescriptor(
        source="git@github.com:acme/handbook.git",
        dir=["docs", "README.md", "LICENSE"],
        extensions=[".md"],
    )

    with resolver.resolve(descriptor, work_dir) as resolved:
        checkout = resolved.cleanup_path
        assert resolved.kind is SourceKind.REPOSITORY
        assert checkout is not None and checkout.parent == work_dir
        assert checkout.name.startswith("temp_git_")
        names = [f.path.relative_to(checkout).as_posix() for f in resolved.files]
        assert names == ["docs/intro.md", "docs/guides/setup.md", "README.md"]

    assert calls[0][:2] == ["git", "clone"]
    assert calls[0][2] == "git@github.com:acme/handbook.git"
    assert not checkout.exists()


def test_repository_without_dirs_uses_root_and_skips_git_metadata(
    monkeypatch, resolver: SourceResolver, work_dir: Path
):
    monkeypatch.setattr(
        resolver_module.subprocess,
        "run",
        _fake_clone({"a.md": "a", "sub/b.txt": "b"}, []),
    )
    descriptor = SourceDescriptor(source="https://github.com/acme/handbook.git")

    with resolver.resolve(descriptor, work_dir) as resolved:
        checkout = resolved.cleanup_path
        names = [f.path.relative_to(checkout).as_posix() for f in resolved.files]

    assert names == ["a.md", "sub/b.txt"]


def test_repository_strategy_wins_over_extension_content(monkeypatch, resolver: SourceResolver, work_dir: Path):
    calls: List[List[str]] = []
    monkeypatch.setattr(resolver_module.subprocess, "run", _fake_clone({"x.git": "odd"}, calls))
    descriptor = SourceDescriptor(source="https://example.com/repo.git", extensions=[".git"])

    with resolver.resolve(descriptor, work_dir) as resolved:
        assert resolved.kind is SourceKind.REPOSITORY
        assert [f.display_name for f in resolved.files] == ["x.git"]
    assert len(calls) == 1


def test_repository_missing_subdir_is_hard_error_and_cleans_up(
    monkeypatch, resolver: SourceResolver, work_dir: Path
):
    monkeypatch.setattr(resolver_module.subprocess, "run", _fake_clone({"docs/a.md": "a"}, []))
    descriptor = SourceDescriptor(source="git@github.com:acme/handbook.git", dir=["docs", "missing"])

    with pytest.raises(SourceResolutionError, match="missing"):
        resolver.resolve(descriptor, work_dir)

    assert list(work_dir.iterdir()) == []


def test_repository_clone_failure_is_hard_error_and_cleans_up(
    monkeypatch, resolver: SourceResolver, work_dir: Path
):
    def _fail(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 128, stdout=b"", stderr=b"fatal: repository not found")

    monkeypatch.setattr(resolver_module.subprocess, "run", _fail)

    with pytest.raises(SourceResolutionError, match="repository not found"):
        resolver.resolve(SourceDescriptor(source="git@github.com:acme/missing.git"), work_dir)

    assert list(work_dir.iterdir()) == []


def test_repository_missing_git_binary(monkeypatch, resolver: SourceResolver, work_dir: Path):
    def _missing(cmd, **kwargs):
        raise FileNotFoundError("git")

    monkeypatch.setattr(resolver_module.subprocess, "run", _missing)

    with pytest.raises(SourceResolutionError, match="git executable not found"):
        resolver.resolve(SourceDescriptor(source="git@github.com:acme/x.git"), work_dir)
    assert list(work_dir.iterdir()) == []


def test_repository_checkouts_are_uniquely_named(monkeypatch, resolver: SourceResolver, work_dir: Path):
    monkeypatch.setattr(resolver_module.subprocess, "run", _fake_clone({"a.md": "a"}, []))
    descriptor = SourceDescriptor(source="git@github.com:acme/handbook.git")

    first = resolver.resolve(descriptor, work_dir)
    second = resolver.resolve(descriptor, work_dir)
    try:
        assert first.cleanup_path != second.cleanup_path
    finally:
        first.cleanup()
        second.cleanup()
    assert list(work_dir.iterdir()) == []


# ---------------------------------------------------------------------------
# URL strategy
# ---------------------------------------------------------------------------


def test_url_fetch_writes_single_temp_file_and_ignores_filters(work_dir: Path, tmp_path: Path):
    session = _StubGetSession(_requests_response(200, b"# Policy\n"))
    resolver = SourceResolver(work_dir=work_dir, session=session, timeout=5.0)
    descriptor = SourceDescriptor(
        source="https://example.com/files/policy.md",
        dir=["ignored"],
        extensions=[".pdf"],
    )

    with resolver.resolve(descriptor, tmp_path) as resolved:
        assert resolved.kind is SourceKind.URL
        assert len(resolved.files) == 1
        fetched = resolved.files[0]
        assert fetched.path == resolved.cleanup_path
        assert fetched.path.parent == work_dir
        assert fetched.path.name.startswith("temp_url_")
        assert fetched.path.suffix == ".md"
        assert fetched.path.read_bytes() == b"# Policy\n"
        assert fetched.display_name == "https://example.com/files/policy.md"

    assert session.calls == [{"url": "https://example.com/files/policy.md", "timeout": 5.0}]
    assert not fetched.path.exists()


def test_url_non_2xx_is_hard_error(work_dir: Path, tmp_path: Path):
    resolver = SourceResolver(work_dir=work_dir, session=_StubGetSession(_requests_response(404, b"nope")))

    with pytest.raises(SourceResolutionError, match="404"):
        resolver.resolve(SourceDescriptor(source="https://example.com/missing"), tmp_path)
    assert list(work_dir.iterdir()) == []


def test_url_transport_error_is_hard_error(work_dir: Path, tmp_path: Path):
    session = _StubGetSession(requests.ConnectionError("connection refused"))
    resolver = SourceResolver(work_dir=work_dir, session=session)

    with pytest.raises(SourceResolutionError, match="connection refused"):
        resolver.resolve(SourceDescriptor(source="http://localhost:1/doc"), tmp_path)


def test_resolved_source_cleanup_is_idempotent(tmp_path: Path):
    target = tmp_path / "temp_git_x"
    _touch(target / "file.md")
    resolved = ResolvedSource(kind=SourceKind.REPOSITORY, locator="git@x:y.git", cleanup_path=target)

    assert resolved.cleanup() is True
    assert resolved.cleanup() is True
    assert not target.exists()


def test_resolved_source_cleans_up_when_body_raises(tmp_path: Path):
    target = _touch(tmp_path / "temp_url_abc.md")

    with pytest.raises(RuntimeError):
        with ResolvedSource(kind=SourceKind.URL, locator="https://x", cleanup_path=target):
            raise RuntimeError("upload exploded")

    assert not target.exists()


def test_injected_session_is_left_open(work_dir: Path):
    session = _StubGetSession(None)
    with SourceResolver(work_dir=work_dir, session=session):
        pass
    assert session.closed is False
