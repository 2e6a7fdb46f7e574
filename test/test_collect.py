import shutil
import subprocess
from pathlib import Path

import pytest

from sprat.collect import GitCloneError, from_dir, from_git
from sprat.core import Asset, Assets


requires_git = pytest.mark.skipif(not shutil.which('git'), reason='git is not installed')


@pytest.fixture
def source_tree(tmp_path: Path):
    root = tmp_path / 'site'
    (root / 'sub' / 'deeper').mkdir(parents=True)
    (root / 'index.html').write_text('  <h1>Hi</h1>\n\n')
    (root / 'sub' / 'page.md').write_text('# Page\n')
    (root / 'sub' / 'deeper' / 'data.json').write_text('{}')
    return root


def test_from_dir(source_tree: Path):
    assets = from_dir(source_tree)

    assert [a.path for a in assets] == ['/index.html', '/sub/deeper/data.json', '/sub/page.md']
    assert assets[0].data == b'<h1>Hi</h1>'
    assert assets[2].data == b'# Page'
    assert all(a.meta == {} for a in assets)


def test_from_dir_include_root(source_tree: Path):
    assets = from_dir(source_tree, include_root=True)
    assert [a.path for a in assets] == ['/site/index.html', '/site/sub/deeper/data.json', '/site/sub/page.md']


def test_from_dir_empty(tmp_path: Path):
    assert from_dir(tmp_path) == []


def test_from_dir_missing_dir(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        from_dir(tmp_path / 'nope')


def test_from_dir_read_error(source_tree: Path, monkeypatch: pytest.MonkeyPatch):
    original = Path.read_bytes

    def read_bytes(self: Path):
        if self.name == 'page.md':
            raise PermissionError(13, 'Permission denied', str(self))
        return original(self)

    monkeypatch.setattr(Path, 'read_bytes', read_bytes)
    with pytest.raises(PermissionError):
        from_dir(source_tree)


def test_write_then_collect(tmp_path: Path):
    assets = Assets([
        Asset('/a.txt', 'alpha'),
        Asset('/nested/b.txt', 'beta'),
    ])
    assets.write(tmp_path)

    collected = from_dir(tmp_path)
    assert [(a.path, a.data) for a in collected] == [('/a.txt', b'alpha'), ('/nested/b.txt', b'beta')]


def _git(cwd: Path, *args: str):
    subprocess.run(
        ['git', '-c', 'user.name=Sprat Tests', '-c', 'user.email=tests@example.com', *args],
        cwd=cwd,
        check=True,
        capture_output=True,
    )


@pytest.fixture
def git_repo(tmp_path: Path):
    repo = tmp_path / 'repo'
    (repo / 'docs').mkdir(parents=True)
    (repo / 'index.md').write_text('# Index\n')
    (repo / 'docs' / 'guide.md').write_text('# Guide\n')
    _git(repo, 'init', '-q')
    _git(repo, 'checkout', '-q', '-b', 'main')
    _git(repo, 'add', '.')
    _git(repo, 'commit', '-q', '-m', 'Initial commit')
    return repo


@requires_git
def test_from_git(git_repo: Path):
    assets = from_git(git_repo.as_uri(), 'main', 'content')

    assert [(a.path, a.data) for a in assets] == [
        ('/content/docs/guide.md', b'# Guide'),
        ('/content/index.md', b'# Index'),
    ]
    assert all(a.meta == {} for a in assets)


@requires_git
def test_from_git_missing_branch(git_repo: Path):
    with pytest.raises(GitCloneError, match='could not clone repository'):
        from_git(git_repo.as_uri(), 'does-not-exist', 'content')


def test_from_git_without_git(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(shutil, 'which', lambda name: None)
    with pytest.raises(GitCloneError, match='git-scm.com') as exc_info:
        from_git((tmp_path / 'repo').as_uri(), 'main', 'content')
    assert 'git is not available' in str(exc_info.value)


@requires_git
def test_from_git_invalid_url(tmp_path: Path):
    with pytest.raises(GitCloneError):
        from_git((tmp_path / 'not-a-repo').as_uri(), 'main', 'content')
