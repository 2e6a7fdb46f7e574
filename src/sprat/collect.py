"""
Collectors which populate Assets from directory trees and git repositories.
"""
from __future__ import annotations

import logging
import subprocess
import tempfile
import typing as t
from pathlib import Path

from .core import Asset, SpratError, normalize_path
from .dependencies import WebExecDependency

if t.TYPE_CHECKING:
    from collections.abc import Iterator, Set


logger = logging.getLogger(__name__)

GIT_DEPENDENCY = WebExecDependency('git', 'https://git-scm.com/downloads')


class GitCloneError(SpratError):
    """
    Raised when a repository cannot be cloned.
    """


def find_files(path: Path, skip_dirs: Set[str] = frozenset()) -> Iterator[Path]:
    """
    Recursively yield the files beneath @path in name order, excluding the
    directories themselves and any directory named in @skip_dirs.
    """
    for candidate in sorted(path.iterdir()):
        if candidate.is_dir():
            if candidate.name not in skip_dirs:
                yield from find_files(candidate, skip_dirs)
        else:
            yield candidate


def from_dir(root: Path,
             include_root: bool = False,
             prefix: str = '',
             skip_dirs: Set[str] = frozenset()) -> list[Asset]:
    """
    Read every file beneath @root into an Asset with surrounding whitespace
    trimmed. Virtual paths are relative to @root, under @prefix and, if
    @include_root is set, the name of @root itself.
    """
    root = Path(root)
    base = '/'.join(p for p in (prefix.strip('/'), root.name if include_root else '') if p)
    assets: list[Asset] = []
    for file_path in find_files(root, skip_dirs):
        rel = file_path.relative_to(root).as_posix()
        assets.append(Asset(
            normalize_path(f'{base}/{rel}'),
            file_path.read_bytes().strip(),
            {},
        ))
    logger.info('Collected %d assets from %s', len(assets), root)
    return assets


def clone_repository(url: str, branch: str, dest: Path):
    """
    Clone a single @branch of the repository at @url into @dest.
    """
    command = [
        'git', 'clone',
        '--quiet',
        '--single-branch',
        '--branch', branch,
        '--no-recurse-submodules',
        url, str(dest),
    ]
    try:
        subprocess.check_output(command, stderr=subprocess.STDOUT)
    except (subprocess.CalledProcessError, OSError) as e:
        output = getattr(e, 'output', None)
        detail = output.decode(errors='replace').strip() if output else str(e)
        raise GitCloneError(f'could not clone repository: {detail}') from e


def from_git(url: str, branch: str, out_dir: str) -> list[Asset]:
    """
    Clone @branch of the repository at @url into a scratch directory and
    collect its files under the virtual directory @out_dir.
    """
    if not GIT_DEPENDENCY.satisfied:
        raise GitCloneError(f'{GIT_DEPENDENCY} is not available: {GIT_DEPENDENCY.install_hint}')

    with tempfile.TemporaryDirectory() as temp_dir:
        checkout = Path(temp_dir) / 'checkout'
        logger.info('Cloning %s (%s)', url, branch)
        clone_repository(url, branch, checkout)
        return from_dir(checkout, prefix=out_dir, skip_dirs={'.git'})
