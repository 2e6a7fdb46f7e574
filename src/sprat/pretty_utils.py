"""
Internal utilities for progress bars, pretty printing, and log output.
"""
import logging
import typing as t

import rich.console
import rich.progress
from rich.logging import RichHandler


_rich_consoles = {
    'stdout': rich.console.Console(),
    'stderr': rich.console.Console(stderr=True),
}

T = t.TypeVar('T')


def track_progress(iterable: t.Iterable[T], desc: str) -> t.Iterable[T]:
    """
    Progress tracker using rich progress bars.
    """
    yield from rich.progress.track(iterable, desc, console=_rich_consoles['stdout'])


def print_with_style(*args, sep=' ', end='\n', file: str = 'stdout', style=None):
    """
    Enhanced print() function which supports rich console styles.
    """
    _rich_consoles[file].print(*args, sep=sep, end=end, style=style)


def setup_logging(verbose: bool = False):
    """
    Route log records through rich on stderr.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(message)s',
        datefmt='[%X]',
        handlers=[RichHandler(console=_rich_consoles['stderr'], show_path=False)],
        force=True,
    )
