"""
Composable predicates for selecting and partitioning Assets.

Every `without_*()` factory is the negation of its `with_*()` counterpart, so
the two always agree on how a value is interpreted.
"""
from __future__ import annotations

import abc
import mimetypes
import posixpath
import typing as t

from .core import Asset, normalize_path, path_ext


_MIME_TYPES = mimetypes.MimeTypes()
_MIME_TYPES.add_type('text/markdown', '.md')
_MIME_TYPES.add_type('text/markdown', '.markdown')
_MIME_TYPES.add_type('application/yaml', '.yaml')
_MIME_TYPES.add_type('application/yaml', '.yml')


def guess_mime_type(path: str) -> str | None:
    """
    Guess the MIME type of a virtual path from its extension.
    """
    return _MIME_TYPES.guess_type(path, strict=False)[0]


def is_truthy(value: t.Any) -> bool:
    """
    Interpret a metadata value as a flag. The strings `"true"` and `"false"`
    are read case-insensitively with surrounding whitespace ignored; any
    other value counts unless it is exactly `False`.
    """
    if isinstance(value, str):
        cleaned = value.strip().lower()
        if cleaned == 'true':
            return True
        if cleaned == 'false':
            return False
    return value is not False


class Filter(abc.ABC):
    """
    Abstract base class for Asset filters. Provides pre-baked ability to
    combine Filters with `|` and `&` and to negate them with `~`.
    """
    @abc.abstractmethod
    def __call__(self, asset: Asset) -> bool:
        ...

    def __or__(self, other: t.Callable[[Asset], bool]):
        return _OrFilter(self, other)

    def __and__(self, other: t.Callable[[Asset], bool]):
        return _AndFilter(self, other)

    def __invert__(self):
        return _NotFilter(self)


class _OrFilter(Filter):
    def __init__(self, left: t.Callable[[Asset], bool], right: t.Callable[[Asset], bool]):
        self.left = left
        self.right = right

    def __call__(self, asset: Asset):
        return self.left(asset) or self.right(asset)


class _AndFilter(Filter):
    def __init__(self, left: t.Callable[[Asset], bool], right: t.Callable[[Asset], bool]):
        self.left = left
        self.right = right

    def __call__(self, asset: Asset):
        return self.left(asset) and self.right(asset)


class _NotFilter(Filter):
    def __init__(self, inner: Filter):
        self.inner = inner

    def __call__(self, asset: Asset):
        return not self.inner(asset)

    def __invert__(self):
        return self.inner


class PathFilter(Filter):
    """
    Matches the Asset at exactly @path, after normalization.
    """
    def __init__(self, path: str):
        self.path = normalize_path(path)

    def __call__(self, asset: Asset):
        return normalize_path(asset.path) == self.path


class ExtensionFilter(Filter):
    """
    Matches Assets whose path ends in any of @exts, e.g. `.html`.
    """
    def __init__(self, *exts: str):
        self.exts = frozenset(exts)

    def __call__(self, asset: Asset):
        return path_ext(asset.path) in self.exts


class ParentDirFilter(Filter):
    """
    Matches Assets nested anywhere beneath @parent. Only the path strings are
    inspected; nothing has to exist on disk.
    """
    def __init__(self, parent: str):
        self.parent = normalize_path(parent)

    def __call__(self, asset: Asset):
        if self.parent == '/':
            return True
        current = normalize_path(asset.path)
        while True:
            if current == self.parent:
                return True
            if current == '/':
                return False
            current = posixpath.dirname(current)


class MetaFilter(Filter):
    """
    Matches Assets whose metadata @key is present and truthy, as decided by
    `is_truthy()`.
    """
    def __init__(self, key: str):
        self.key = key

    def __call__(self, asset: Asset):
        if not asset.meta or self.key not in asset.meta:
            return False
        return is_truthy(asset.meta[self.key])


class MimeTypeFilter(Filter):
    """
    Matches Assets whose guessed MIME type is @mime_type. A pattern like
    `text/*` matches on the top-level type alone.
    """
    def __init__(self, mime_type: str):
        self.mime_type = mime_type.lower()

    def __call__(self, asset: Asset):
        guessed = guess_mime_type(asset.path)
        if not guessed:
            return False
        guessed = guessed.split(';', 1)[0].strip().lower()
        if self.mime_type.endswith('/*'):
            return guessed.split('/', 1)[0] == self.mime_type[:-2]
        return guessed == self.mime_type


def with_path(path: str) -> Filter:
    return PathFilter(path)


def without_path(path: str) -> Filter:
    return ~with_path(path)


def with_extensions(*exts: str) -> Filter:
    return ExtensionFilter(*exts)


def without_extensions(*exts: str) -> Filter:
    return ~with_extensions(*exts)


def with_parent_dir(parent: str) -> Filter:
    return ParentDirFilter(parent)


def without_parent_dir(parent: str) -> Filter:
    return ~with_parent_dir(parent)


def with_meta(key: str) -> Filter:
    return MetaFilter(key)


def without_meta(key: str) -> Filter:
    return ~with_meta(key)


def with_mime_type(mime_type: str) -> Filter:
    return MimeTypeFilter(mime_type)


def without_mime_type(mime_type: str) -> Filter:
    return ~with_mime_type(mime_type)
