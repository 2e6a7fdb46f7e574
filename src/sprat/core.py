"""
Core classes and types for the Sprat asset pipeline.
"""
from __future__ import annotations

import abc
import logging
import posixpath
import typing as t
from datetime import date
from pathlib import Path

from .dependencies import Dependency

if t.TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence, Set


logger = logging.getLogger(__name__)

MetaValue: t.TypeAlias = 'str | int | float | bool | None | date | MetaDict | Sequence[MetaValue]'
MetaDict = dict[str, MetaValue]
FilterFunc = t.Callable[['Asset'], bool]
TransformFunc = t.Callable[['Asset'], None]


def normalize_path(path: str):
    """
    Turn @path into a clean, absolute, slash-separated virtual path. Parent
    references are collapsed against the root, so the result never climbs
    above `/`.
    """
    return posixpath.normpath('/' + path.lstrip('/'))


def path_ext(path: str):
    """
    Return the extension of the final element of @path, including the dot, or
    an empty string. Unlike `posixpath.splitext()`, dotfiles like `.env` are
    treated as pure extensions.
    """
    name = posixpath.basename(path)
    idx = name.rfind('.')
    return name[idx:] if idx != -1 else ''


class Asset:
    """
    A single in-memory document with a virtual path, a byte payload, and
    open-ended metadata. `meta` is None until something opts the asset into
    the metadata system.
    """
    encoding = 'utf-8'

    def __init__(self, path: str, data: bytes | str = b'', meta: MetaDict | None = None):
        self.path = path
        self.data = data.encode(self.encoding) if isinstance(data, str) else data
        self.meta = meta

    def __repr__(self):
        return f'{self.__class__.__name__}({self.path!r}, <{len(self.data)} bytes>, meta={self.meta!r})'

    @property
    def text(self) -> str:
        """
        The payload decoded as UTF-8.
        """
        return self.data.decode(self.encoding)

    @text.setter
    def text(self, value: str):
        self.data = value.encode(self.encoding)

    @property
    def ext(self):
        return path_ext(self.path)


class Assets(t.Sequence[Asset]):
    """
    An ordered collection of Assets. Order is meaningful: it decides which
    asset wins when two share a path at write time, and the order of sitemap
    entries.
    """
    def __init__(self, assets: Iterable[Asset] = ()):
        self._assets: list[Asset] = list(assets)

    @t.overload
    def __getitem__(self, index: int) -> Asset: ...
    @t.overload
    def __getitem__(self, index: slice) -> Assets: ...
    def __getitem__(self, index):
        if isinstance(index, slice):
            return self.__class__(self._assets[index])
        return self._assets[index]

    def __len__(self):
        return len(self._assets)

    def __iter__(self) -> Iterator[Asset]:
        return iter(self._assets)

    def __eq__(self, other: object):
        if isinstance(other, Assets):
            return self._assets == other._assets
        if isinstance(other, list):
            return self._assets == other
        return NotImplemented

    def __repr__(self):
        return f'{self.__class__.__name__}({self._assets!r})'

    def append(self, asset: Asset):
        self._assets.append(asset)

    def extend(self, assets: Iterable[Asset]):
        self._assets.extend(assets)

    def add(self, *assets: Asset):
        """
        Append @assets, normalizing their paths. Metadata is kept exactly as
        given, including an unset (None) metadata container.
        """
        for asset in assets:
            self._assets.append(Asset(normalize_path(asset.path), asset.data, asset.meta))

    def pop(self, *filters: FilterFunc) -> Assets:
        """
        Remove every asset matching all of @filters and return them as a new
        collection. Relative order is preserved in both groups. With no
        filters, nothing is popped.
        """
        popped = self.__class__()
        if not filters:
            return popped

        keep: list[Asset] = []
        for asset in self._assets:
            if all(f(asset) for f in filters):
                popped.append(asset)
            else:
                keep.append(asset)

        self._assets = keep
        return popped

    def filter(self, *filters: FilterFunc) -> Assets:
        """
        Return the assets matching all of @filters without modifying this
        collection. With no filters, every asset is returned.
        """
        scratch = self.__class__(self._assets)
        if not filters:
            return scratch
        return scratch.pop(*filters)

    def to_map(self, key: str) -> dict[str, Asset]:
        """
        Map the string value of metadata @key to its asset. Assets without a
        string value for @key are skipped; later assets win on collisions.
        """
        mapping: dict[str, Asset] = {}
        for asset in self._assets:
            if asset.meta and isinstance(value := asset.meta.get(key), str):
                mapping[value] = asset
        return mapping

    def set_meta_func(self, key: str, func: t.Callable[[Asset], MetaValue]):
        """
        Store `func(asset)` under metadata @key for every asset whose metadata
        has been initialized. Assets with unset metadata are left alone.
        """
        for asset in self._assets:
            if asset.meta is None:
                continue
            asset.meta[key] = func(asset)
        return self

    def add_to_meta(self, key: str, value: MetaValue):
        """
        Store a constant @value under metadata @key, with the same rules as
        `set_meta_func()`.
        """
        return self.set_meta_func(key, lambda _asset: value)

    def transform(self, *transformers: Transformer | TransformFunc):
        """
        Apply each transformer to every asset before moving on to the next
        transformer. The first failure stops the pipeline.
        """
        for transformer in transformers:
            logger.debug('Applying %r to %d assets', transformer, len(self._assets))
            for asset in self._assets:
                transformer(asset)
        return self

    def write(self, output_dir: Path):
        """
        Write every asset beneath @output_dir, creating directories as needed
        and overwriting existing files.
        """
        base_dir = Path(output_dir).resolve()
        for asset in self._assets:
            rel = normalize_path(asset.path).lstrip('/')
            target = (base_dir / rel).resolve()
            if not target.is_relative_to(base_dir):
                raise AssetPathError(f'asset path escapes output dir: {asset.path}')

            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(asset.data)
            logger.debug('Wrote %s', target)
        logger.info('Wrote %d assets to %s', len(self._assets), base_dir)


class Transformer(abc.ABC):
    """
    Abstract base class for Transformers, the individual stages of a Sprat
    pipeline. A Transformer mutates one Asset in place, or raises.
    """
    _transformer_registry: list[t.Type[Transformer]] = []

    def __init_subclass__(cls, **kw):
        super().__init_subclass__(**kw)
        cls._transformer_registry.append(cls)

    @classmethod
    def get_all_transformers(cls):
        """
        Return a list of all currently known Transformers.
        """
        return list(cls._transformer_registry)

    @classmethod
    def get_available_transformers(cls):
        """
        Return a list of all currently known Transformers whose requirements
        are met.
        """
        return [s for s in cls._transformer_registry if s.is_available()]

    @classmethod
    def is_available(cls) -> bool:
        """
        Return whether this Transformer's requirements are installed, making
        it available for use.
        """
        return all(d.satisfied for d in cls.get_dependencies())

    @classmethod
    def get_dependencies(cls) -> Set[Dependency]:
        """
        Return the requirements for this Transformer.
        """
        return set()

    def __repr__(self):
        return f'{self.__class__.__name__}()'

    @abc.abstractmethod
    def __call__(self, asset: Asset) -> None:
        ...


class SpratError(Exception):
    """
    Base class for errors raised by the Sprat pipeline.
    """


class TransformError(SpratError):
    """
    Raised when a Transformer cannot process an Asset.
    """
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f'{path}: {reason}')


class AssetPathError(SpratError, ValueError):
    """
    Raised when an Asset's path would be written outside of the output
    directory.
    """


class TransformerUnavailableException(SpratError):
    """
    Exception raised when a transformer to be used is unavailable due to
    missing dependencies.
    """
    def __init__(self, transformer: Transformer, *args: t.Any):
        self.transformer = transformer
        super().__init__(*args)
