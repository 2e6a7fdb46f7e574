"""
Transformer for pulling leading metadata blocks out of Assets.
"""
from __future__ import annotations

import logging
import sys
import typing as t

from .components.md_frontmatter import (
    FRONTMATTER_DELIMITERS, FrontMatterParser, FrontMatterParserName, get_frontmatter_parser, split_frontmatter,
)
from .core import Asset, Transformer, TransformError
from .dependencies import PipDependency


logger = logging.getLogger(__name__)


class FrontmatterError(TransformError):
    """
    Raised when an Asset's frontmatter block is malformed.
    """


class FrontmatterTransformer(Transformer):
    """
    Collects YAML (`---`), TOML (`+++`) or JSON (`;;;`) frontmatter from the
    start of an Asset into its metadata and strips it from the payload.
    Frontmatter keys override existing metadata keys of the same name.
    """
    @classmethod
    def get_dependencies(cls):
        deps = {PipDependency('ruamel.yaml', check_name='ruamel.yaml')}
        if sys.version_info < (3, 11):
            deps.add(PipDependency('tomli'))
        return deps

    def __init__(self, parsers: dict[FrontMatterParserName, FrontMatterParser] | None = None):
        """
        :param parsers: Optional overrides for the parser used with each
            frontmatter format.
        """
        self._parsers: dict[FrontMatterParserName, FrontMatterParser] = dict(parsers or {})

    def get_parser(self, name: FrontMatterParserName):
        if name not in self._parsers:
            self._parsers[name] = get_frontmatter_parser(name)
        return self._parsers[name]

    def __call__(self, asset: Asset):
        if asset.meta is None:
            asset.meta = {}

        # Only decode payloads that open with a delimiter.
        first_line = asset.data.partition(b'\n')[0].strip()
        if first_line.decode('ascii', 'replace') not in FRONTMATTER_DELIMITERS:
            return

        try:
            split = split_frontmatter(asset.text)
            if not split:
                return
            name, raw, body = split
            parsed = self.get_parser(name)(raw)
        except (ValueError, UnicodeDecodeError) as e:
            raise FrontmatterError(asset.path, f'malformed frontmatter: {e}') from e

        if parsed is None:
            parsed = {}
        if not isinstance(parsed, t.Mapping):
            raise FrontmatterError(asset.path, f'frontmatter must be a mapping, not {type(parsed).__name__}')

        logger.debug('Collected %d %s frontmatter keys from %s', len(parsed), name, asset.path)
        asset.meta.update(parsed)
        asset.text = body
