"""
Transformer for shrinking web assets, using a shared minifier.
"""
from __future__ import annotations

import logging
import typing as t

from .core import Asset, Transformer, TransformError
from .dependencies import PipDependency
from .filters import guess_mime_type


logger = logging.getLogger(__name__)

MIME_ALIASES = {
    'application/javascript': 'text/javascript',
    'application/x-javascript': 'text/javascript',
}
SUPPORTED_MIME_TYPES = frozenset({
    'text/html',
    'text/css',
    'text/javascript',
    'image/svg+xml',
    'application/xml',
    'text/xml',
})


class MinifyError(TransformError):
    """
    Raised when the minifier rejects an Asset's content.
    """
    def __init__(self, path: str, mime_type: str, reason: str):
        self.mime_type = mime_type
        super().__init__(path, f'minify failed ({mime_type}): {reason}')


class Minifier:
    """
    A configured tdewolff-minify instance covering HTML, CSS, JS, SVG, and
    XML. Build one per pipeline and hand it to whatever needs it.

    tdewolff-minify keeps a single process-wide configuration, so each call
    reapplies this instance's config first.

    NOTE: tdewolff-minify is not supported on macOS.
    """
    default_config: dict[str, t.Any] = {
        'html-keep-end-tags': True,
        'html-keep-document-tags': True,
    }

    def __init__(self, config: dict[str, t.Any] | None = None):
        import minify
        self.config = self.default_config | (config or {})
        self._minify = minify

    @staticmethod
    def resolve_mime_type(mime_type: str | None):
        """
        Map @mime_type to the name the minifier knows it by, or None if it is
        not supported.
        """
        if not mime_type:
            return None
        mime_type = MIME_ALIASES.get(mime_type, mime_type)
        return mime_type if mime_type in SUPPORTED_MIME_TYPES else None

    def minify(self, mime_type: str, content: str) -> str:
        """
        Minify @content as @mime_type. Raises ValueError when the minifier
        reports an error.
        """
        self._minify.config(self.config)
        return self._minify.string(mime_type, content)


class MinifyTransformer(Transformer):
    """
    Minifies Assets whose extension maps to a supported MIME type. Other
    Assets are left unchanged.
    """
    @classmethod
    def get_dependencies(cls):
        return {
            PipDependency('tdewolff-minify', check_name='minify')
        }

    def __init__(self, minifier: Minifier | None = None):
        """
        @minifier is shared between transformers when given, otherwise one is
        built for this transformer.
        """
        self.minifier = minifier or Minifier()

    def __call__(self, asset: Asset):
        mime_type = self.minifier.resolve_mime_type(guess_mime_type(asset.path))
        if not mime_type:
            return

        try:
            minified = self.minifier.minify(mime_type, asset.text)
        except (ValueError, UnicodeDecodeError) as e:
            raise MinifyError(asset.path, mime_type, str(e)) from e

        logger.debug('Minified %s (%d -> %d bytes)', asset.path, len(asset.data), len(minified))
        asset.text = minified
