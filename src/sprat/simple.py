"""
Small Transformers which need nothing beyond the standard library.
"""
from __future__ import annotations

import typing as t

from .core import Asset, Transformer


class ReplaceTransformer(Transformer):
    """
    Applies literal substring replacements to an Asset's payload, in the
    order given.
    """
    def __init__(self, replacements: t.Mapping[str, str] | t.Iterable[tuple[str, str]]):
        if isinstance(replacements, t.Mapping):
            replacements = replacements.items()
        self.replacements = [(old.encode(), new.encode()) for old, new in replacements]

    def __call__(self, asset: Asset):
        for old, new in self.replacements:
            asset.data = asset.data.replace(old, new)


class AutoReloadTransformer(Transformer):
    """
    Injects a script into HTML Assets which reloads the page once its
    WebSocket connection closes, e.g. when a development server restarts.
    Not intended for production builds.
    """
    script_template = (
        '<script>new WebSocket("ws://"+location.host+"{path}")'
        '.onclose=()=>setTimeout(()=>location.reload(!0),{timeout})</script>'
    )

    def __init__(self, websocket_path: str = '/ws', timeout: int = 1000):
        """
        :param websocket_path: Path on the current host to connect to.
        :param timeout: Milliseconds to wait before reloading.
        """
        self.websocket_path = websocket_path
        self.timeout = timeout

    @property
    def script(self):
        return self.script_template.format(path=self.websocket_path, timeout=self.timeout).encode()

    def __call__(self, asset: Asset):
        if asset.ext != '.html':
            return

        end = asset.data.find(b'</body>')
        if end == -1:
            return

        asset.data = asset.data[:end] + self.script + asset.data[end:]
