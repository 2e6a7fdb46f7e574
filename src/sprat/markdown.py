"""
Transformer for rendering Markdown Assets to HTML.
"""
from __future__ import annotations

import logging
import typing as t

from .core import Asset, Transformer
from .dependencies import PipDependency


logger = logging.getLogger(__name__)

MARKDOWN_EXT = '.md'
HTML_EXT = '.html'


class MarkdownTransformer(Transformer):
    """
    Renders `.md` Assets to HTML using markdown-it-py and renames them to
    `.html`. Parses CommonMark with the GitHub flavoured additions (tables,
    strikethrough, task lists, bare links), supports `{#id .class}`
    attributes and `:::` fenced divs, and highlights fenced code with
    Pygments.
    Other Assets pass through untouched.
    """
    @classmethod
    def get_dependencies(cls):
        return {
            PipDependency('markdown-it-py', check_name='markdown_it'),
            PipDependency('mdit-py-plugins', check_name='mdit_py_plugins'),
            PipDependency('linkify-it-py', check_name='linkify_it'),
            PipDependency('Pygments', check_name='pygments'),
        }

    def __init__(self,
                 *,
                 auto_typography: bool = True,
                 code_highlighting: bool = True,
                 pygments_params: dict[str, t.Any] | None = None):
        """
        :param auto_typography: Whether to enable smartquotes and replacement
            functionalities in markdown-it-py.
        :param code_highlighting: Whether to enable code highlighting.
        :param pygments_params: Parameters to supply to
            `pygments.formatters.html.HtmlFormatter`.
        """
        self.auto_typography = auto_typography
        self.code_highlighting = code_highlighting
        self.pygments_params = {'cssclass': 'chroma'} | (pygments_params or {})
        self._md_processor: t.Callable[[str], str] | None = None

    @property
    def md_processor(self):
        """
        Returns the markdown processor for this Transformer, creating it if
        necessary.
        """
        if not self._md_processor:
            self._md_processor = self._build_processor()
        return self._md_processor

    def highlight_code(self, code: str, lang: str, _lang_attrs: str):
        """
        Apply pygments syntax highlighting to the provided code, returning as
        HTML markup.
        """
        from pygments import highlight
        from pygments.formatters.html import HtmlFormatter
        from pygments.lexers import get_lexer_by_name
        from pygments.util import ClassNotFound
        try:
            lexer = get_lexer_by_name(lang)
        except ClassNotFound:
            return ''

        return highlight(code, lexer, HtmlFormatter(**self.pygments_params))

    def _build_processor(self):
        import markdown_it
        from mdit_py_plugins.attrs import attrs_block_plugin, attrs_plugin  # type: ignore[reportPrivateImportUsage]
        from mdit_py_plugins.container import container_plugin
        from mdit_py_plugins.tasklists import tasklists_plugin
        from .components import md_rendering

        processor = markdown_it.MarkdownIt(
            'commonmark',
            {
                'typographer': self.auto_typography,
                'linkify': True,
                'highlight': self.highlight_code if self.code_highlighting else None,
            },
            renderer_cls=md_rendering.SiteRendererHTML
        )
        processor.enable(['strikethrough', 'table', 'linkify'])
        if self.auto_typography:
            processor.enable(['smartquotes', 'replacements'])
        attrs_plugin(processor)
        attrs_block_plugin(processor)
        tasklists_plugin(processor)
        container_plugin(
            processor,
            md_rendering.FENCED_DIV_NAME,
            validate=lambda params, *args: True,
            render=md_rendering.render_fenced_div,
        )

        def convert(md_string: str) -> str:
            return processor.render(md_string)

        return convert

    def __call__(self, asset: Asset):
        if asset.ext != MARKDOWN_EXT:
            return

        asset.text = self.md_processor(asset.text)
        asset.path = asset.path[:-len(MARKDOWN_EXT)] + HTML_EXT
        logger.debug('Rendered markdown to %s', asset.path)
