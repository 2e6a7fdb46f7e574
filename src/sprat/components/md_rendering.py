"""
An extended commonmark renderer based on markdown-it-py.
"""
from __future__ import annotations

import typing as t

from markdown_it.common.utils import escapeHtml, unescapeAll
from markdown_it.renderer import RendererHTML

if t.TYPE_CHECKING:
    from collections.abc import Sequence
    from markdown_it.token import Token
    from markdown_it.utils import EnvType, OptionsDict


COPY_BUTTON = '<figcaption><button class="copycode" disabled>Copy</button></figcaption>'


def open_code_figure(lang: str):
    """
    Opening markup for a code block, with the copy button caption.
    """
    lang_attr = f' data-lang="{escapeHtml(lang)}"' if lang else ''
    return f'<figure class="codeblock"{lang_attr}>{COPY_BUTTON}'


def close_code_figure():
    return '</figure>'


class SiteRendererHTML(RendererHTML):
    """
    A customized markdown-it-py HTML renderer which wraps code blocks in a
    `<figure>` with a copy button, and hands fences with a language to the
    configured highlighter.
    """
    # https://github.com/executablebooks/markdown-it-py/issues/256
    def fence(self, tokens: Sequence[Token], idx: int, options: OptionsDict, env: EnvType):
        token = tokens[idx]
        info = unescapeAll(token.info).strip() if token.info else ''
        lang_name = info.split(maxsplit=1)[0] if info else ''

        highlighted = ''
        if lang_name and options.highlight:
            highlighted = options.highlight(token.content, lang_name, '') or ''

        if highlighted:
            body = highlighted
        else:
            body = f'<pre class="chroma"><code>{escapeHtml(token.content)}</code></pre>'

        return open_code_figure(lang_name) + body + close_code_figure() + '\n'

    def code_block(self, tokens: Sequence[Token], idx: int, options: OptionsDict, env: EnvType):
        content = escapeHtml(tokens[idx].content)
        return open_code_figure('') + f'<pre class="chroma"><code>{content}</code></pre>' + close_code_figure() + '\n'


FENCED_DIV_NAME = 'div'


def fenced_div_attrs(info: str):
    """
    Parse the text after a `:::` marker into `(id, classes)`. Accepts either
    bare class names (`::: note wide`) or an attribute block
    (`::: {#tip .note}`).
    """
    info = info.strip()
    if info.startswith('{') and info.endswith('}'):
        element_id = ''
        classes = []
        for part in info[1:-1].split():
            if part.startswith('#'):
                element_id = part[1:]
            elif part.startswith('.'):
                classes.append(part[1:])
        return element_id, classes
    return '', info.split()


def render_fenced_div(self: RendererHTML, tokens: Sequence[Token], idx: int, options: OptionsDict, env: EnvType):
    token = tokens[idx]
    if token.nesting != 1:
        return '</div>\n'

    element_id, classes = fenced_div_attrs(token.info)
    attrs = ''
    if element_id:
        attrs += f' id="{escapeHtml(element_id)}"'
    if classes:
        attrs += f' class="{escapeHtml(" ".join(classes))}"'
    return f'<div{attrs}>\n'
