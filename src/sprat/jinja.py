"""
Transformer for rendering Assets as Jinja templates, optionally inside a
shared wrapper layout.
"""
from __future__ import annotations

import typing as t

from .core import Asset, MetaDict, Transformer, TransformError, path_ext
from .dependencies import PipDependency

if t.TYPE_CHECKING:
    from jinja2 import Environment


GLOBAL_KEY = 'Global'
ASSET_KEY = 'Asset'
WRAPPER_KEY = 'WrapperTemplate'


class TemplateError(TransformError):
    """
    Raised when an Asset, component, or wrapper fails to compile or render.
    """


class WrapperTemplate:
    """
    A layout Asset that wraps other Assets. The wrapped Asset's content is
    made available to the layout as the template named @child_block_name.
    """
    def __init__(self, template: Asset | None, child_block_name: str = 'content'):
        self.template = template
        self.child_block_name = child_block_name


class TemplateTransformer(Transformer):
    """
    Renders each Asset's payload with Jinja.

    The template context holds the Asset's metadata at the top level and
    under `Asset`, plus the read-only global data under `Global`. Components
    are named templates, available through `{% include "name" %}` to Assets
    sharing their file extension.
    """
    @classmethod
    def get_dependencies(cls):
        return {
            PipDependency('jinja2'),
        }

    def __init__(self,
                 components: dict[str, Asset] | None = None,
                 global_data: dict[str, t.Any] | None = None,
                 wrapper: WrapperTemplate | None = None,
                 env: Environment | None = None,
                 autoescape: bool = False):
        """
        :param components: Named Assets usable as sub-templates.
        :param global_data: Data exposed to every template as `Global`.
        :param wrapper: An optional layout to render every Asset inside of.
        :param env: A custom Jinja2 `Environment`, overlaid for each Asset so
            its filters, tests and globals stay available.
        :param autoescape: Whether a default environment autoescapes.
        """
        self.components = components or {}
        self.global_data = global_data or {}
        self.wrapper = wrapper
        self.autoescape = autoescape
        self._env = env

    @property
    def env(self):
        """
        Returns the base Jinja `Environment` for this Transformer, creating
        and caching it if necessary.
        """
        if self._env:
            return self._env

        from jinja2 import Environment
        self._env = Environment(autoescape=self.autoescape, keep_trailing_newline=True)
        return self._env

    def build_env(self, templates: dict[str, str]):
        from jinja2 import DictLoader
        return self.env.overlay(loader=DictLoader(templates))

    def __call__(self, asset: Asset):
        from jinja2 import TemplateError as JinjaTemplateError

        meta: MetaDict = asset.meta or {}
        if meta.get(GLOBAL_KEY) is not None:
            raise TemplateError(asset.path, f'metadata cannot contain reserved key {GLOBAL_KEY!r}')

        ext = path_ext(asset.path)
        wrapper_meta: MetaDict = {}
        context: dict[str, t.Any] = {}
        if self.wrapper:
            if not self.wrapper.template:
                raise TemplateError(asset.path, 'wrapper template is required')
            wrapper_meta = self.wrapper.template.meta or {}
            context.update(wrapper_meta)
            context[WRAPPER_KEY] = wrapper_meta
        context.update(meta)
        context[ASSET_KEY] = meta
        context[GLOBAL_KEY] = self.global_data

        try:
            templates = {
                name: component.text
                for name, component in self.components.items()
                if path_ext(component.path) == ext
            }
            if self.wrapper:
                templates[self.wrapper.child_block_name] = asset.text
                source = self.wrapper.template.text
            else:
                source = asset.text

            env = self.build_env(templates)
            for name in templates:
                env.get_template(name)
            asset.text = env.from_string(source).render(context)
        except UnicodeDecodeError as e:
            raise TemplateError(asset.path, f'template is not valid UTF-8: {e}') from e
        except JinjaTemplateError as e:
            raise TemplateError(asset.path, f'template failed: {e}') from e

        # The wrapped asset inherits the wrapper's metadata under its own.
        if self.wrapper and asset.meta is not None:
            asset.meta = {**wrapper_meta, **asset.meta}
