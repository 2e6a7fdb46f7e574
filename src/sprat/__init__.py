"""
Sprat is a small in-memory asset pipeline for static websites: collect files,
run them through an ordered chain of transformers, and write them out.
"""
from .build import Build, BuildSettings, InputBuildSettings
from .core import (
    Asset, Assets, AssetPathError, SpratError, Transformer, TransformError, TransformerUnavailableException,
    normalize_path,
)
from .collect import GitCloneError, from_dir, from_git
from .encryption import EncryptionError, EncryptionTransformer, StorageMode, random_salt
from .filters import (
    Filter, with_extensions, with_meta, with_mime_type, with_parent_dir, with_path,
    without_extensions, without_meta, without_mime_type, without_parent_dir, without_path,
)
from .frontmatter import FrontmatterError, FrontmatterTransformer
from .jinja import TemplateError, TemplateTransformer, WrapperTemplate
from .markdown import MarkdownTransformer
from .minify import Minifier, MinifyError, MinifyTransformer
from .simple import AutoReloadTransformer, ReplaceTransformer
