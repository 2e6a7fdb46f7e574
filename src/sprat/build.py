"""
The Build class, which owns an Assets collection for one pass from source to
output, and the settings that describe it.
"""
from __future__ import annotations

import logging
import shutil
import typing as t
from pathlib import Path

from . import collect, sitemap
from .core import Assets, FilterFunc, Transformer, TransformerUnavailableException, TransformFunc
from .pretty_utils import track_progress


logger = logging.getLogger(__name__)


class InputBuildSettings(t.TypedDict, total=False):
    """
    TypedDict for defining build settings in a Sprat config file.
    """
    input_dir: Path
    output_dir: Path
    include_root: bool
    git_url: str | None
    git_branch: str
    base_url: str | None
    robots: list[str] | None
    purge_dirs: bool


class BuildSettings(t.TypedDict):
    """
    TypedDict for processed build settings ready for passing to Build.
    """
    input_dir: Path
    output_dir: Path
    include_root: bool
    git_url: str | None
    git_branch: str
    base_url: str | None
    robots: list[str] | None
    purge_dirs: bool


def _rm_children(path: Path):
    if not path.exists():
        return
    for child in path.iterdir():
        if child.is_dir():
            shutil.rmtree(child)
        else:
            child.unlink()


class Build:
    """
    A single build: collects Assets, runs them through Transformers in order,
    appends generated Assets, and writes the result.

    Subclasses can override `process()` to divert subsets of the collection
    with `Assets.pop()` before transforming.
    """
    def __init__(self,
                 settings: BuildSettings,
                 transformers: list[Transformer | TransformFunc] | None = None):
        self.settings = settings
        self.assets = Assets()
        self.transformers: list[Transformer | TransformFunc] = []
        for transformer in transformers or []:
            self.check(transformer)
            self.transformers.append(transformer)

    def __getitem__(self, key: str):
        return self.settings[key]

    def check(self, transformer: Transformer | TransformFunc):
        """
        Ensure a Transformer's requirements are installed.
        """
        if isinstance(transformer, Transformer) and not transformer.is_available():
            raise TransformerUnavailableException(transformer)

    def from_dir(self, root: Path, include_root: bool = False):
        """
        Add every file beneath @root to this build.
        """
        self.assets.extend(collect.from_dir(root, include_root))

    def from_git(self, url: str, branch: str, out_dir: str):
        """
        Add every file on @branch of the repository at @url to this build,
        beneath the virtual directory @out_dir.
        """
        self.assets.extend(collect.from_git(url, branch, out_dir))

    def add_sitemap(self, base_url: str, *filters: FilterFunc):
        """
        Append a sitemap of this build's Assets. Does nothing for an empty
        build.
        """
        if asset := sitemap.build_sitemap(self.assets, base_url, *filters):
            self.assets.append(asset)

    def add_robots_txt(self, *lines: str):
        """
        Append a robots.txt to this build. Does nothing for an empty build.
        """
        if asset := sitemap.build_robots_txt(self.assets, *lines):
            self.assets.append(asset)

    def collect(self):
        """
        Overridable method to populate the build from its configured source.
        """
        if git_url := self['git_url']:
            self.from_git(git_url, self['git_branch'], self['input_dir'].name)
        else:
            self.from_dir(self['input_dir'], self['include_root'])

    def process(self):
        """
        Overridable method to run the build's Assets through its Transformers.
        """
        for transformer in track_progress(self.transformers, 'Transforming...'):
            self.assets.transform(transformer)

    def generate(self):
        """
        Overridable method to append generated Assets once processing is done.
        """
        if base_url := self['base_url']:
            self.add_sitemap(base_url)
        if (robots := self['robots']) is not None:
            self.add_robots_txt(*robots)

    def run(self):
        """
        Execute a full build: purge, collect, process, generate, and write.
        """
        if self['purge_dirs']:
            _rm_children(self['output_dir'])
        self.collect()
        self.process()
        self.generate()
        self.assets.write(self['output_dir'])
