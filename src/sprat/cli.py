"""
This is the toolkit for Sprat's own CLI, but offers an accessible API for
building project-specific CLIs.
"""
from __future__ import annotations

import argparse
import importlib
import runpy
import sys
import typing as t
from pathlib import Path

from .build import Build, BuildSettings, InputBuildSettings
from .core import SpratError, Transformer, TransformerUnavailableException, TransformFunc
from .pretty_utils import print_with_style, setup_logging


class BuildNamespace:
    """
    Internal used to preserve typing between InputBuildSettings, argparse, and
    BuildSettings.
    """
    input_dir: Path
    output_dir: Path
    include_root: bool
    git_url: str | None
    git_branch: str
    base_url: str | None
    robots: list[str] | None
    purge_dirs: bool

    def __init__(self, settings: InputBuildSettings | None = None):
        self.robots = None
        if settings:
            self.__dict__.update(settings)

    def to_build_settings(self):
        """
        Convert this argparse-oriented namespace into a Build-ready
        BuildSettings.
        """
        return BuildSettings(
            input_dir=self.input_dir,
            output_dir=self.output_dir,
            include_root=self.include_root,
            git_url=self.git_url,
            git_branch=self.git_branch,
            base_url=self.base_url,
            robots=self.robots,
            purge_dirs=self.purge_dirs,
        )


def parse_settings_args(settings: InputBuildSettings | None = None, argv: list[str] | None = None, **kw):
    """
    Internal function used by `run_from_transformers()` to combine an
    instance of InputBuildSettings with CLI arguments to produce a
    BuildNamespace, which can be easily turned into BuildSettings. Values from
    @settings act as defaults which the command line overrides.
    """
    defaults: dict[str, t.Any] = {
        'input_dir': Path('site'),
        'output_dir': Path('output'),
        'include_root': False,
        'git_url': None,
        'git_branch': 'main',
        'base_url': None,
        'purge_dirs': False,
    }
    defaults.update(settings or {})
    namespace = BuildNamespace(settings)

    parser = argparse.ArgumentParser(**kw)
    parser.add_argument('-i', '--input',
                        help='input directory with raw files to collect',
                        type=Path,
                        dest='input_dir',
                        default=defaults['input_dir'])
    parser.add_argument('-o', '--output',
                        help='output directory for final built files',
                        type=Path,
                        dest='output_dir',
                        default=defaults['output_dir'])
    parser.add_argument('--include-root',
                        help="prefix virtual paths with the input directory's name",
                        action=argparse.BooleanOptionalAction,
                        default=defaults['include_root'])
    parser.add_argument('--git-url',
                        help='collect from a git repository instead of the input directory',
                        default=defaults['git_url'])
    parser.add_argument('--git-branch',
                        help='branch to clone with --git-url',
                        default=defaults['git_branch'])
    parser.add_argument('--base-url',
                        help='generate a sitemap.xml for this site URL',
                        default=defaults['base_url'])
    parser.add_argument('--purge',
                        help='purge the output directory before building',
                        action=argparse.BooleanOptionalAction,
                        dest='purge_dirs',
                        default=defaults['purge_dirs'])

    return parser.parse_args(argv, namespace=namespace)


def run_from_transformers(settings: InputBuildSettings | None,
                          transformers: list[Transformer | TransformFunc],
                          build_cls: t.Type[Build] = Build,
                          **kw):
    """
    Build a new Build from Settings, Transformers, and command line
    arguments. Then, execute it. A custom Build class may be additionally
    supplied.
    """
    final_settings = parse_settings_args(settings, **kw)
    build = build_cls(final_settings.to_build_settings(), transformers)
    build.run()
    return build


def pprint_transformer(transformer: t.Type[Transformer]):
    """
    Prettily display dependency information for the given Transformer class.
    """
    missing = [str(d) for d in transformer.get_dependencies() if not d.satisfied]
    if missing:
        text = ', '.join(missing)
        print_with_style(f'✗ {transformer.__name__} (missing: {text})', style='red')
    else:
        print_with_style(f'✓ {transformer.__name__}', style='green')


def pprint_missing_deps(transformer: Transformer):
    """
    Prettily display an error for the given Transformer with missing
    dependencies.
    """
    print_with_style(
        f'{transformer} is unavailable due to missing dependencies!',
        file='stderr',
        style='red'
    )
    for dep in transformer.get_dependencies():
        if dep.satisfied:
            print_with_style(f'✓ {dep}', style='green')
        else:
            print_with_style(f'✗ {dep}: {dep.install_hint}', style='red')


def main(arguments: list[str] | None = None):
    """
    Sprat main function. Loads a Sprat config file, combines it with command
    line arguments, then executes a build.
    """
    parser = argparse.ArgumentParser(description='Build a sprat project.')
    parser.add_argument('--audit-transformers',
                        help=('show information about available, unavailable, '
                              'and used transformers, instead of building the project'),
                        action='store_true')
    parser.add_argument('-v', '--verbose',
                        help='show debug logging',
                        action='store_true')
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument('-m',
                       help='import path of a config file to build',
                       type=importlib.import_module,
                       dest='module',
                       default=None)
    group.add_argument('config_file',
                       nargs='?',
                       help='file path to a config file to build',
                       type=Path,
                       default=None)

    args, remaining = parser.parse_known_args(arguments)
    setup_logging(args.verbose)

    if args.config_file:
        label = str(args.config_file)
        namespace: dict[str, t.Any] = runpy.run_path(label)
    else:
        label = f'-m {args.module.__name__}'
        namespace = vars(args.module)

    settings: InputBuildSettings | None = namespace.get('SETTINGS')
    transformers: list[Transformer | TransformFunc] | None = namespace.get('TRANSFORMERS')
    build_cls: t.Type[Build] = namespace.get('BUILD_CLASS', Build)

    if transformers is None:
        print_with_style(
            'Sprat config files must have a TRANSFORMERS attribute!',
            file='stderr',
            style='red'
        )
        sys.exit(1)

    if args.audit_transformers:
        all_transformers = set(Transformer.get_all_transformers())
        available = set(Transformer.get_available_transformers())
        groups = {
            'Available transformers': available,
            'Unavailable transformers': all_transformers - available,
            'Used transformers': {tr.__class__ for tr in transformers if isinstance(tr, Transformer)},
        }
        for group_label, transformer_group in groups.items():
            print(f'{group_label} ({len(transformer_group)})')
            for transformer in sorted(transformer_group, key=lambda c: c.__name__):
                pprint_transformer(transformer)
        return

    try:
        run_from_transformers(settings, transformers, build_cls, argv=remaining, prog=f'sprat {label}')
    except TransformerUnavailableException as e:
        pprint_missing_deps(e.transformer)
        sys.exit(1)
    except (SpratError, OSError) as e:
        print_with_style(f'Build failed: {e}', file='stderr', style='red')
        sys.exit(1)
