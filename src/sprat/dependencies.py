"""
Availability checks for the third-party packages and executables that
transformers and collectors need at run time.
"""
from __future__ import annotations

import abc
import importlib
import shutil


class Dependency(abc.ABC):
    """
    Something a Transformer or collector needs before it can run.
    """
    @property
    @abc.abstractmethod
    def satisfied(self) -> bool:
        ...

    @property
    @abc.abstractmethod
    def install_hint(self) -> str:
        ...

    def __repr__(self):
        state = 'ok' if self.satisfied else 'missing'
        return f'<{self.__class__.__name__} {self} ({state})>'


class PipDependency(Dependency):
    """
    A package installed from the Python package index. @check_name is the
    module imported to detect it, for packages like `tdewolff-minify` whose
    import name differs.
    """
    def __init__(self, name: str, check_name: str | None = None):
        self.name = name
        self.check_name = check_name or name

    def __str__(self):
        return self.name

    @property
    def satisfied(self):
        try:
            importlib.import_module(self.check_name)
        except ImportError:
            return False
        return True

    @property
    def install_hint(self):
        return f'pip install {self.name}'


class WebExecDependency(Dependency):
    """
    An executable looked up on the PATH, e.g. `git`.
    """
    def __init__(self, name: str, source: str | None = None):
        self.name = name
        self.source = source

    def __str__(self):
        return self.name

    @property
    def satisfied(self):
        return shutil.which(self.name) is not None

    @property
    def install_hint(self):
        if self.source:
            return f'install {self.name} from {self.source}'
        return f'install {self.name} and make sure it is on your PATH'
