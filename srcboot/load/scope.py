"""Isolated module-loading scope rooted at a compiled artifacts directory.

Python has a single, process-wide import system, so a scope is realised by temporarily
reshaping it while the program runs:

- a meta path finder placed first on ``sys.meta_path`` resolves top-level names from the
  artifacts directory before anything else;
- ``sys.path`` is narrowed to the parent scope, which is the launcher's import path without the
  launcher's own entries, so the program sees the standard library and installed
  distributions but not the launcher's private modules;
- modules already imported under a name the artifacts provide are set aside so the program
  gets its own.

Uninstalling the scope reverts all three.
"""

from __future__ import annotations

import importlib
import os
import sys
from importlib.abc import MetaPathFinder
from importlib.machinery import BYTECODE_SUFFIXES, ModuleSpec, PathFinder
from pathlib import Path
from types import ModuleType
from typing import Dict, Iterable, List, Optional, Sequence, Set

from srcboot.logging import get_logger

logger = get_logger("ProgramScope")


def launcher_private_entries(origin: Path) -> List[Path]:
    """Import path entries that belong to the launcher itself.

    For a loose script or an archive these are the file and its directory (the interpreter
    puts the script's directory, or the archive, first on ``sys.path``). For a directory
    origin it is the directory.
    """
    origin = Path(origin).absolute()
    if origin.is_file():
        return [origin, origin.parent]
    return [origin]


def parent_scope_path(
    private_entries: Iterable[Path] = (), path: Optional[Sequence[str]] = None
) -> List[str]:
    """The import path one level above the launcher's own.

    Parameters
    ----------
    private_entries : Iterable[Path]
        Entries that belong to the launcher, see :func:`launcher_private_entries`.
    path : Optional[Sequence[str]]
        The launcher's import path. Defaults to ``sys.path``.

    Returns
    -------
    List[str]
        ``path`` without the launcher's entries and without the current-directory entry.
    """
    private = {os.path.realpath(str(entry)) for entry in private_entries}
    parent: List[str] = []
    for entry in sys.path if path is None else path:
        if not entry or entry == os.curdir:
            continue
        if os.path.realpath(entry) in private:
            continue
        parent.append(entry)
    return parent


def _top_level(name: str) -> str:
    return name.partition(".")[0]


def _provided_names(root: Path) -> Set[str]:
    """Top-level module and package names present in an artifacts directory."""
    names: Set[str] = set()
    if not root.is_dir():
        return names
    for child in root.iterdir():
        if child.is_dir() and child.name.isidentifier():
            names.add(child.name)
        elif child.suffix in BYTECODE_SUFFIXES and child.stem.isidentifier():
            names.add(child.stem)
    return names


class ProgramScope(MetaPathFinder):
    """A module-loading scope resolving from an artifacts directory first.

    The scope is inactive until installed, either with :meth:`install` / :meth:`uninstall` or
    as a context manager.
    """

    root: Path
    """The compiled artifacts directory."""

    parent_path: List[str]
    """The import path of the parent scope, searched for names the artifacts do not provide."""

    def __init__(self, root: Path, parent_path: Optional[Sequence[str]] = None) -> None:
        self.root = Path(root).absolute()
        self.parent_path = list(sys.path if parent_path is None else parent_path)
        self._installed = False
        self._names: Set[str] = set()
        self._saved_path: Optional[List[str]] = None
        self._saved_modules: Dict[str, ModuleType] = {}

    @property
    def installed(self) -> bool:
        return self._installed

    def find_spec(
        self,
        fullname: str,
        path: Optional[Sequence[str]] = None,
        target: Optional[ModuleType] = None,
    ) -> Optional[ModuleSpec]:
        # Submodules are found through their package's __path__ by the regular finders.
        if not self._installed or path is not None:
            return None
        spec = PathFinder.find_spec(fullname, [str(self.root)])
        if spec is not None:
            logger.debug("Resolved %s from %s", fullname, self.root)
        return spec

    def install(self) -> "ProgramScope":
        """Activate the scope. Installing an active scope does nothing."""
        if self._installed:
            return self
        self._names = _provided_names(self.root)
        self._saved_path = list(sys.path)
        for name in list(sys.modules):
            if _top_level(name) in self._names:
                self._saved_modules[name] = sys.modules.pop(name)

        sys.path[:] = self.parent_path
        sys.path_importer_cache.pop(str(self.root), None)
        sys.meta_path.insert(0, self)
        importlib.invalidate_caches()
        self._installed = True
        logger.debug(
            "Installed scope %s providing %s", self.root, ", ".join(sorted(self._names)) or "-"
        )
        return self

    def uninstall(self) -> None:
        """Deactivate the scope and drop the modules loaded from it. Idempotent."""
        if not self._installed:
            return
        self._installed = False
        if self in sys.meta_path:
            sys.meta_path.remove(self)
        for name in list(sys.modules):
            if _top_level(name) in self._names:
                del sys.modules[name]
        sys.modules.update(self._saved_modules)
        self._saved_modules.clear()
        if self._saved_path is not None:
            sys.path[:] = self._saved_path
            self._saved_path = None
        importlib.invalidate_caches()
        logger.debug("Uninstalled scope %s", self.root)

    def __enter__(self) -> "ProgramScope":
        return self.install()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.uninstall()

    def __repr__(self) -> str:
        return f"ProgramScope(root={str(self.root)!r}, installed={self._installed})"
