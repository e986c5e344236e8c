"""Resolution of the anchor directory from the launcher's own code origin.

The launcher can be deployed as a loose script (``python Boot.py``), as a directory run by the
interpreter or imported from ``sys.path`` (``python project/``), or as a zip application
(``python Boot.pyz``). Each form reports a different code origin; this module turns any of
them into the anchor location under which the fixed ``<ProgramName>/{src,classes}`` layout
lives::

    Boot.py                          -> ./Boot/
    python project/                  -> project/project/
    Boot imported from project/      -> project/Boot/
    Boot.pyz                         -> ./Boot/
"""

from __future__ import annotations

import sys
import zipimport
from pathlib import Path, PurePosixPath
from types import ModuleType
from typing import Callable, Dict, Optional
from urllib.parse import unquote, urlsplit
from urllib.request import url2pathname

from .errors import NotLocalFileError
from .logging import get_logger
from .utils import BaseModelWithDocstrings, NonEmptyString

logger = get_logger("Location")

_FILE_SCHEME = "file"
_LOCAL_HOSTS = ("", "localhost")


def code_origin(module: ModuleType) -> Path:
    """Return where the code of a module was loaded from.

    Parameters
    ----------
    module : ModuleType
        The anchor module, typically ``sys.modules["__main__"]``.

    Returns
    -------
    Path
        The zip archive for modules imported from an archive, the script file for a module run
        as a script, and the ``sys.path`` entry the module was imported from otherwise (which
        is a directory).

    Raises
    ------
    ValueError
        If the module has no file location (e.g. built-in or interactive modules).
    """
    loader = getattr(module, "__loader__", None)
    if isinstance(loader, zipimport.zipimporter):
        return Path(loader.archive).absolute()

    file = getattr(module, "__file__", None)
    if not file:
        raise ValueError(f"Module {module.__name__!r} has no code location")
    file_path = Path(file).absolute()

    spec = getattr(module, "__spec__", None)
    if spec is None:
        # Run as a script: the file itself is the origin.
        return file_path

    root = file_path.parent
    if file_path.stem == "__init__":
        root = root.parent
    for _ in range(spec.name.count(".")):
        root = root.parent
    return root


def code_origin_uri(module: ModuleType) -> str:
    """``file:`` URI of :func:`code_origin`."""
    return code_origin(module).as_uri()


def anchor_name(module: ModuleType) -> str:
    """Simple name of the anchor program.

    This is the last component of the module name, or, for ``__main__``, the stem of the script
    (``Boot.py`` -> ``Boot``) or of the directory/archive it was run from.
    """
    spec = getattr(module, "__spec__", None)
    name = (spec.name if spec is not None else module.__name__).rpartition(".")[2]
    if name in ("__main__", "__init__"):
        file = getattr(module, "__file__", None)
        name = Path(file).stem if file else ""
        if name in ("", "__main__", "__init__"):
            name = code_origin(module).stem
    return name


def normalize_file_uri(uri: str) -> str:
    """Rewrite a ``file:`` URI that carries a host authority into its UNC form.

    ``file://server/share/dir`` becomes ``file:////server/share/dir`` so that the host ends up
    in the path. URIs without a host (or with ``localhost``) are returned unchanged, and so is
    any URI that cannot be parsed.

    Parameters
    ----------
    uri : str
        A ``file:`` URI.

    Returns
    -------
    str
        The normalized URI.
    """
    try:
        authority = urlsplit(uri).netloc
        if authority.lower() in _LOCAL_HOSTS:
            return uri
        scheme, sep, rest = uri.partition(":")
        if not sep or not rest.startswith("//"):
            return uri
        return f"{scheme}://{rest}"
    except ValueError:
        logger.debug("Could not normalize URI %s, using it unchanged", uri, exc_info=True)
        return uri


def to_file_path(uri: str) -> Path:
    """Convert a ``file:`` URI into an absolute local path.

    Parameters
    ----------
    uri : str
        The code origin URI.

    Returns
    -------
    Path
        The absolute path the URI refers to.

    Raises
    ------
    NotLocalFileError
        If the URI scheme is not ``file``.
    """
    scheme, sep, rest = uri.partition(":")
    if not sep or scheme.lower() != _FILE_SCHEME:
        raise NotLocalFileError(scheme if sep else None)
    try:
        path = urlsplit(normalize_file_uri(uri)).path
    except ValueError:
        logger.debug("Malformed file URI %s, converting it verbatim", uri, exc_info=True)
        path = rest
    if path.startswith("//"):
        # UNC path: the host is the first path component.
        return Path(unquote(path)).absolute()
    return Path(url2pathname(path)).absolute()


def _base_of_file(origin: Path) -> Path:
    return origin.parent


def _base_of_directory(origin: Path) -> Path:
    return origin


_BASE_STRATEGIES: Dict[bool, Callable[[Path], Path]] = {
    True: _base_of_file,
    False: _base_of_directory,
}
"""Base directory of the anchor keyed by "the origin is a regular file". Loose scripts and
archives are regular files; directories of compiled units are not."""


def resolve_anchor_location(origin_uri: str, program_name: str) -> Path:
    """Resolve the anchor location ``<base>/<program_name>``.

    Parameters
    ----------
    origin_uri : str
        The launcher's code origin as a ``file:`` URI.
    program_name : str
        Simple name of the anchor program.

    Returns
    -------
    Path
        The absolute anchor location.

    Raises
    ------
    NotLocalFileError
        If the origin is not a ``file:`` URI.
    """
    origin = to_file_path(origin_uri)
    base = _BASE_STRATEGIES[origin.is_file()](origin)
    location = base / program_name
    logger.debug("Resolved anchor %s from origin %s", location, origin)
    return location


class Anchor(BaseModelWithDocstrings):
    """The launcher whose code origin roots the program layout."""

    origin: NonEmptyString
    """Code origin of the launcher, as a URI."""
    name: NonEmptyString
    """Simple name of the launcher, used as the program directory name."""

    @classmethod
    def from_module(cls, module: ModuleType) -> "Anchor":
        """Anchor for a loaded module, e.g. the ``__main__`` module of a launcher script."""
        return cls(origin=code_origin_uri(module), name=anchor_name(module))

    @classmethod
    def from_main(cls) -> "Anchor":
        """Anchor for the ``__main__`` module of the running process."""
        return cls.from_module(sys.modules["__main__"])

    @classmethod
    def from_path(cls, location: str) -> "Anchor":
        """Anchor for a filesystem path or a URI naming the launcher's location.

        A value containing ``://`` or starting with ``file:`` is taken as a URI, anything else
        as a local path.
        """
        if "://" in location or location.lower().startswith(f"{_FILE_SCHEME}:"):
            origin = location
            name = PurePosixPath(unquote(urlsplit(location).path)).stem
        else:
            path = Path(location).absolute()
            origin = path.as_uri()
            name = path.stem
        return cls(origin=origin, name=name)

    def location(self, program_name: Optional[str] = None) -> Path:
        """Anchor location, optionally with a program name overriding :attr:`name`."""
        return resolve_anchor_location(self.origin, program_name or self.name)
