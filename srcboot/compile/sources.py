"""Source tree enumeration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Tuple

from srcboot.errors import NoSourceFoundError
from srcboot.logging import get_logger

logger = get_logger("Sources")


def list_source_files(root: Path, suffix: str = ".py") -> List[Path]:
    """List the source files under a root directory.

    The walk is recursive and follows symbolic links. A linked directory is skipped only when it
    is one of its own ancestors, so link cycles terminate while several links to the same
    directory are all walked.

    Parameters
    ----------
    root : Path
        The source root.
    suffix : str
        File name suffix of source files, including the dot.

    Returns
    -------
    List[Path]
        Absolute paths of the regular files whose name ends with ``suffix``, sorted.

    Raises
    ------
    NoSourceFoundError
        If no source file is found (including when ``root`` does not exist).
    """
    root = Path(root).absolute()
    found: List[Path] = []
    top = str(root)
    # Real paths of the directories between the root and each directory still to be walked.
    ancestors: Dict[str, Tuple[str, ...]] = {top: (os.path.realpath(top),)}
    for dirpath, dirnames, filenames in os.walk(top, followlinks=True):
        chain = ancestors.pop(dirpath)
        kept = []
        for dirname in sorted(dirnames):
            child = os.path.join(dirpath, dirname)
            real = os.path.realpath(child)
            if real in chain:
                logger.debug("Skipping link cycle at %s", child)
                continue
            ancestors[child] = chain + (real,)
            kept.append(dirname)
        dirnames[:] = kept
        for filename in filenames:
            path = Path(dirpath) / filename
            if filename.endswith(suffix) and path.is_file():
                found.append(path)

    if not found:
        raise NoSourceFoundError(root)
    found.sort()
    logger.debug("Found %d source file(s) under %s", len(found), root)
    return found
