"""Utility functions for compiling source trees."""

from __future__ import annotations

from pathlib import Path


def artifact_path(source: Path, source_root: Path, output_dir: Path, suffix: str) -> Path:
    """Compute where the artifact of a source file is written.

    The artifact keeps the source's path relative to the source root and swaps its suffix::

        <source_root>/pkg/mod.py -> <output_dir>/pkg/mod.pyc

    Parameters
    ----------
    source : Path
        The source file. Must be located under ``source_root``.
    source_root : Path
        The root of the source tree.
    output_dir : Path
        The artifacts directory.
    suffix : str
        The artifact suffix, including the dot.

    Returns
    -------
    Path
        The artifact path.

    Raises
    ------
    ValueError
        If ``source`` is not located under ``source_root``.
    """
    relative = Path(source).relative_to(source_root)
    return Path(output_dir) / relative.with_suffix(suffix)
