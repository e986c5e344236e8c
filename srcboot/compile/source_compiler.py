"""The source compiler stage: enumerate a source tree and compile it in one batch."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path
from typing import IO, List, Optional, Type

from srcboot.errors import CompilationError
from srcboot.logging import get_logger

from .compiler import CompilationResult, Compiler
from .compilers import BytecodeCompiler
from .sources import list_source_files

logger = get_logger("SourceCompiler")

_COMPILER_PRIORITY: List[Type[Compiler]] = [BytecodeCompiler]
"""Compiler types in priority order for automatic selection."""


def get_compiler(source_suffix: str = ".py", warnings_as_errors: bool = True) -> Compiler:
    """Get the first available compiler that handles a source suffix.

    Parameters
    ----------
    source_suffix : str
        The file name suffix of the sources, including the dot.
    warnings_as_errors : bool
        Whether the compiler fails on warnings.

    Returns
    -------
    Compiler
        A compiler instance.

    Raises
    ------
    ValueError
        If no available compiler handles the suffix.
    """
    for compiler_type in _COMPILER_PRIORITY:
        if not compiler_type.is_available():
            continue
        compiler = compiler_type(warnings_as_errors=warnings_as_errors)
        if compiler.can_compile(source_suffix):
            return compiler
    raise ValueError(f"No available compiler for '{source_suffix}' source files")


def compile_source_tree(
    source_root: Path,
    output_dir: Path,
    source_suffix: str = ".py",
    warnings_as_errors: bool = True,
    compiler: Optional[Compiler] = None,
    stream: Optional[IO[str]] = None,
) -> CompilationResult:
    """Compile every source file under a root into an output directory.

    The compiler is not touched when the tree has no source file. Diagnostics of a failed
    compilation are written to ``stream`` as the toolchain reports them, and partial output is
    left in place.

    Parameters
    ----------
    source_root : Path
        The root of the source tree; also the root the artifact layout is relative to.
    output_dir : Path
        The artifacts directory.
    source_suffix : str
        The file name suffix of source files.
    warnings_as_errors : bool
        Whether a warning fails the build. Ignored when ``compiler`` is given.
    compiler : Optional[Compiler]
        The compiler to use. Defaults to :func:`get_compiler` for the suffix.
    stream : Optional[IO[str]]
        Where diagnostics are written. Defaults to ``sys.stderr``.

    Returns
    -------
    CompilationResult
        The successful compilation result.

    Raises
    ------
    NoSourceFoundError
        If the tree has no source file.
    CompilationError
        If the compiler reports any diagnostic.
    """
    source_root = Path(source_root).absolute()
    output_dir = Path(output_dir).absolute()
    sources = list_source_files(source_root, source_suffix)
    if compiler is None:
        compiler = get_compiler(source_suffix, warnings_as_errors)

    logger.info("Compiling %d file(s) from %s into %s", len(sources), source_root, output_dir)
    result = compiler.compile(sources, source_root, output_dir)

    if not result.success:
        stream = stream or sys.stderr
        for diagnostic in result.diagnostics:
            stream.write(diagnostic if diagnostic.endswith("\n") else diagnostic + "\n")
        count = len(result.diagnostics)
        stream.write(f"{count} error{'s' if count != 1 else ''}\n")
        stream.flush()
        raise CompilationError()

    # Directory listings cached by path finders may predate the artifacts just written.
    importlib.invalidate_caches()
    return result
