"""Compiler for Python sources into sourceless bytecode modules."""

from __future__ import annotations

import py_compile
import warnings
from importlib.machinery import BYTECODE_SUFFIXES, SOURCE_SUFFIXES
from pathlib import Path
from typing import ClassVar, List, Sequence

from srcboot.compile.compiler import CompilationResult, Compiler
from srcboot.compile.utils import artifact_path
from srcboot.logging import get_logger

logger = get_logger("BytecodeCompiler")


class BytecodeCompiler(Compiler):
    """Compiler for Python sources using the interpreter's own bytecode compiler.

    Each ``.py`` file is compiled to a ``.pyc`` file at the same relative location under the
    output directory. The artifacts are sourceless modules: the output directory can be put on
    an import path on its own, and tracebacks still point at the original source files.

    When ``warnings_as_errors`` is set, any warning emitted while compiling a file (for example
    ``SyntaxWarning`` for an invalid escape sequence or ``is`` with a literal) turns into a
    compilation failure of that file.
    """

    _SOURCE_SUFFIXES: ClassVar[List[str]] = list(SOURCE_SUFFIXES)
    """Suffixes of the sources this compiler accepts."""

    _ARTIFACT_SUFFIX: ClassVar[str] = BYTECODE_SUFFIXES[0]
    """Suffix of the written artifacts, ``.pyc``."""

    @staticmethod
    def is_available() -> bool:
        """The bytecode compiler is part of every interpreter.

        Returns
        -------
        bool
            Always True.
        """
        return True

    def can_compile(self, source_suffix: str) -> bool:
        return source_suffix in self._SOURCE_SUFFIXES

    def compile(
        self, sources: Sequence[Path], source_root: Path, output_dir: Path
    ) -> CompilationResult:
        """Compile Python sources into ``.pyc`` files under ``output_dir``.

        Parameters
        ----------
        sources : Sequence[Path]
            Absolute paths of the source files, all located under ``source_root``.
        source_root : Path
            The root of the source tree.
        output_dir : Path
            The artifacts directory. Created if missing.

        Returns
        -------
        CompilationResult
            The artifacts written and one diagnostic per file that failed to compile.
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        result = CompilationResult(output_dir=output_dir)

        for source in sources:
            target = artifact_path(source, source_root, output_dir, self._ARTIFACT_SUFFIX)
            try:
                self._compile_file(Path(source), target)
            except py_compile.PyCompileError as e:
                logger.debug("Failed to compile %s", source)
                result.diagnostics.append(e.msg)
            else:
                result.artifacts.append(target)

        return result

    def _compile_file(self, source: Path, target: Path) -> None:
        """Compile one file.

        Raises
        ------
        py_compile.PyCompileError
            If the file does not compile, or emits a warning while warnings are errors.
        """
        with warnings.catch_warnings():
            warnings.simplefilter("error" if self.warnings_as_errors else "default")
            py_compile.compile(str(source), cfile=str(target), dfile=str(source), doraise=True)
