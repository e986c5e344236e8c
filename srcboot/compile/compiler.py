"""Abstract base class for compiler toolchains."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Sequence

from pydantic import Field

from srcboot.utils import BaseModelWithDocstrings


class CompilationResult(BaseModelWithDocstrings):
    """Outcome of compiling a source tree in one batch."""

    output_dir: Path
    """The directory the artifacts were written to."""
    artifacts: List[Path] = Field(default_factory=list)
    """Paths of the artifacts written, in source order."""
    diagnostics: List[str] = Field(default_factory=list)
    """Error messages reported by the toolchain, in source order."""

    @property
    def success(self) -> bool:
        """Whether the whole batch compiled without any diagnostic."""
        return not self.diagnostics


class Compiler(ABC):
    """Abstract base class for compiling a source tree into loadable artifacts.

    A Compiler takes every source file of a tree at once and writes the artifacts under an
    output directory, mirroring the layout of the tree below the source root so that modules
    referring to each other resolve the same way from the artifacts as from the sources.

    Subclasses must implement all its abstract methods.
    """

    def __init__(self, warnings_as_errors: bool = True) -> None:
        """Initialize the compiler.

        Parameters
        ----------
        warnings_as_errors : bool
            Whether any warning emitted while compiling fails the build.
        """
        self._warnings_as_errors = warnings_as_errors

    @property
    def warnings_as_errors(self) -> bool:
        return self._warnings_as_errors

    @staticmethod
    @abstractmethod
    def is_available() -> bool:
        """Check if this compiler is available in the current environment.

        Returns
        -------
        bool
            True if the compiler can be used, False otherwise.
        """
        ...

    @abstractmethod
    def can_compile(self, source_suffix: str) -> bool:
        """Check if this compiler handles source files with the given suffix.

        Parameters
        ----------
        source_suffix : str
            The file name suffix, including the dot (e.g. ``".py"``).

        Returns
        -------
        bool
            True if this compiler can compile such files, False otherwise.
        """
        ...

    @abstractmethod
    def compile(
        self, sources: Sequence[Path], source_root: Path, output_dir: Path
    ) -> CompilationResult:
        """Compile a batch of source files.

        Every file is attempted even after a failure so that all diagnostics of the batch are
        reported together. Artifacts of files that compiled are kept even when others failed.

        Parameters
        ----------
        sources : Sequence[Path]
            Absolute paths of the source files, all located under ``source_root``.
        source_root : Path
            The root of the source tree; artifact paths are relative to it.
        output_dir : Path
            The directory to write the artifacts to. Created if missing.

        Returns
        -------
        CompilationResult
            The artifacts written and the diagnostics of the failed files.
        """
        ...
