"""Program wrapper for a loaded and validated entry point."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

from pydantic import Field

from srcboot.load.loader import Binding, EntryCallable
from srcboot.utils import BaseModelWithDocstrings

from .invoker import invoke_entry


class ProgramMetadata(BaseModelWithDocstrings):
    """Metadata about a loaded program.

    Records where the program was compiled to and which entry callable will be invoked.
    """

    program_name: str
    """Name of the program directory under the anchor location."""
    entry_point: str
    """The entry point as configured, ``<module>::<function>``."""
    description: str
    """Description of the resolved entry callable, including its signature."""
    binding: Binding
    """How the entry callable is bound to its owner."""
    artifacts_dir: Path
    """Directory of the compiled artifacts the program is loaded from."""
    misc: Dict[str, Any] = Field(default_factory=dict)
    """Miscellaneous metadata, e.g. ``compiled_files``, the number of artifacts written."""


class Program:
    """An executable wrapper around the entry callable of a compiled program.

    A Program holds the validated entry callable, metadata about how it was loaded, and a
    cleaner that releases the module-loading scope the program runs in.
    """

    metadata: ProgramMetadata
    """Metadata about the program and its entry callable."""

    _entry: EntryCallable
    """The validated entry callable."""
    _cleaner: Optional[Callable[[], None]]
    """Optional cleanup function releasing the program's loading scope."""

    def __init__(
        self,
        entry: EntryCallable,
        metadata: ProgramMetadata,
        cleaner: Optional[Callable[[], None]] = None,
    ) -> None:
        """Constructor for the Program class.

        Parameters
        ----------
        entry : EntryCallable
            The entry callable. Must have passed ``validate_entry``.
        metadata : ProgramMetadata
            The metadata for the program.
        cleaner : Optional[Callable[[], None]]
            Function releasing the resources held by the program.
        """
        self._entry = entry
        self.metadata = metadata
        self._cleaner = cleaner

    def __call__(self, argv: Sequence[str]) -> None:
        """Run the program with an argument vector.

        Parameters
        ----------
        argv : Sequence[str]
            The arguments, passed to the entry callable as a list in the same order.
        """
        invoke_entry(self._entry, argv)

    def cleanup(self) -> None:
        """Release the program's loading scope.

        This method is idempotent: calling it multiple times is safe and has no additional
        effect after the first call.
        """
        if self._cleaner:
            try:
                self._cleaner()
            finally:
                self._cleaner = None

    def __enter__(self) -> "Program":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.cleanup()
