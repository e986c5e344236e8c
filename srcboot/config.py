"""Launcher configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator

from .entry.entry_point import EntryPoint
from .env import get_srcboot_entry_point, get_srcboot_program_name, get_srcboot_source_dir
from .utils import BaseModelWithDocstrings, NonEmptyString


class LauncherConfig(BaseModelWithDocstrings):
    """Configuration of one compile-then-run cycle.

    The directory layout under the anchor location is fixed by convention::

        <anchor>/<program_name>/<source_dir>/**/*<source_suffix>
        <anchor>/<program_name>/<classes_dir>/

    The classes directory is a sibling of the source directory.
    """

    program_name: Optional[NonEmptyString] = None
    """Name of the program directory under the anchor. None means the anchor's simple name."""
    source_dir: NonEmptyString = "src"
    """Source directory, relative to the program directory."""
    classes_dir: NonEmptyString = "classes"
    """Name of the compiled artifacts directory, placed next to the source directory."""
    source_suffix: NonEmptyString = ".py"
    """File name suffix of the source files to compile."""
    entry_point: EntryPoint = Field(default_factory=EntryPoint)
    """The entry module and function to invoke."""
    warnings_as_errors: bool = True
    """Whether a compiler warning fails the build."""
    allow_private_entry: bool = True
    """Whether the entry callable may be a non-public name of its module."""

    @field_validator("source_suffix")
    @classmethod
    def _validate_source_suffix(cls, value: str) -> str:
        if not value.startswith(".") or len(value) < 2:
            raise ValueError(f"Invalid source suffix '{value}', expected e.g. '.py'")
        return value

    @field_validator("entry_point", mode="before")
    @classmethod
    def _parse_entry_point(cls, value):
        if isinstance(value, str):
            return EntryPoint.parse(value)
        return value

    def source_path(self, program_dir: Path) -> Path:
        """Source root for a program directory."""
        return program_dir / self.source_dir

    def classes_path(self, program_dir: Path) -> Path:
        """Compiled artifacts directory for a program directory."""
        return self.source_path(program_dir).parent / self.classes_dir

    @classmethod
    def from_env(cls, **overrides) -> "LauncherConfig":
        """Build a config from ``SRCBOOT_*`` environment variables.

        Keyword arguments take precedence over the environment.
        """
        values = {}
        program_name = get_srcboot_program_name()
        if program_name:
            values["program_name"] = program_name
        source_dir = get_srcboot_source_dir()
        if source_dir:
            values["source_dir"] = source_dir
        entry_point = get_srcboot_entry_point()
        if entry_point:
            values["entry_point"] = entry_point
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
