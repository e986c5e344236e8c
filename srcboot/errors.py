"""Error taxonomy and reserved exit codes of the launcher.

Every structural failure of the pipeline is a ``LauncherError``. Errors that own a reserved
exit code carry it in ``exit_code``; the others (``ResolutionError`` and its subclasses) have
``exit_code`` set to None and are propagated to the top level unchanged. Failures raised by the
launched program itself are never wrapped in any of these classes.
"""

from __future__ import annotations

from enum import IntEnum
from typing import ClassVar, Optional


class ExitCode(IntEnum):
    """Process exit statuses that form the external contract of the launcher."""

    SUCCESS = 0
    """The entry callable was invoked and returned normally."""
    NOT_LOCAL_FILE = 10
    """The launcher's code origin is not a ``file:`` location."""
    COMPILATION_FAILED = 20
    """The compiler toolchain reported failure."""
    NO_SOURCE = 30
    """No source files were found under the source root."""
    NON_VOID_ENTRY = 40
    """The entry callable is declared to return a value."""
    NON_STATIC_ENTRY = 41
    """The entry callable can only be invoked through an instance."""


class LauncherError(Exception):
    """Base class for structural failures of the launch pipeline."""

    exit_code: ClassVar[Optional[ExitCode]] = None
    """Reserved exit code, or None if the error is propagated without a dedicated code."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "")
        self.message = message


class LocationError(LauncherError):
    """The launcher's code origin cannot be turned into a local anchor directory."""


class NotLocalFileError(LocationError):
    """Raised when the code origin uses a scheme other than ``file``."""

    exit_code = ExitCode.NOT_LOCAL_FILE

    def __init__(self, scheme: Optional[str]) -> None:
        super().__init__(f"Must be run from file protocol, found scheme {scheme}")
        self.scheme = scheme


class NoSourceFoundError(LauncherError):
    """Raised when the source root contains no source file."""

    exit_code = ExitCode.NO_SOURCE

    def __init__(self, root: object) -> None:
        super().__init__(f"No Python source files found under {root}")
        self.root = root


class CompilationError(LauncherError):
    """Raised when the toolchain fails. Diagnostics are reported by the toolchain itself."""

    exit_code = ExitCode.COMPILATION_FAILED

    def __init__(self) -> None:
        super().__init__(None)


class SignatureError(LauncherError):
    """The entry callable was found but violates its signature contract."""


class NonVoidEntryError(SignatureError):
    exit_code = ExitCode.NON_VOID_ENTRY

    def __init__(self, description: str) -> None:
        super().__init__(f"Method {description} must return None")
        self.description = description


class NonStaticEntryError(SignatureError):
    exit_code = ExitCode.NON_STATIC_ENTRY

    def __init__(self, description: str) -> None:
        super().__init__(f"Method {description} must be static")
        self.description = description


class ResolutionError(LauncherError):
    """The entry module or entry callable could not be found by name."""


class ModuleResolutionError(ResolutionError, ModuleNotFoundError):
    """Raised when the entry module is not visible from the program scope."""

    def __init__(self, name: str) -> None:
        LauncherError.__init__(self, f"No module named '{name}'")
        self.name = name


class EntryPointNotFoundError(ResolutionError, LookupError):
    """Raised when the entry module has no callable of the expected shape."""
