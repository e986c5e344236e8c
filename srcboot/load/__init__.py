"""Loading of compiled programs into an isolated module scope."""

from .loader import EntryCallable, ModuleLoader
from .scope import ProgramScope, launcher_private_entries, parent_scope_path

__all__ = [
    "EntryCallable",
    "ModuleLoader",
    "ProgramScope",
    "launcher_private_entries",
    "parent_scope_path",
]
