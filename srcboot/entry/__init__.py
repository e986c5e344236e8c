"""Entry point description, validation and invocation."""

from .entry_point import EntryPoint
from .invoker import invoke_entry, validate_entry
from .program import Program, ProgramMetadata

__all__ = ["EntryPoint", "Program", "ProgramMetadata", "invoke_entry", "validate_entry"]
