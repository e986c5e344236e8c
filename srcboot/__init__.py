from srcboot.compile import BytecodeCompiler, CompilationResult, Compiler
from srcboot.config import LauncherConfig
from srcboot.entry import EntryPoint, Program, ProgramMetadata
from srcboot.errors import (
    CompilationError,
    EntryPointNotFoundError,
    ExitCode,
    LauncherError,
    LocationError,
    ModuleResolutionError,
    NonStaticEntryError,
    NonVoidEntryError,
    NoSourceFoundError,
    NotLocalFileError,
    ResolutionError,
    SignatureError,
)
from srcboot.load import ModuleLoader, ProgramScope
from srcboot.location import Anchor, resolve_anchor_location
from srcboot.logging import configure_logging, get_logger
from srcboot.pipeline import (
    ExitOutcome,
    launch_from_source,
    main,
    program_from_source,
    run,
    scope_from_source,
)

__all__ = [
    # Pipeline API
    "main",
    "run",
    "launch_from_source",
    "program_from_source",
    "scope_from_source",
    "ExitOutcome",
    # Stages
    "Anchor",
    "resolve_anchor_location",
    "Compiler",
    "BytecodeCompiler",
    "CompilationResult",
    "ProgramScope",
    "ModuleLoader",
    "EntryPoint",
    "Program",
    "ProgramMetadata",
    "LauncherConfig",
    # Errors
    "ExitCode",
    "LauncherError",
    "LocationError",
    "NotLocalFileError",
    "NoSourceFoundError",
    "CompilationError",
    "SignatureError",
    "NonVoidEntryError",
    "NonStaticEntryError",
    "ResolutionError",
    "ModuleResolutionError",
    "EntryPointNotFoundError",
    "configure_logging",
    "get_logger",
]
