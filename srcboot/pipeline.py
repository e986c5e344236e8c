"""The launch pipeline: Resolve -> Compile -> Load -> Invoke.

Every stage raises on failure; :func:`run` is the only place that maps failures to exit
codes, and :func:`main` the only place that terminates the process.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence, Union

from .compile import CompilationResult, compile_source_tree
from .config import LauncherConfig
from .entry import Program, ProgramMetadata, validate_entry
from .errors import ExitCode, LauncherError
from .load import ModuleLoader, ProgramScope, launcher_private_entries, parent_scope_path
from .location import Anchor, to_file_path
from .logging import configure_logging, get_logger
from .utils import BaseModelWithDocstrings

logger = get_logger("Pipeline")


class ExitOutcome(BaseModelWithDocstrings):
    """The result of one launcher invocation."""

    code: int
    """Process exit status. 0 when the entry callable returned normally."""
    message: Optional[str] = None
    """Diagnostic for the error stream, if any."""


def scope_from_source(
    program_dir: Path,
    config: Optional[LauncherConfig] = None,
    parent_path: Optional[Sequence[str]] = None,
) -> ProgramScope:
    """Compile a program's sources and return a scope over the compiled artifacts.

    Parameters
    ----------
    program_dir : Path
        The program directory, ``<anchor>/<program_name>``.
    config : Optional[LauncherConfig]
        The launcher configuration. Defaults to ``LauncherConfig()``.
    parent_path : Optional[Sequence[str]]
        Import path of the parent scope. Defaults to ``sys.path``.

    Returns
    -------
    ProgramScope
        An uninstalled scope rooted at the artifacts directory.

    Raises
    ------
    NoSourceFoundError
        If the source directory has no source file.
    CompilationError
        If compilation fails.
    """
    config = config or LauncherConfig()
    result = _compile_program(program_dir, config)
    return ProgramScope(result.output_dir, parent_path)


def _compile_program(program_dir: Path, config: LauncherConfig) -> CompilationResult:
    result = compile_source_tree(
        config.source_path(program_dir),
        config.classes_path(program_dir),
        source_suffix=config.source_suffix,
        warnings_as_errors=config.warnings_as_errors,
    )
    logger.info("Compiled %d file(s) into %s", len(result.artifacts), result.output_dir)
    return result


def program_from_source(
    program_dir: Path,
    config: Optional[LauncherConfig] = None,
    parent_path: Optional[Sequence[str]] = None,
) -> Program:
    """Compile a program, load its entry module and validate its entry callable.

    The returned program owns an installed scope; call :meth:`Program.cleanup` to release it.
    On failure the scope is released before the error propagates.

    Parameters
    ----------
    program_dir : Path
        The program directory, ``<anchor>/<program_name>``.
    config : Optional[LauncherConfig]
        The launcher configuration. Defaults to ``LauncherConfig()``.
    parent_path : Optional[Sequence[str]]
        Import path of the parent scope. Defaults to ``sys.path``.

    Returns
    -------
    Program
        The program, ready to be called with an argument vector.

    Raises
    ------
    NoSourceFoundError, CompilationError
        If the compile stage fails.
    ModuleResolutionError, EntryPointNotFoundError
        If the entry module or entry callable cannot be found.
    NonVoidEntryError, NonStaticEntryError
        If the entry callable violates its contract.
    """
    config = config or LauncherConfig()
    result = _compile_program(program_dir, config)
    scope = ProgramScope(result.output_dir, parent_path)
    scope.install()
    try:
        loader = ModuleLoader(scope, allow_private=config.allow_private_entry)
        module = loader.load_module(config.entry_point.module)
        entry = loader.find_callable(module, config.entry_point.function)
        validate_entry(entry)
    except BaseException:
        scope.uninstall()
        raise

    metadata = ProgramMetadata(
        program_name=Path(program_dir).name,
        entry_point=str(config.entry_point),
        description=entry.description,
        binding=entry.binding,
        artifacts_dir=scope.root,
        misc={"compiled_files": len(result.artifacts)},
    )
    return Program(entry, metadata, cleaner=scope.uninstall)


def prepare_program(
    anchor: Optional[Anchor] = None, config: Optional[LauncherConfig] = None
) -> Program:
    """Resolve the anchor location and build the program found under it.

    Parameters
    ----------
    anchor : Optional[Anchor]
        The launcher. Defaults to the ``__main__`` module of the process.
    config : Optional[LauncherConfig]
        The launcher configuration. Defaults to ``LauncherConfig.from_env()``.

    Returns
    -------
    Program
        See :func:`program_from_source`.
    """
    anchor = anchor or Anchor.from_main()
    config = config or LauncherConfig.from_env()
    program_dir = anchor.location(config.program_name)
    logger.info("Launching %s from %s", config.entry_point, program_dir)
    parent_path = parent_scope_path(launcher_private_entries(to_file_path(anchor.origin)))
    return program_from_source(program_dir, config, parent_path)


def launch_from_source(
    argv: Sequence[str],
    anchor: Optional[Anchor] = None,
    config: Optional[LauncherConfig] = None,
    keep_scope: bool = False,
) -> None:
    """Compile and run a program, raising on any failure.

    Parameters
    ----------
    argv : Sequence[str]
        Arguments passed verbatim to the entry callable.
    anchor : Optional[Anchor]
        The launcher. Defaults to the ``__main__`` module of the process.
    config : Optional[LauncherConfig]
        The launcher configuration. Defaults to ``LauncherConfig.from_env()``.
    keep_scope : bool
        Leave the program's loading scope installed after the entry callable returns.
    """
    program = prepare_program(anchor, config)
    try:
        program(argv)
    finally:
        if not keep_scope:
            program.cleanup()


def run(
    argv: Sequence[str],
    anchor: Optional[Anchor] = None,
    config: Optional[LauncherConfig] = None,
    keep_scope: bool = False,
) -> ExitOutcome:
    """Run the pipeline and map structural failures to an exit outcome.

    Failures with a reserved exit code become an :class:`ExitOutcome`. Resolution errors and
    anything raised by the program itself propagate.

    Parameters
    ----------
    argv : Sequence[str]
        Arguments passed verbatim to the entry callable.
    anchor : Optional[Anchor]
        The launcher. Defaults to the ``__main__`` module of the process.
    config : Optional[LauncherConfig]
        The launcher configuration. Defaults to ``LauncherConfig.from_env()``.
    keep_scope : bool
        Leave the program's loading scope installed after the entry callable returns.

    Returns
    -------
    ExitOutcome
        Code 0 if the entry callable returned, or the reserved code of the failure.
    """
    try:
        program = prepare_program(anchor, config)
    except LauncherError as e:
        if e.exit_code is None:
            raise
        logger.debug("Launch failed with exit code %d", e.exit_code)
        return ExitOutcome(code=int(e.exit_code), message=e.message)

    try:
        program(argv)
    finally:
        if not keep_scope:
            program.cleanup()
    return ExitOutcome(code=int(ExitCode.SUCCESS))


def main(
    argv: Optional[Sequence[str]] = None,
    anchor: Optional[Anchor] = None,
    config: Optional[LauncherConfig] = None,
    log_level: Union[int, str, None] = None,
) -> NoReturn:
    """Process entry point of a launcher.

    A launcher script only needs::

        import srcboot

        if __name__ == "__main__":
            srcboot.main()

    Parameters
    ----------
    argv : Optional[Sequence[str]]
        Arguments for the program. Defaults to ``sys.argv[1:]``.
    anchor : Optional[Anchor]
        The launcher. Defaults to the ``__main__`` module of the process.
    config : Optional[LauncherConfig]
        The launcher configuration. Defaults to ``LauncherConfig.from_env()``.
    log_level : Union[int, str, None]
        Logging level. Defaults to the ``SRCBOOT_LOG_LEVEL`` environment variable.
    """
    configure_logging(log_level)
    args: List[str] = list(sys.argv[1:] if argv is None else argv)
    outcome = run(args, anchor, config, keep_scope=True)
    if outcome.message is not None:
        print(outcome.message, file=sys.stderr)
    sys.exit(outcome.code)
