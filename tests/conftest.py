import logging
import sys
import textwrap
from pathlib import Path
from typing import Callable, Dict

import pytest

import srcboot.logging as srcboot_logging
from srcboot import Anchor, LauncherConfig, ProgramScope


@pytest.fixture(autouse=True)
def _clean_srcboot_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test without SRCBOOT_* overrides from the outer environment."""
    for name in (
        "SRCBOOT_LOG_LEVEL",
        "SRCBOOT_PROGRAM_NAME",
        "SRCBOOT_SOURCE_DIR",
        "SRCBOOT_ENTRY_POINT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _restore_import_state():
    """Undo what a test did to the import system and the ``srcboot`` logger.

    Scopes left installed (e.g. by ``srcboot.main``, which keeps its scope for the lifetime of
    the process) are uninstalled, and ``sys.path`` / ``sys.meta_path`` are restored.
    """
    saved_path = list(sys.path)
    saved_meta_path = list(sys.meta_path)
    yield
    for finder in list(sys.meta_path):
        if isinstance(finder, ProgramScope):
            finder.uninstall()
    sys.path[:] = saved_path
    sys.meta_path[:] = saved_meta_path
    root = logging.getLogger("srcboot")
    if srcboot_logging._handler is not None:
        root.removeHandler(srcboot_logging._handler)
        srcboot_logging._handler = None
    root.setLevel(logging.NOTSET)
    root.propagate = True


@pytest.fixture
def write_sources() -> Callable[[Path, Dict[str, str]], Path]:
    """Write dedented source files under a root directory and return the root."""

    def _write(root: Path, files: Dict[str, str]) -> Path:
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return root

    return _write


@pytest.fixture
def launcher(tmp_path: Path) -> Anchor:
    """A loose launcher script ``<tmp>/launcher/Boot.py``; its program lives in ``Boot/``."""
    launcher_dir = tmp_path / "launcher"
    launcher_dir.mkdir()
    script = launcher_dir / "Boot.py"
    script.write_text("import srcboot\n\nsrcboot.main()\n", encoding="utf-8")
    return Anchor.from_path(str(script))


@pytest.fixture
def program_dir(launcher: Anchor) -> Path:
    """The program directory of :func:`launcher`."""
    return launcher.location()


@pytest.fixture
def write_program(program_dir: Path, write_sources) -> Callable[[Dict[str, str]], Path]:
    """Write files into the source directory of :func:`launcher`'s program."""

    def _write(files: Dict[str, str]) -> Path:
        return write_sources(program_dir / "src", files)

    return _write


@pytest.fixture
def config() -> LauncherConfig:
    return LauncherConfig()
