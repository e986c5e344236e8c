import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

import srcboot
from srcboot import (
    Anchor,
    EntryPointNotFoundError,
    ExitCode,
    ExitOutcome,
    LauncherConfig,
    ModuleResolutionError,
    NonVoidEntryError,
    ProgramScope,
    launch_from_source,
    program_from_source,
    run,
)

ECHO = {
    "main.py": """
        from typing import List

        def main(args: List[str]) -> None:
            print(" ".join(args))
    """
}


def _no_scope_installed() -> bool:
    return not any(isinstance(finder, ProgramScope) for finder in sys.meta_path)


def test_runs_program_with_arguments(launcher: Anchor, config, write_program, capsys):
    write_program(ECHO)
    outcome = run(["a", "b"], anchor=launcher, config=config)

    assert outcome == ExitOutcome(code=0)
    assert outcome.message is None
    assert capsys.readouterr().out == "a b\n"
    assert (launcher.location() / "classes" / "main.pyc").is_file()


def test_arguments_are_passed_verbatim(launcher: Anchor, config, write_program, capsys):
    write_program({"main.py": "def main(args):\n    print(repr(args))\n"})
    argv = ["", "two words", "--flag", "-", "ünïcode"]
    assert run(argv, anchor=launcher, config=config).code == 0
    assert capsys.readouterr().out == repr(argv) + "\n"


def test_program_uses_its_own_modules(launcher: Anchor, config, write_program, capsys):
    write_program(
        {
            "main.py": """
                from greeting.format import greet

                def main(args):
                    print(*greet(args), sep="\\n")
            """,
            "greeting/__init__.py": "",
            "greeting/format.py": """
                def greet(names):
                    return [f"Hello, {name}!" for name in names]
            """,
        }
    )
    assert run(["Ada", "Grace"], anchor=launcher, config=config).code == 0
    assert capsys.readouterr().out == "Hello, Ada!\nHello, Grace!\n"


def test_no_sources(launcher: Anchor, config, write_program, program_dir: Path):
    write_program({"README.txt": "nothing to compile"})
    with patch("srcboot.compile.source_compiler.get_compiler") as get_compiler:
        outcome = run([], anchor=launcher, config=config)

    assert outcome.code == ExitCode.NO_SOURCE == 30
    assert outcome.message == f"No Python source files found under {program_dir / 'src'}"
    get_compiler.assert_not_called()
    assert not (program_dir / "classes").exists()


def test_missing_program_directory(launcher: Anchor, config, program_dir: Path):
    outcome = run([], anchor=launcher, config=config)
    assert outcome.code == 30
    assert str(program_dir / "src") in outcome.message


def test_compilation_failure(launcher: Anchor, config, write_program, capsys):
    write_program(
        {
            "main.py": "def main(args):\n    print('must not run')\n",
            "broken.py": "def broken(:\n    pass\n",
        }
    )
    outcome = run([], anchor=launcher, config=config)

    assert outcome == ExitOutcome(code=ExitCode.COMPILATION_FAILED)
    assert outcome.message is None
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "SyntaxError" in captured.err
    assert captured.err.endswith("1 error\n")


def test_compiler_warning_fails_the_build(launcher: Anchor, config, write_program, capsys):
    write_program({"main.py": "def main(args):\n    if len(args) is 0:\n        pass\n"})
    assert run([], anchor=launcher, config=config).code == 20
    assert "literal" in capsys.readouterr().err


def test_compiler_warnings_can_be_tolerated(launcher: Anchor, write_program):
    write_program({"main.py": "def main(args):\n    if len(args) is 0:\n        pass\n"})
    config = LauncherConfig(warnings_as_errors=False)
    with pytest.warns(SyntaxWarning):
        assert run([], anchor=launcher, config=config).code == 0


def test_non_void_entry(launcher: Anchor, config, write_program, capsys):
    write_program({"main.py": "def main(args) -> int:\n    print('must not run')\n    return 0\n"})
    outcome = run([], anchor=launcher, config=config)

    assert outcome.code == ExitCode.NON_VOID_ENTRY == 40
    assert outcome.message == "Method main::main(args) -> int must return None"
    assert capsys.readouterr().out == ""
    assert _no_scope_installed()


def test_non_static_entry(launcher: Anchor, write_program, capsys):
    write_program(
        {
            "main.py": """
                class Main:
                    def main(self, args) -> None:
                        print("must not run")
            """
        }
    )
    config = LauncherConfig(entry_point="main::Main.main")
    outcome = run([], anchor=launcher, config=config)

    assert outcome.code == ExitCode.NON_STATIC_ENTRY == 41
    assert outcome.message == "Method main::Main.main(self, args) -> None must be static"
    assert capsys.readouterr().out == ""


def test_static_method_entry(launcher: Anchor, write_program, capsys):
    write_program(
        {
            "app/__init__.py": "",
            "app/cli.py": """
                class App:
                    @staticmethod
                    def main(args):
                        print("static", *args)
            """,
        }
    )
    config = LauncherConfig(entry_point="app.cli::App.main")
    assert run(["x"], anchor=launcher, config=config).code == 0
    assert capsys.readouterr().out == "static x\n"


def test_non_file_origin(config):
    anchor = Anchor(origin="http://example.com/Boot.py", name="Boot")
    outcome = run([], anchor=anchor, config=config)
    assert outcome.code == ExitCode.NOT_LOCAL_FILE == 10
    assert outcome.message == "Must be run from file protocol, found scheme http"


def test_missing_entry_module_propagates(launcher: Anchor, write_program):
    write_program(ECHO)
    config = LauncherConfig(entry_point="missing::main")
    with pytest.raises(ModuleResolutionError):
        run([], anchor=launcher, config=config)
    assert _no_scope_installed()
    assert "main" not in sys.modules


def test_missing_entry_callable_propagates(launcher: Anchor, write_program):
    write_program(ECHO)
    config = LauncherConfig(entry_point="main::start")
    with pytest.raises(EntryPointNotFoundError):
        run([], anchor=launcher, config=config)
    assert _no_scope_installed()


def test_program_errors_propagate_unwrapped(launcher: Anchor, config, write_program):
    write_program({"main.py": "def main(args):\n    raise ValueError('boom')\n"})
    with pytest.raises(ValueError, match="boom"):
        run([], anchor=launcher, config=config)
    assert _no_scope_installed()


def test_program_exit_propagates(launcher: Anchor, config, write_program):
    write_program({"main.py": "import sys\n\ndef main(args):\n    sys.exit(3)\n"})
    with pytest.raises(SystemExit) as exc_info:
        run([], anchor=launcher, config=config)
    assert exc_info.value.code == 3


def test_launcher_modules_are_not_visible(
    launcher: Anchor, config, write_program, tmp_path: Path, capsys
):
    launcher_dir = tmp_path / "launcher"
    (launcher_dir / "launcher_private_helper.py").write_text("SECRET = 1\n")
    sys.path.insert(0, str(launcher_dir))
    write_program(
        {
            "main.py": """
                def main(args):
                    try:
                        import launcher_private_helper
                    except ImportError:
                        print("hidden")
                    else:
                        print("visible")
            """
        }
    )
    assert run([], anchor=launcher, config=config).code == 0
    assert capsys.readouterr().out == "hidden\n"
    assert sys.path[0] == str(launcher_dir)


def test_program_sees_standard_library(launcher: Anchor, config, write_program, capsys):
    write_program({"main.py": "import json\n\ndef main(args):\n    print(json.dumps(args))\n"})
    assert run(["a"], anchor=launcher, config=config).code == 0
    assert capsys.readouterr().out == '["a"]\n'


def test_runs_are_repeatable(launcher: Anchor, config, write_program, capsys):
    write_program(ECHO)
    first = run(["once"], anchor=launcher, config=config)
    second = run(["once"], anchor=launcher, config=config)
    assert first == second == ExitOutcome(code=0)
    assert capsys.readouterr().out == "once\nonce\n"
    assert _no_scope_installed()
    assert "main" not in sys.modules


def test_source_changes_are_picked_up(launcher: Anchor, config, write_program, capsys):
    write_program({"main.py": "def main(args):\n    print('v1')\n"})
    run([], anchor=launcher, config=config)
    write_program({"main.py": "def main(args):\n    print('version 2')\n"})
    run([], anchor=launcher, config=config)
    assert capsys.readouterr().out == "v1\nversion 2\n"


def test_linked_packages_are_compiled(
    launcher: Anchor, config, write_program, write_sources, tmp_path: Path, capsys
):
    shared = write_sources(tmp_path / "shared", {"__init__.py": "", "util.py": "NAME = 'util'\n"})
    src = write_program(
        {
            "main.py": """
                import a.util
                import b.util

                def main(args):
                    print(a.util.NAME, b.util.NAME)
            """
        }
    )
    try:
        os.symlink(shared, src / "a", target_is_directory=True)
        os.symlink(shared, src / "b", target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("symbolic links are not supported here")

    assert run([], anchor=launcher, config=config).code == 0
    assert capsys.readouterr().out == "util util\n"


def test_no_return_entry(launcher: Anchor, config, write_program):
    write_program(
        {
            "main.py": """
                import sys
                from typing import NoReturn

                def main(args) -> NoReturn:
                    sys.exit(len(args))
            """
        }
    )
    with pytest.raises(SystemExit) as exc_info:
        run(["one", "two"], anchor=launcher, config=config)
    assert exc_info.value.code == 2


def test_stale_artifacts_stay_loadable(
    launcher: Anchor, config, write_program, program_dir: Path, capsys
):
    write_program({"main.py": "def main(args):\n    pass\n", "old.py": "X = 1\n"})
    run([], anchor=launcher, config=config)
    (program_dir / "src" / "old.py").unlink()
    write_program({"main.py": "def main(args):\n    import old\n    print(old.X)\n"})
    assert run([], anchor=launcher, config=config).code == 0
    assert capsys.readouterr().out == "1\n"


def test_program_name_and_source_dir_overrides(
    launcher: Anchor, tmp_path: Path, write_sources, capsys
):
    write_sources(tmp_path / "launcher" / "Other" / "code", ECHO)
    config = LauncherConfig(program_name="Other", source_dir="code")
    assert run(["hi"], anchor=launcher, config=config).code == 0
    assert capsys.readouterr().out == "hi\n"
    assert (tmp_path / "launcher" / "Other" / "classes" / "main.pyc").is_file()


def test_directory_origin(tmp_path: Path, config, write_sources, capsys):
    project = tmp_path / "project"
    write_sources(project / "Boot" / "src", ECHO)
    anchor = Anchor(origin=project.as_uri(), name="Boot")
    assert run(["dir"], anchor=anchor, config=config).code == 0
    assert capsys.readouterr().out == "dir\n"


def test_keep_scope(launcher: Anchor, config, write_program):
    write_program(ECHO)
    run([], anchor=launcher, config=config, keep_scope=True)
    assert not _no_scope_installed()
    assert "main" in sys.modules


def test_launch_from_source_raises(launcher: Anchor, config, write_program):
    write_program({"main.py": "def main(args) -> str:\n    return ''\n"})
    with pytest.raises(NonVoidEntryError):
        launch_from_source([], anchor=launcher, config=config)


def test_program_from_source(program_dir: Path, config, write_program):
    write_program(ECHO)
    with program_from_source(program_dir, config) as program:
        assert program.metadata.program_name == "Boot"
        assert program.metadata.entry_point == "main::main"
        assert program.metadata.binding == "module"
        assert program.metadata.artifacts_dir == program_dir / "classes"
        assert program.metadata.misc == {"compiled_files": 1}
        assert not _no_scope_installed()
    assert _no_scope_installed()


def test_main_exits_with_outcome(launcher: Anchor, config, write_program, capsys):
    write_program(ECHO)
    with pytest.raises(SystemExit) as exc_info:
        srcboot.main(["hello"], anchor=launcher, config=config)
    assert exc_info.value.code == 0
    assert capsys.readouterr().out == "hello\n"


def test_main_prints_reserved_code_message(config, capsys):
    anchor = Anchor(origin="ftp://example.com/Boot.py", name="Boot")
    with pytest.raises(SystemExit) as exc_info:
        srcboot.main([], anchor=anchor, config=config)
    assert exc_info.value.code == 10
    assert capsys.readouterr().err == "Must be run from file protocol, found scheme ftp\n"


def test_main_defaults_to_process_arguments(
    launcher: Anchor, config, write_program, monkeypatch: pytest.MonkeyPatch, capsys
):
    write_program(ECHO)
    monkeypatch.setattr(sys, "argv", ["Boot.py", "from", "argv"])
    with pytest.raises(SystemExit):
        srcboot.main(anchor=launcher, config=config)
    assert capsys.readouterr().out == "from argv\n"


if __name__ == "__main__":
    pytest.main(sys.argv)
