import sys
import types
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from srcboot import Program, ProgramMetadata, ProgramScope
from srcboot.load import ModuleLoader


@pytest.fixture
def program_parts(tmp_path: Path):
    module = types.ModuleType("programdemo")
    exec("calls = []\n\ndef main(args):\n    calls.append(args)\n", module.__dict__)
    entry = ModuleLoader(ProgramScope(tmp_path)).find_callable(module, "main")
    metadata = ProgramMetadata(
        program_name="Boot",
        entry_point="programdemo::main",
        description=entry.description,
        binding=entry.binding,
        artifacts_dir=tmp_path / "classes",
    )
    return module, entry, metadata


def test_program_call(program_parts):
    module, entry, metadata = program_parts
    program = Program(entry, metadata)
    program(["x", "y"])
    assert module.calls == [["x", "y"]]
    assert program.metadata.binding == "module"
    assert program.metadata.misc == {}


def test_cleanup_is_idempotent(program_parts):
    _, entry, metadata = program_parts
    cleaner = MagicMock()
    program = Program(entry, metadata, cleaner=cleaner)
    program.cleanup()
    program.cleanup()
    cleaner.assert_called_once_with()


def test_cleanup_without_cleaner(program_parts):
    _, entry, metadata = program_parts
    Program(entry, metadata).cleanup()


def test_cleaner_runs_once_even_if_it_fails(program_parts):
    _, entry, metadata = program_parts
    cleaner = MagicMock(side_effect=RuntimeError("boom"))
    program = Program(entry, metadata, cleaner=cleaner)
    with pytest.raises(RuntimeError):
        program.cleanup()
    program.cleanup()
    assert cleaner.call_count == 1


def test_context_manager_cleans_up(program_parts):
    module, entry, metadata = program_parts
    cleaner = MagicMock()
    with Program(entry, metadata, cleaner=cleaner) as program:
        program([])
    cleaner.assert_called_once_with()
    assert module.calls == [[]]


if __name__ == "__main__":
    pytest.main(sys.argv)
