"""Compiler subsystem package.

This package turns a source tree into compiled artifacts. It includes:
- Compiler: Abstract base class for compiler toolchains
- BytecodeCompiler: Compiles Python sources into sourceless ``.pyc`` modules
- CompilationResult: Outcome and diagnostics of one batch compilation
- list_source_files / compile_source_tree: The source compiler stage of the launcher

The typical workflow is:
1. Enumerate sources: sources = list_source_files(src_root, ".py")
2. Compile them: result = get_compiler(".py").compile(sources, src_root, classes_dir)
3. Load the artifacts from ``classes_dir`` (see ``srcboot.load``)
"""

from .compiler import CompilationResult, Compiler
from .compilers import BytecodeCompiler
from .source_compiler import compile_source_tree, get_compiler
from .sources import list_source_files

__all__ = [
    "BytecodeCompiler",
    "CompilationResult",
    "Compiler",
    "compile_source_tree",
    "get_compiler",
    "list_source_files",
]
