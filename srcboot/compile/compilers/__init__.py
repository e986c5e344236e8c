"""Concrete compiler implementations."""

from .bytecode_compiler import BytecodeCompiler

__all__ = ["BytecodeCompiler"]
