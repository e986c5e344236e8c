"""Name-based resolution of the entry module and entry callable inside a program scope."""

from __future__ import annotations

import collections.abc
import importlib.util
import inspect
import re
import sys
import typing
from dataclasses import dataclass
from types import ModuleType
from typing import Any, Callable, List, Literal

from srcboot.errors import EntryPointNotFoundError, ModuleResolutionError
from srcboot.logging import get_logger

from .scope import ProgramScope

logger = get_logger("ModuleLoader")

Binding = Literal["module", "static", "class", "instance"]
"""How an entry callable is bound: a module-level function, a static method, a class method,
or a plain function defined in a class (which needs an instance to be called)."""

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)

_SEQUENCE_ORIGINS = (
    list,
    tuple,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Collection,
    collections.abc.Iterable,
)

_TEXT_SEQUENCE_ANNOTATION = re.compile(
    r"^(?:[A-Za-z_][\w.]*\.)?(?:list|List|tuple|Tuple|Sequence|MutableSequence|Collection"
    r"|Iterable)(?:\[\s*str\s*(?:,\s*\.\.\.\s*)?\])?$"
)
"""Accepted spellings of string (postponed) annotations of the argument vector parameter."""

_MISSING = object()


@dataclass(frozen=True)
class EntryCallable:
    """An entry callable found on a module, before its contract is validated."""

    target: Callable[..., Any]
    """The object that is called with the argument vector."""
    binding: Binding
    """How the callable is bound to its owner."""
    signature: inspect.Signature
    """The signature as seen by a caller (without the instance parameter)."""
    description: str
    """Human-readable description used in diagnostics, e.g. ``main::main(args) -> int``."""
    kind: Literal["function", "coroutine", "generator", "async_generator"] = "function"
    """What calling the underlying function produces."""


def _is_text_sequence(annotation: Any) -> bool:
    """Whether a parameter annotation accepts a sequence of ``str``."""
    if annotation is inspect.Parameter.empty:
        return True
    if isinstance(annotation, str):
        return bool(_TEXT_SEQUENCE_ANNOTATION.match(annotation.replace(" ", "")))
    if annotation in _SEQUENCE_ORIGINS:
        return True
    origin = typing.get_origin(annotation)
    if origin not in _SEQUENCE_ORIGINS:
        return False
    return typing.get_args(annotation) in ((str,), (str, Ellipsis))


def _accepts_argv(signature: inspect.Signature) -> bool:
    """Whether a signature takes exactly one positional argument vector."""
    params = list(signature.parameters.values())
    if len(params) != 1 or params[0].kind not in _POSITIONAL:
        return False
    return _is_text_sequence(params[0].annotation)


def _kind_of(function: Any) -> str:
    function = inspect.unwrap(function)
    if inspect.isasyncgenfunction(function):
        return "async_generator"
    if inspect.iscoroutinefunction(function):
        return "coroutine"
    if inspect.isgeneratorfunction(function):
        return "generator"
    return "function"


class ModuleLoader:
    """Resolve modules and entry callables by name inside a :class:`ProgramScope`.

    Modules are created through :class:`importlib.util.LazyLoader`: looking a module up does not
    run its code, which happens on the first attribute access instead.

    When ``allow_private`` is set, the loader also resolves entry callables that are not part of
    their module's public surface, i.e. names starting with an underscore or left out of the
    module's ``__all__``. The launcher enables this so that entry points meant to be run, not
    imported, can still be invoked.
    """

    def __init__(self, scope: ProgramScope, allow_private: bool = True) -> None:
        self._scope = scope
        self._allow_private = allow_private

    @property
    def scope(self) -> ProgramScope:
        return self._scope

    @property
    def allow_private(self) -> bool:
        return self._allow_private

    def load_module(self, name: str) -> ModuleType:
        """Resolve a module by absolute name without executing it.

        Parameters
        ----------
        name : str
            Absolute dotted module name. Parent packages of a dotted name are imported.

        Returns
        -------
        ModuleType
            The module, lazily initialized on first attribute access, or the already imported
            module of that name.

        Raises
        ------
        ModuleResolutionError
            If no module of that name is visible from the scope.
        RuntimeError
            If the scope is not installed.
        """
        if not self._scope.installed:
            raise RuntimeError(f"{self._scope!r} must be installed to load modules")
        if name in sys.modules:
            return sys.modules[name]

        try:
            spec = importlib.util.find_spec(name)
        except ModuleNotFoundError as e:
            raise ModuleResolutionError(name) from e
        if spec is None or spec.loader is None or not hasattr(spec.loader, "exec_module"):
            raise ModuleResolutionError(name)

        loader = importlib.util.LazyLoader(spec.loader)
        spec.loader = loader
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        loader.exec_module(module)
        if spec.parent:
            setattr(sys.modules[spec.parent], name.rpartition(".")[2], module)
        logger.debug("Loaded module %s from %s", name, spec.origin)
        return module

    def find_callable(self, module: ModuleType, qualname: str) -> EntryCallable:
        """Find the entry callable ``qualname`` on a module.

        Accessing the module's attributes initializes a lazily loaded module.

        Parameters
        ----------
        module : ModuleType
            The entry module.
        qualname : str
            Qualified name of the callable, e.g. ``"main"`` or ``"App.main"``.

        Returns
        -------
        EntryCallable
            The callable with exactly one positional parameter accepting a sequence of
            ``str``. Its return and binding contracts are not checked here.

        Raises
        ------
        EntryPointNotFoundError
            If there is no such callable, it has another shape, or it is not public and
            private entry points are not allowed.
        """
        parts = qualname.split(".")
        where = f"{module.__name__}::{qualname}"
        if not self._allow_private and not self._is_public(module, parts):
            raise EntryPointNotFoundError(f"Entry point {where} is not public")

        owner: Any = module
        for part in parts[:-1]:
            owner = getattr(owner, part, _MISSING)
            if owner is _MISSING:
                raise EntryPointNotFoundError(f"No entry point {where}")
        name = parts[-1]

        if isinstance(owner, type):
            try:
                raw = inspect.getattr_static(owner, name)
            except AttributeError:
                raise EntryPointNotFoundError(f"No entry point {where}") from None
            if isinstance(raw, staticmethod):
                binding: Binding = "static"
            elif isinstance(raw, classmethod):
                binding = "class"
            elif inspect.isfunction(raw):
                binding = "instance"
            else:
                binding = "static"
            function = raw.__func__ if isinstance(raw, (staticmethod, classmethod)) else raw
            target = raw if binding == "instance" else getattr(owner, name)
        else:
            target = getattr(owner, name, _MISSING)
            if target is _MISSING:
                raise EntryPointNotFoundError(f"No entry point {where}")
            binding = "module"
            function = target

        if inspect.isclass(target) or not callable(target):
            raise EntryPointNotFoundError(f"Entry point {where} is not a function")

        try:
            full_signature = inspect.signature(target)
        except (TypeError, ValueError) as e:
            raise EntryPointNotFoundError(f"Entry point {where} has no signature") from e
        signature = full_signature
        if binding == "instance":
            params = list(full_signature.parameters.values())
            if not params or params[0].kind not in _POSITIONAL:
                raise EntryPointNotFoundError(f"No entry point {where}(args)")
            signature = full_signature.replace(parameters=params[1:])

        if not _accepts_argv(signature):
            raise EntryPointNotFoundError(
                f"No entry point {where}(args) taking a sequence of str, found {where}"
                f"{full_signature}"
            )

        entry = EntryCallable(
            target=target,
            binding=binding,
            signature=signature,
            description=f"{where}{full_signature}",
            kind=_kind_of(function),
        )
        logger.debug("Found %s entry point %s", binding, entry.description)
        return entry

    @staticmethod
    def _is_public(module: ModuleType, parts: List[str]) -> bool:
        if any(part.startswith("_") for part in parts):
            return False
        exported = getattr(module, "__all__", None)
        return exported is None or parts[0] in exported
