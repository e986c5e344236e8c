"""Validation and invocation of the entry callable."""

from __future__ import annotations

import inspect
import typing
from typing import Any, Sequence

from srcboot.errors import NonStaticEntryError, NonVoidEntryError
from srcboot.load.loader import EntryCallable
from srcboot.logging import get_logger

logger = get_logger("EntryInvoker")

_NO_VALUE_TYPES = tuple(
    getattr(typing, name) for name in ("NoReturn", "Never") if hasattr(typing, name)
)
"""Annotations of functions that never return normally (``Never`` exists from Python 3.11)."""

_NO_VALUE_NAMES = ("None", "NoneType", "NoReturn", "typing.NoReturn", "Never", "typing.Never")


def _is_none_annotation(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.strip() in _NO_VALUE_NAMES
    return (
        annotation is inspect.Signature.empty
        or annotation is None
        or annotation is type(None)
        or any(annotation is t for t in _NO_VALUE_TYPES)
    )


def validate_entry(entry: EntryCallable) -> None:
    """Check the return and binding contracts of an entry callable.

    The callable must return None: its return annotation, if any, must be ``None`` (or
    ``NoReturn`` / ``Never`` for a callable that always exits), and it must not be a coroutine
    or generator function (calling those produces a value). It must also be callable without an
    instance of its owner.

    Parameters
    ----------
    entry : EntryCallable
        The entry callable found by the module loader.

    Raises
    ------
    NonVoidEntryError
        If the callable returns a value.
    NonStaticEntryError
        If the callable needs an instance of the class it is defined in.
    """
    if entry.kind != "function" or not _is_none_annotation(entry.signature.return_annotation):
        raise NonVoidEntryError(entry.description)
    if entry.binding == "instance":
        raise NonStaticEntryError(entry.description)


def invoke_entry(entry: EntryCallable, argv: Sequence[str]) -> None:
    """Call a validated entry callable with the argument vector as its only argument.

    Anything raised by the callable propagates unchanged.
    """
    logger.debug("Invoking %s with %d argument(s)", entry.description, len(argv))
    entry.target(list(argv))
