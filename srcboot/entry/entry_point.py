"""Strong-typed description of the entry point of a launched program."""

from __future__ import annotations

from pydantic import model_validator

from srcboot.utils import BaseModelWithDocstrings, NonEmptyString


class EntryPoint(BaseModelWithDocstrings):
    """The entry module and function of a launched program.

    The function receives the argument vector as its only argument and must return None. It
    can be a module-level function or a static/class method, in which case ``function`` is a
    dotted qualified name such as ``"App.main"``.
    """

    module: NonEmptyString = "main"
    """Absolute dotted name of the entry module, e.g. ``"main"`` or ``"app.cli"``."""
    function: NonEmptyString = "main"
    """Qualified name of the entry callable inside the module, e.g. ``"main"``."""

    @model_validator(mode="after")
    def _validate_names(self) -> "EntryPoint":
        """Validate that both names are dotted Python identifiers.

        Raises
        ------
        ValueError
            If the module or function name is not a dotted identifier.
        """
        for label, value in (("module", self.module), ("function", self.function)):
            if not all(part.isidentifier() for part in value.split(".")):
                raise ValueError(f"Invalid entry {label} name: {value!r}")
        return self

    @classmethod
    def parse(cls, value: str) -> "EntryPoint":
        """Parse an entry point written as ``"<module>::<function>"``.

        A value without ``::`` names the module only; the function defaults to ``main``.

        Parameters
        ----------
        value : str
            The entry point string.

        Returns
        -------
        EntryPoint
            The parsed entry point.

        Raises
        ------
        ValueError
            If the string contains more than one ``::`` separator.
        """
        if value.count("::") > 1:
            raise ValueError(
                f'Invalid entry point format: {value}. Expected "<module>::<function>".'
            )
        module, sep, function = value.partition("::")
        if not sep:
            return cls(module=module)
        return cls(module=module, function=function)

    def __str__(self) -> str:
        return f"{self.module}::{self.function}"
