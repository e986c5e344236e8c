"""Environment variables read by the launcher."""

import os
from typing import Optional


def get_srcboot_log_level() -> str:
    """Logging level for the ``srcboot`` logger. Defaults to ``WARNING``."""
    return os.environ.get("SRCBOOT_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"


def get_srcboot_program_name() -> Optional[str]:
    """Override for the program name taken from the anchor. None if unset."""
    value = os.environ.get("SRCBOOT_PROGRAM_NAME", "").strip()
    return value or None


def get_srcboot_source_dir() -> Optional[str]:
    """Override for the source directory name under the program directory."""
    value = os.environ.get("SRCBOOT_SOURCE_DIR", "").strip()
    return value or None


def get_srcboot_entry_point() -> Optional[str]:
    """Override for the entry point, formatted as ``<module>::<function>``."""
    value = os.environ.get("SRCBOOT_ENTRY_POINT", "").strip()
    return value or None
