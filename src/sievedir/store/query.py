"""Read-only probes of a script repository."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator

from sievedir.errors import ScriptIOError
from sievedir.store.enumerator import iter_entries
from sievedir.store.types import (
    BYTECODE_SUFFIX,
    SCRIPT_SUFFIX,
    ScriptInfo,
    active_path,
    script_path,
)

logger = logging.getLogger(__name__)


def _script_stem(filename: str) -> str | None:
    if len(filename) > len(SCRIPT_SUFFIX) and filename.endswith(SCRIPT_SUFFIX):
        return filename[: -len(SCRIPT_SUFFIX)]
    return None


def _iter_script_names(sievedir: str | os.PathLike[str]) -> Iterator[str]:
    for entry in iter_entries(sievedir):
        if not entry.is_file:
            continue
        stem = _script_stem(entry.name)
        if stem is not None:
            yield stem


def script_exists(sievedir: str | os.PathLike[str], name: str) -> bool:
    try:
        os.stat(script_path(sievedir, name))
    except OSError:
        return False
    return True


def count_other_scripts(sievedir: str | os.PathLike[str], exclude: str | None = None) -> int:
    """Count the scripts in the repository other than ``exclude``."""
    return sum(1 for stem in _iter_script_names(sievedir) if not exclude or stem != exclude)


def get_active(sievedir: str | os.PathLike[str]) -> str | None:
    """Return the name of the active script, or None when nothing is active."""
    link = active_path(sievedir)
    try:
        target = os.readlink(link)
    except FileNotFoundError:
        return None
    except OSError as exc:
        logger.error("IOERROR: readlink(%s): %s", link, exc.strerror)
        return None

    if len(target) > len(BYTECODE_SUFFIX):
        return target[: -len(BYTECODE_SUFFIX)]
    return None


def is_active(sievedir: str | os.PathLike[str], name: str | None) -> bool:
    if not name:
        return False
    return name == get_active(sievedir)


def get_script(sievedir: str | os.PathLike[str], name: str) -> bytes | None:
    """Return the stored source of ``name``, or None when it cannot be opened.

    Raises:
        ScriptIOError: The file was opened but reading it failed.
    """
    path = script_path(sievedir, name)
    try:
        fh = open(path, "rb")
    except OSError:
        return None

    with fh:
        try:
            return fh.read()
        except OSError as exc:
            logger.error("IOERROR: read(%s): %s", path, exc.strerror)
            raise ScriptIOError(f"unable to read {path}: {exc.strerror}") from exc


def list_scripts(sievedir: str | os.PathLike[str]) -> list[ScriptInfo]:
    active = get_active(sievedir)
    return [
        ScriptInfo(name=stem, active=stem == active)
        for stem in sorted(_iter_script_names(sievedir))
    ]
