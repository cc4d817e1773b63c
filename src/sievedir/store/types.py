"""Types shared by the script repository operations."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, BinaryIO, Protocol

SCRIPT_SUFFIX = ".script"
BYTECODE_SUFFIX = ".bc"
DEFAULTBC_NAME = "defaultbc"
NEW_SUFFIX = ".NEW"

# Leaves headroom under PATH_MAX once the directory and suffixes are added.
MAX_NAME_LENGTH = 1013


class Outcome(str, Enum):
    """Result of a repository operation."""

    OK = "ok"
    NOTFOUND = "notfound"
    INVALID = "invalid"
    FAIL = "fail"
    IOERROR = "ioerror"


@dataclass(frozen=True, slots=True)
class DirEntry:
    """One classified entry of a repository directory."""

    name: str
    stat: os.stat_result
    link_target: str = ""

    @property
    def is_file(self) -> bool:
        return stat.S_ISREG(self.stat.st_mode)

    @property
    def is_symlink(self) -> bool:
        return stat.S_ISLNK(self.stat.st_mode)


@dataclass(slots=True)
class PutResult:
    outcome: Outcome
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK


@dataclass(frozen=True, slots=True)
class ScriptInfo:
    name: str
    active: bool = False


class ScriptCompiler(Protocol):
    def parse(self, source: str) -> Any: ...

    def generate(self, parsed: Any) -> bytes: ...

    def emit(self, bytecode: bytes, fh: BinaryIO) -> None: ...


def script_path(sievedir: str | os.PathLike[str], name: str) -> str:
    return os.path.join(os.fspath(sievedir), name + SCRIPT_SUFFIX)


def bytecode_path(sievedir: str | os.PathLike[str], name: str) -> str:
    return os.path.join(os.fspath(sievedir), name + BYTECODE_SUFFIX)


def active_path(sievedir: str | os.PathLike[str]) -> str:
    return os.path.join(os.fspath(sievedir), DEFAULTBC_NAME)
