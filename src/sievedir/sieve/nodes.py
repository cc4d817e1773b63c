"""Syntax tree of a parsed Sieve script."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Tag:
    name: str


@dataclass(slots=True)
class StringList:
    values: list[str]
    bracketed: bool = False


Argument = Tag | int | StringList


@dataclass(slots=True)
class Test:
    name: str
    line: int
    arguments: list[Argument] = field(default_factory=list)
    tests: list[Test] = field(default_factory=list)
    test_list: bool = False


@dataclass(slots=True)
class Command:
    name: str
    line: int
    arguments: list[Argument] = field(default_factory=list)
    tests: list[Test] = field(default_factory=list)
    test_list: bool = False
    block: list[Command] | None = None


@dataclass(slots=True)
class SieveScript:
    require: list[str] = field(default_factory=list)
    commands: list[Command] = field(default_factory=list)
