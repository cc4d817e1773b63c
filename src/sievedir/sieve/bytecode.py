"""Compiled form of a Sieve script.

The compiled form is a deterministic JSON document: identical scripts always
produce byte-identical output, so a compiled file can be compared or hashed
against a fresh compilation of its source.
"""

from __future__ import annotations

import json
from typing import BinaryIO

from sievedir.errors import BytecodeError
from sievedir.sieve.nodes import Argument, Command, SieveScript, StringList, Tag, Test

BYTECODE_FORMAT = "sievedir-bytecode"
BYTECODE_VERSION = 1


def _encode_argument(argument: Argument) -> object:
    if isinstance(argument, Tag):
        return {"tag": argument.name}
    if isinstance(argument, StringList):
        return {"strings": list(argument.values)}
    return {"number": argument}


class _Generator:
    def __init__(self, max_nesting: int) -> None:
        self.max_nesting = max_nesting

    def enter(self, depth: int, line: int) -> int:
        if depth >= self.max_nesting:
            raise BytecodeError(f"line {line}: nesting exceeds {self.max_nesting} levels")
        return depth + 1

    def test(self, test: Test, depth: int) -> dict[str, object]:
        depth = self.enter(depth, test.line)
        node: dict[str, object] = {"test": test.name, "line": test.line}
        if test.arguments:
            node["args"] = [_encode_argument(argument) for argument in test.arguments]
        if test.tests:
            node["tests"] = [self.test(child, depth) for child in test.tests]
        return node

    def command(self, command: Command, depth: int) -> dict[str, object]:
        node: dict[str, object] = {"command": command.name, "line": command.line}
        if command.arguments:
            node["args"] = [_encode_argument(argument) for argument in command.arguments]
        if command.tests:
            node["tests"] = [self.test(test, depth) for test in command.tests]
        if command.block is not None:
            inner = self.enter(depth, command.line)
            node["block"] = [self.command(child, inner) for child in command.block]
        return node


def generate_bytecode(script: SieveScript, *, max_nesting: int = 32) -> bytes:
    """Serialize a checked script.

    Raises:
        BytecodeError: Blocks or tests nest deeper than ``max_nesting``.
    """
    generator = _Generator(max_nesting)
    document = {
        "format": BYTECODE_FORMAT,
        "version": BYTECODE_VERSION,
        "require": sorted(script.require),
        "commands": [generator.command(command, 0) for command in script.commands],
    }
    return (json.dumps(document, sort_keys=True, separators=(",", ":")) + "\n").encode("utf-8")


def emit_bytecode(bytecode: bytes, fh: BinaryIO) -> None:
    written = fh.write(bytecode)
    if written is not None and written != len(bytecode):
        raise BytecodeError(f"short write: {written} of {len(bytecode)} bytes")
    fh.flush()


def load_bytecode(data: bytes) -> dict[str, object]:
    """Decode a compiled script, checking its format marker and version."""
    try:
        decoded = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise BytecodeError(f"corrupt bytecode: {exc}") from exc
    if not isinstance(decoded, dict) or decoded.get("format") != BYTECODE_FORMAT:
        raise BytecodeError("not a sievedir bytecode document")
    if decoded.get("version") != BYTECODE_VERSION:
        raise BytecodeError(f"unsupported bytecode version {decoded.get('version')!r}")
    return decoded
