"""Bundled Sieve compiler."""

from __future__ import annotations

from typing import BinaryIO

from sievedir.sieve.bytecode import emit_bytecode, generate_bytecode, load_bytecode
from sievedir.sieve.nodes import SieveScript
from sievedir.sieve.parser import parse


class SieveCompiler:
    """Parse, generate and emit Sieve scripts for the script repository."""

    def __init__(self, *, max_nesting: int | None = None) -> None:
        if max_nesting is None:
            from sievedir.config import get_settings

            max_nesting = get_settings().sieve_max_nesting
        self.max_nesting = max_nesting

    def parse(self, source: str) -> SieveScript:
        return parse(source)

    def generate(self, parsed: SieveScript) -> bytes:
        return generate_bytecode(parsed, max_nesting=self.max_nesting)

    def emit(self, bytecode: bytes, fh: BinaryIO) -> None:
        emit_bytecode(bytecode, fh)


__all__ = [
    "SieveCompiler",
    "SieveScript",
    "emit_bytecode",
    "generate_bytecode",
    "load_bytecode",
    "parse",
]
