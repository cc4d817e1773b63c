import io

import pytest

from sievedir.errors import BytecodeError
from sievedir.sieve import SieveCompiler, load_bytecode, parse
from sievedir.sieve.bytecode import BYTECODE_FORMAT, emit_bytecode, generate_bytecode


def test_generate_is_deterministic() -> None:
    source = 'require "fileinto";\nif header :is "to" "me" { fileinto "Me"; }'
    assert generate_bytecode(parse(source)) == generate_bytecode(parse(source))


def test_generate_document_shape() -> None:
    document = load_bytecode(generate_bytecode(parse('if size :under 1K { keep; } stop;')))

    assert document["format"] == BYTECODE_FORMAT
    assert document["require"] == []
    commands = document["commands"]
    assert isinstance(commands, list)
    assert [command["command"] for command in commands] == ["if", "stop"]
    assert commands[0]["tests"] == [
        {"test": "size", "line": 1, "args": [{"tag": ":under"}, {"number": 1024}]}
    ]
    assert commands[0]["block"] == [{"command": "keep", "line": 1}]


def test_generate_rejects_deep_nesting() -> None:
    script = parse("if not not not true { keep; }")
    with pytest.raises(BytecodeError, match="nesting exceeds 3 levels"):
        generate_bytecode(script, max_nesting=3)


def test_emit_writes_and_detects_short_write() -> None:
    buffer = io.BytesIO()
    emit_bytecode(b"abc", buffer)
    assert buffer.getvalue() == b"abc"

    class _Short(io.BytesIO):
        def write(self, data) -> int:
            super().write(data[:1])
            return 1

    with pytest.raises(BytecodeError, match="short write"):
        emit_bytecode(b"abc", _Short())


@pytest.mark.parametrize(
    "data",
    [b"\xff", b"not json", b"[]", b'{"format": "other"}', b'{"format": "sievedir-bytecode"}'],
)
def test_load_bytecode_rejects_foreign_data(data: bytes) -> None:
    with pytest.raises(BytecodeError):
        load_bytecode(data)


def test_compiler_reads_nesting_limit_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    from sievedir.config import get_settings

    monkeypatch.setenv("SIEVE_MAX_NESTING", "7")
    get_settings.cache_clear()

    assert SieveCompiler().max_nesting == 7
    assert SieveCompiler(max_nesting=3).max_nesting == 3
