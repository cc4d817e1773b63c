"""Installation of new or replacement scripts.

A script is compiled before anything touches the repository. The source and
compiled form are then written under ``.NEW`` names and renamed onto their
canonical names, source first. Only the individual renames are atomic: a
failure of the second one leaves the new source installed next to the
previous compiled form.
"""

from __future__ import annotations

import logging
import os
import re

from sievedir.errors import BytecodeError, ScriptParseError
from sievedir.store.types import (
    MAX_NAME_LENGTH,
    NEW_SUFFIX,
    Outcome,
    PutResult,
    ScriptCompiler,
    bytecode_path,
    script_path,
)

logger = logging.getLogger(__name__)

_LINE_END_RE = re.compile(rb"\r\n|\r|\n")


def valid_name(name: str) -> bool:
    """Everything but '/' and NUL is valid, up to MAX_NAME_LENGTH - 1 characters."""
    if not name:
        return False
    if "/" in name or "\0" in name:
        return False
    return len(name) < MAX_NAME_LENGTH


def normalize_line_endings(data: bytes) -> bytes:
    """Replace every lone CR or LF with a CRLF pair.

    Stored scripts may be quoted in notification messages, which must be
    SMTP compatible.
    """
    return _LINE_END_RE.sub(b"\r\n", data)


def _default_compiler() -> ScriptCompiler:
    from sievedir.sieve import SieveCompiler

    return SieveCompiler()


def _encode_source(content: str) -> bytes:
    """Encode ``content`` for storage.

    Raises:
        ScriptParseError: The text holds characters UTF-8 cannot represent.
    """
    try:
        return normalize_line_endings(content.encode("utf-8"))
    except UnicodeEncodeError as exc:
        raise ScriptParseError(
            [f"script cannot be encoded as UTF-8 at offset {exc.start}: {exc.reason}"]
        ) from exc


def _discard(*paths: str) -> None:
    for path in paths:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("IOERROR: unlink(%s): %s", path, exc.strerror)


def check_script(content: str, compiler: ScriptCompiler | None = None) -> PutResult:
    """Parse and generate ``content`` without writing anything."""
    compiler = compiler or _default_compiler()
    try:
        _encode_source(content)
        parsed = compiler.parse(content)
    except ScriptParseError as exc:
        return PutResult(Outcome.INVALID, exc.errors)
    try:
        compiler.generate(parsed)
    except BytecodeError as exc:
        logger.error("Bytecode generation failed: %s", exc)
        return PutResult(Outcome.FAIL)
    return PutResult(Outcome.OK)


def put_script(
    sievedir: str | os.PathLike[str],
    name: str,
    content: str,
    compiler: ScriptCompiler | None = None,
) -> PutResult:
    """Compile ``content`` and install it as script ``name``.

    The name is not validated here; callers check it with valid_name().
    """
    compiler = compiler or _default_compiler()

    try:
        data = _encode_source(content)
        parsed = compiler.parse(content)
    except ScriptParseError as exc:
        return PutResult(Outcome.INVALID, exc.errors)

    final_path = script_path(sievedir, name)
    new_path = final_path + NEW_SUFFIX
    try:
        with open(new_path, "wb") as fh:
            fh.write(data)
    except OSError as exc:
        logger.error("IOERROR: fopen(%s): %s", new_path, exc.strerror)
        _discard(new_path)
        return PutResult(Outcome.IOERROR)

    try:
        bytecode = compiler.generate(parsed)
    except BytecodeError as exc:
        logger.error("Bytecode generation failed for %s: %s", name, exc)
        _discard(new_path)
        return PutResult(Outcome.FAIL)

    final_bcpath = bytecode_path(sievedir, name)
    new_bcpath = final_bcpath + NEW_SUFFIX
    try:
        fd = os.open(new_bcpath, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, 0o600)
    except OSError as exc:
        logger.error("IOERROR: open(%s): %s", new_bcpath, exc.strerror)
        _discard(new_path)
        return PutResult(Outcome.IOERROR)

    try:
        with os.fdopen(fd, "wb") as fh:
            compiler.emit(bytecode, fh)
    except BytecodeError as exc:
        logger.error("Bytecode emission failed for %s: %s", name, exc)
        _discard(new_path, new_bcpath)
        return PutResult(Outcome.FAIL)
    except OSError as exc:
        logger.error("IOERROR: write(%s): %s", new_bcpath, exc.strerror)
        _discard(new_path, new_bcpath)
        return PutResult(Outcome.IOERROR)

    # A failed rename here is unexpected; the temporaries stay for inspection.
    try:
        os.rename(new_path, final_path)
    except OSError as exc:
        logger.error("IOERROR: rename(%s, %s): %s", new_path, final_path, exc.strerror)
        return PutResult(Outcome.IOERROR)

    try:
        os.rename(new_bcpath, final_bcpath)
    except OSError as exc:
        logger.error("IOERROR: rename(%s, %s): %s", new_bcpath, final_bcpath, exc.strerror)
        return PutResult(Outcome.IOERROR)

    logger.info("Installed script %s", name)
    return PutResult(Outcome.OK)
