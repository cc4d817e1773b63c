"""Tokenizer for Sieve script source (RFC 5228 section 8.1)."""

from __future__ import annotations

from dataclasses import dataclass

from sievedir.errors import ScriptParseError

IDENT = "identifier"
TAG = "tag"
NUMBER = "number"
STRING = "string"
EOF = "end of script"

PUNCTUATION = {
    "[": "'['",
    "]": "']'",
    "(": "'('",
    ")": "')'",
    "{": "'{'",
    "}": "'}'",
    ",": "','",
    ";": "';'",
}

_QUANTIFIERS = {"K": 1 << 10, "M": 1 << 20, "G": 1 << 30}


@dataclass(frozen=True, slots=True)
class Token:
    kind: str
    value: str | int
    line: int


def _is_ident_start(char: str) -> bool:
    return char.isascii() and (char.isalpha() or char == "_")


def _is_ident_char(char: str) -> bool:
    return char.isascii() and (char.isalnum() or char == "_")


class _Lexer:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.line = 1
        self.tokens: list[Token] = []

    def fail(self, message: str, line: int | None = None) -> ScriptParseError:
        return ScriptParseError([f"line {line or self.line}: {message}"])

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def advance(self) -> str:
        char = self.text[self.pos]
        self.pos += 1
        if char == "\n":
            self.line += 1
        return char

    def run(self) -> list[Token]:
        while self.pos < len(self.text):
            char = self.peek()
            if char in " \t\r\n":
                self.advance()
            elif char == "#":
                self.skip_line()
            elif char == "/" and self.peek(1) == "*":
                self.skip_bracket_comment()
            elif char in PUNCTUATION:
                self.tokens.append(Token(char, char, self.line))
                self.advance()
            elif char == '"':
                self.read_quoted()
            elif char == ":":
                self.read_tag()
            elif char.isascii() and char.isdigit():
                self.read_number()
            elif _is_ident_start(char):
                self.read_identifier()
            else:
                raise self.fail(f"unexpected character {char!r}")
        self.tokens.append(Token(EOF, "", self.line))
        return self.tokens

    def skip_line(self) -> None:
        while self.pos < len(self.text) and self.peek() != "\n":
            self.advance()

    def skip_bracket_comment(self) -> None:
        start = self.line
        self.pos += 2
        while self.pos < len(self.text):
            if self.peek() == "*" and self.peek(1) == "/":
                self.pos += 2
                return
            self.advance()
        raise self.fail("unterminated comment", start)

    def read_quoted(self) -> None:
        start = self.line
        self.advance()
        chars: list[str] = []
        while self.pos < len(self.text):
            char = self.advance()
            if char == '"':
                self.tokens.append(Token(STRING, "".join(chars), start))
                return
            if char == "\\":
                if self.pos >= len(self.text):
                    break
                char = self.advance()
            chars.append(char)
        raise self.fail("unterminated string", start)

    def read_tag(self) -> None:
        self.advance()
        if not _is_ident_start(self.peek()):
            raise self.fail("expected tag name after ':'")
        start = self.pos
        while _is_ident_char(self.peek()):
            self.advance()
        self.tokens.append(Token(TAG, ":" + self.text[start : self.pos].lower(), self.line))

    def read_number(self) -> None:
        start = self.pos
        while self.peek().isascii() and self.peek().isdigit():
            self.advance()
        value = int(self.text[start : self.pos])
        quantifier = self.peek().upper()
        if quantifier in _QUANTIFIERS:
            self.advance()
            value *= _QUANTIFIERS[quantifier]
        self.tokens.append(Token(NUMBER, value, self.line))

    def read_identifier(self) -> None:
        start = self.pos
        while _is_ident_char(self.peek()):
            self.advance()
        word = self.text[start : self.pos].lower()
        if word == "text" and self.peek() == ":":
            self.advance()
            self.read_multiline()
            return
        self.tokens.append(Token(IDENT, word, self.line))

    def read_multiline(self) -> None:
        start = self.line
        while self.peek() in (" ", "\t"):
            self.advance()
        if self.peek() == "#":
            self.skip_line()
        if self.peek() == "\r" and self.peek(1) == "\n":
            self.advance()
        if self.peek() != "\n":
            raise self.fail("expected end of line after 'text:'")
        self.advance()

        lines: list[str] = []
        while self.pos < len(self.text):
            end = self.text.find("\n", self.pos)
            if end < 0:
                end = len(self.text)
            line = self.text[self.pos : end].removesuffix("\r")
            while self.pos < min(end + 1, len(self.text)):
                self.advance()
            if line == ".":
                value = "".join(item + "\r\n" for item in lines)
                self.tokens.append(Token(STRING, value, start))
                return
            # dot-stuffing
            lines.append(line[1:] if line.startswith("..") else line)
        raise self.fail("unterminated multi-line string", start)


def tokenize(text: str) -> list[Token]:
    """Split ``text`` into tokens, ending with an EOF token.

    Raises:
        ScriptParseError: The text contains a lexical error.
    """
    return _Lexer(text).run()
