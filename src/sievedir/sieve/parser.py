"""Recursive-descent parser for the Sieve grammar (RFC 5228 section 8.2)."""

from __future__ import annotations

from sievedir.errors import ScriptParseError
from sievedir.sieve.checks import check_script
from sievedir.sieve.lexer import EOF, IDENT, NUMBER, PUNCTUATION, STRING, TAG, Token, tokenize
from sievedir.sieve.nodes import Argument, Command, SieveScript, StringList, Tag, Test

# Combined depth of nested tests and blocks.
MAX_PARSE_DEPTH = 128


def _describe(token: Token) -> str:
    if token.kind in PUNCTUATION:
        return PUNCTUATION[token.kind]
    if token.kind == EOF:
        return EOF
    return f"{token.kind} {token.value!r}"


class _Parser:
    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.index = 0
        self.depth = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def take(self) -> Token:
        token = self.tokens[self.index]
        if token.kind != EOF:
            self.index += 1
        return token

    def expect(self, kind: str, what: str) -> Token:
        token = self.current
        if token.kind != kind:
            raise ScriptParseError([f"line {token.line}: expected {what}, found {_describe(token)}"])
        return self.take()

    def descend(self, token: Token) -> None:
        self.depth += 1
        if self.depth > MAX_PARSE_DEPTH:
            raise ScriptParseError([f"line {token.line}: nesting too deep"])

    def parse_commands(self, *, nested: bool) -> list[Command]:
        commands: list[Command] = []
        while True:
            token = self.current
            if token.kind == EOF:
                if nested:
                    raise ScriptParseError([f"line {token.line}: missing '}}' at end of script"])
                return commands
            if token.kind == "}":
                if not nested:
                    raise ScriptParseError([f"line {token.line}: unexpected '}}'"])
                return commands
            commands.append(self.parse_command())

    def parse_command(self) -> Command:
        name = self.expect(IDENT, "command name")
        command = Command(name=str(name.value), line=name.line)
        command.arguments, command.tests, command.test_list = self.parse_arguments()

        token = self.current
        if token.kind == ";":
            self.take()
        elif token.kind == "{":
            self.descend(self.take())
            command.block = self.parse_commands(nested=True)
            self.expect("}", "'}'")
            self.depth -= 1
        else:
            raise ScriptParseError(
                [f"line {token.line}: expected ';' or '{{' after {command.name}, "
                 f"found {_describe(token)}"]
            )
        return command

    def parse_arguments(self) -> tuple[list[Argument], list[Test], bool]:
        arguments: list[Argument] = []
        while True:
            token = self.current
            if token.kind == TAG:
                arguments.append(Tag(str(self.take().value)))
            elif token.kind == NUMBER:
                arguments.append(int(self.take().value))
            elif token.kind == STRING:
                arguments.append(StringList([str(self.take().value)]))
            elif token.kind == "[":
                arguments.append(self.parse_string_list())
            else:
                break

        if self.current.kind == "(":
            return arguments, self.parse_test_list(), True
        if self.current.kind == IDENT:
            return arguments, [self.parse_test()], False
        return arguments, [], False

    def parse_string_list(self) -> StringList:
        self.take()
        values = [str(self.expect(STRING, "string").value)]
        while self.current.kind == ",":
            self.take()
            values.append(str(self.expect(STRING, "string").value))
        self.expect("]", "']'")
        return StringList(values, bracketed=True)

    def parse_test_list(self) -> list[Test]:
        self.take()
        tests = [self.parse_test()]
        while self.current.kind == ",":
            self.take()
            tests.append(self.parse_test())
        self.expect(")", "')'")
        return tests

    def parse_test(self) -> Test:
        name = self.expect(IDENT, "test name")
        self.descend(name)
        test = Test(name=str(name.value), line=name.line)
        test.arguments, test.tests, test.test_list = self.parse_arguments()
        self.depth -= 1
        return test


def parse(text: str) -> SieveScript:
    """Parse and check Sieve source.

    Raises:
        ScriptParseError: Carries one "line N: message" entry per problem.
    """
    parser = _Parser(tokenize(text))
    commands = parser.parse_commands(nested=False)
    script = SieveScript(commands=commands)
    errors = check_script(script)
    if errors:
        raise ScriptParseError(errors)
    return script
