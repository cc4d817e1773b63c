"""Semantic checks for parsed Sieve scripts.

Each supported command and test is described by a signature: the tags it
accepts (and the kind of value that follows each tag), the positional
arguments it expects, and whether it takes tests or a block. Extensions must
be declared with ``require`` before the commands and tests they enable.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sievedir.sieve.nodes import Argument, Command, SieveScript, StringList, Tag, Test

STRING_ARG = "string"
STRINGLIST_ARG = "string-list"
NUMBER_ARG = "number"

SUPPORTED_EXTENSIONS = frozenset(
    {
        "fileinto",
        "reject",
        "envelope",
        "vacation",
        "comparator-i;octet",
        "comparator-i;ascii-casemap",
    }
)


@dataclass(frozen=True, slots=True)
class Signature:
    tags: dict[str, str | None] = field(default_factory=dict)
    exclusive: tuple[frozenset[str], ...] = ()
    positional: tuple[str, ...] = ()
    tests: str = "none"
    block: bool = False
    extension: str | None = None


_MATCH_TAGS: dict[str, str | None] = {
    ":is": None,
    ":contains": None,
    ":matches": None,
    ":comparator": STRING_ARG,
}
_MATCH_GROUP = frozenset({":is", ":contains", ":matches"})
_ADDRESS_PART_TAGS: dict[str, str | None] = {":all": None, ":localpart": None, ":domain": None}
_ADDRESS_GROUP = frozenset(_ADDRESS_PART_TAGS)

COMMANDS: dict[str, Signature] = {
    "require": Signature(positional=(STRINGLIST_ARG,)),
    "if": Signature(tests="one", block=True),
    "elsif": Signature(tests="one", block=True),
    "else": Signature(block=True),
    "stop": Signature(),
    "keep": Signature(),
    "discard": Signature(),
    "redirect": Signature(positional=(STRING_ARG,)),
    "fileinto": Signature(positional=(STRING_ARG,), extension="fileinto"),
    "reject": Signature(positional=(STRING_ARG,), extension="reject"),
    "vacation": Signature(
        tags={
            ":days": NUMBER_ARG,
            ":subject": STRING_ARG,
            ":from": STRING_ARG,
            ":addresses": STRINGLIST_ARG,
            ":mime": None,
            ":handle": STRING_ARG,
        },
        positional=(STRING_ARG,),
        extension="vacation",
    ),
}

TESTS: dict[str, Signature] = {
    "true": Signature(),
    "false": Signature(),
    "not": Signature(tests="one"),
    "anyof": Signature(tests="list"),
    "allof": Signature(tests="list"),
    "exists": Signature(positional=(STRINGLIST_ARG,)),
    "header": Signature(
        tags=_MATCH_TAGS,
        exclusive=(_MATCH_GROUP,),
        positional=(STRINGLIST_ARG, STRINGLIST_ARG),
    ),
    "address": Signature(
        tags={**_MATCH_TAGS, **_ADDRESS_PART_TAGS},
        exclusive=(_MATCH_GROUP, _ADDRESS_GROUP),
        positional=(STRINGLIST_ARG, STRINGLIST_ARG),
    ),
    "envelope": Signature(
        tags={**_MATCH_TAGS, **_ADDRESS_PART_TAGS},
        exclusive=(_MATCH_GROUP, _ADDRESS_GROUP),
        positional=(STRINGLIST_ARG, STRINGLIST_ARG),
        extension="envelope",
    ),
    "size": Signature(
        tags={":over": None, ":under": None},
        exclusive=(frozenset({":over", ":under"}),),
        positional=(NUMBER_ARG,),
    ),
}

_CONTROL_CHAIN = {"if", "elsif"}


def _matches(kind: str, value: Argument) -> bool:
    if kind == NUMBER_ARG:
        return isinstance(value, int)
    if not isinstance(value, StringList):
        return False
    if kind == STRING_ARG:
        return not value.bracketed and len(value.values) == 1
    return True


class _Checker:
    def __init__(self) -> None:
        self.errors: list[str] = []
        self.require: list[str] = []

    def error(self, line: int, message: str) -> None:
        self.errors.append(f"line {line}: {message}")

    def check_signature(self, node: Command | Test, kind: str, signature: Signature) -> None:
        if signature.extension and signature.extension not in self.require:
            self.error(
                node.line,
                f"{kind} '{node.name}' requires extension \"{signature.extension}\"",
            )

        positional: list[Argument] = []
        seen: list[str] = []
        arguments = list(node.arguments)
        while arguments:
            argument = arguments.pop(0)
            if not isinstance(argument, Tag):
                positional.append(argument)
                continue
            if positional:
                self.error(node.line, f"tag {argument.name} must precede other arguments")
            if argument.name not in signature.tags:
                self.error(node.line, f"unexpected tag {argument.name} for {kind} '{node.name}'")
                continue
            if argument.name in seen:
                self.error(node.line, f"duplicate tag {argument.name}")
            seen.append(argument.name)
            value_kind = signature.tags[argument.name]
            if value_kind is None:
                continue
            if not arguments or not _matches(value_kind, arguments[0]):
                self.error(node.line, f"tag {argument.name} expects a {value_kind}")
                continue
            value = arguments.pop(0)
            if argument.name == ":comparator" and isinstance(value, StringList):
                self.check_comparator(node.line, value.values[0])

        for group in signature.exclusive:
            if len([name for name in seen if name in group]) > 1:
                self.error(node.line, f"only one of {', '.join(sorted(group))} is allowed")
        if node.name == "size" and not any(name in seen for name in (":over", ":under")):
            self.error(node.line, "size test requires :over or :under")

        if len(positional) != len(signature.positional):
            self.error(
                node.line,
                f"{kind} '{node.name}' expects {len(signature.positional)} argument(s), "
                f"got {len(positional)}",
            )
        else:
            for expected, value in zip(signature.positional, positional):
                if not _matches(expected, value):
                    self.error(node.line, f"{kind} '{node.name}' expects a {expected} argument")

        if signature.tests == "none" and node.tests:
            self.error(node.line, f"{kind} '{node.name}' does not take a test")
        elif signature.tests == "one" and (len(node.tests) != 1 or node.test_list):
            self.error(node.line, f"{kind} '{node.name}' requires exactly one test")
        elif signature.tests == "list" and not node.test_list:
            self.error(node.line, f"{kind} '{node.name}' requires a test list")

        for test in node.tests:
            self.check_test(test)

    def check_comparator(self, line: int, name: str) -> None:
        if f"comparator-{name}" not in SUPPORTED_EXTENSIONS:
            self.error(line, f"unsupported comparator \"{name}\"")

    def check_test(self, test: Test) -> None:
        signature = TESTS.get(test.name)
        if signature is None:
            self.error(test.line, f"unknown test '{test.name}'")
            return
        self.check_signature(test, "test", signature)

    def check_commands(self, commands: list[Command], *, top_level: bool) -> None:
        previous: str | None = None
        requires_allowed = top_level
        for command in commands:
            signature = COMMANDS.get(command.name)
            if signature is None:
                self.error(command.line, f"unknown command '{command.name}'")
                previous = command.name
                requires_allowed = False
                continue

            if command.name == "require":
                if not requires_allowed:
                    self.error(command.line, "require must come before other commands")
                self.collect_require(command)
            else:
                requires_allowed = False

            if command.name in ("elsif", "else") and previous not in _CONTROL_CHAIN:
                self.error(command.line, f"'{command.name}' without a preceding 'if'")

            self.check_signature(command, "command", signature)
            if signature.block and command.block is None:
                self.error(command.line, f"command '{command.name}' requires a block")
            elif not signature.block and command.block is not None:
                self.error(command.line, f"command '{command.name}' does not take a block")
            if command.block is not None:
                self.check_commands(command.block, top_level=False)
            previous = command.name

    def collect_require(self, command: Command) -> None:
        for argument in command.arguments:
            if not isinstance(argument, StringList):
                continue
            for extension in argument.values:
                if extension not in SUPPORTED_EXTENSIONS:
                    self.error(command.line, f"unsupported extension \"{extension}\"")
                elif extension not in self.require:
                    self.require.append(extension)


def check_script(script: SieveScript) -> list[str]:
    """Check ``script`` in place, filling its ``require`` list; return the errors."""
    checker = _Checker()
    checker.check_commands(script.commands, top_level=True)
    script.require = list(checker.require)
    return checker.errors
