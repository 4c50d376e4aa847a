"""Recursive-descent parser turning tokens into a rule table.

Grammar::

    recipe       = WORD COLON dependencies NEWLINE commands
    dependencies = WORD*
    commands     = (COMMAND NEWLINE?)*
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from ..core.source import Source, Span
from ..errors import ParseError
from .lexer import tokenize
from .tokens import Token, TokenKind

MAX_DEPENDENCIES = 64
MAX_COMMANDS = 128


@dataclass(frozen=True)
class Rule:
    target: Span
    dependencies: tuple[Span, ...]
    commands: tuple[Span, ...]
    line: int

    @property
    def name(self) -> str:
        return self.target.text

    def dependency_names(self) -> list[str]:
        return [dep.text for dep in self.dependencies]

    def command_lines(self) -> list[str]:
        return [cmd.text for cmd in self.commands]


class RuleTable(Sequence[Rule]):
    """Rules in declaration order.

    Several rules may share a target; `lookup` returns the first declared.
    """

    def __init__(self, rules: Sequence[Rule] = ()) -> None:
        self._rules = tuple(rules)
        self._by_name: dict[bytes, list[Rule]] = {}
        for rule in self._rules:
            self._by_name.setdefault(bytes(rule.target), []).append(rule)

    def __getitem__(self, index):  # noqa: ANN001, ANN204
        return self._rules[index]

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __repr__(self) -> str:
        return f"RuleTable({[rule.name for rule in self._rules]!r})"

    def rules_for(self, name: str) -> list[Rule]:
        return list(self._by_name.get(_key(name), ()))

    def lookup(self, name: str) -> Rule | None:
        matches = self._by_name.get(_key(name))
        return matches[0] if matches else None

    def targets(self) -> list[str]:
        return [rule.name for rule in self._rules]

    def default_target(self) -> str | None:
        return self._rules[0].name if self._rules else None


def _key(name: str) -> bytes:
    return name.encode("utf-8", errors="surrogateescape")


class _Parser:
    def __init__(self, tokens: Sequence[Token], label: str) -> None:
        self._tokens = tokens
        self._label = label
        self._pos = 0

    def parse(self) -> list[Rule]:
        rules: list[Rule] = []
        while True:
            self._skip_newlines()
            if self._at_end():
                return rules
            rules.append(self._recipe())

    def _at_end(self) -> bool:
        return self._pos >= len(self._tokens)

    def _peek(self) -> Token | None:
        return None if self._at_end() else self._tokens[self._pos]

    def _check(self, kind: TokenKind) -> bool:
        tok = self._peek()
        return tok is not None and tok.kind is kind

    def _skip_newlines(self) -> None:
        while self._check(TokenKind.NEWLINE):
            self._pos += 1

    def _expect(self, kind: TokenKind, what: str) -> Token:
        tok = self._peek()
        if tok is None or tok.kind is not kind:
            raise self._error(what, tok)
        self._pos += 1
        return tok

    def _recipe(self) -> Rule:
        target = self._expect(TokenKind.WORD, "target")
        self._expect(TokenKind.COLON, "colon")

        dependencies: list[Span] = []
        while self._check(TokenKind.WORD):
            tok = self._tokens[self._pos]
            if len(dependencies) == MAX_DEPENDENCIES:
                raise self._limit("too many dependencies", tok)
            dependencies.append(tok.span)
            self._pos += 1

        self._expect(TokenKind.NEWLINE, "newline")
        if self._check(TokenKind.NEWLINE):
            raise self._error("command(s)", self._peek())

        commands: list[Span] = []
        while self._check(TokenKind.COMMAND):
            tok = self._tokens[self._pos]
            if len(commands) == MAX_COMMANDS:
                raise self._limit("too many commands", tok)
            commands.append(tok.span)
            self._pos += 1
            # the last command of the file may lack its newline
            if self._check(TokenKind.NEWLINE):
                self._pos += 1

        return Rule(target=target.span, dependencies=tuple(dependencies), commands=tuple(commands), line=target.line)

    def _error(self, expected: str, tok: Token | None) -> ParseError:
        if tok is None:
            return ParseError(
                f"{self._label}: unexpected end of file, expected {expected}",
                label=self._label,
                expected=expected,
            )
        return ParseError(
            f'{self._label}:{tok.line}:{tok.column}: expected {expected}, got {tok.kind.value}: "{tok.text}"',
            label=self._label,
            line=tok.line,
            column=tok.column,
            expected=expected,
            found=tok.kind.value,
            found_text=tok.text,
        )

    def _limit(self, message: str, tok: Token) -> ParseError:
        return ParseError(
            f"{self._label}:{tok.line}:{tok.column}: {message}",
            label=self._label,
            line=tok.line,
            column=tok.column,
            found=tok.kind.value,
            found_text=tok.text,
        )


def parse(tokens: Sequence[Token], label: str = "<string>") -> RuleTable:
    """Build a RuleTable from `tokens`; any error aborts the whole parse."""
    return RuleTable(_Parser(tokens, label).parse())


def parse_source(source: Source) -> RuleTable:
    return parse(tokenize(source), source.label)
