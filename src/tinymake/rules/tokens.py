from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..core.source import Span


class TokenKind(Enum):
    WORD = "word"
    COLON = "colon"
    NEWLINE = "newline"
    COMMAND = "command"


@dataclass(frozen=True)
class Token:
    """A lexeme of a rule file.

    `line` and `column` are 1-based and point at the first byte of the lexeme;
    for COMMAND that is the leading tab, which the span itself excludes.
    """

    kind: TokenKind
    span: Span
    line: int
    column: int

    @property
    def text(self) -> str:
        return self.span.text
