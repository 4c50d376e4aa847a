"""Single-pass tokenizer for rule files."""

from __future__ import annotations

from ..core.source import Source, Span
from .tokens import Token, TokenKind

_NEWLINE = ord("\n")
_COLON = ord(":")
_HASH = ord("#")
_SPACE = ord(" ")
_TAB = ord("\t")

_WORD_STOP = frozenset((_SPACE, _TAB, _NEWLINE, _COLON))


def _line_end(data: bytes, start: int) -> int:
    end = data.find(b"\n", start)
    return len(data) if end < 0 else end


def tokenize(source: Source) -> list[Token]:
    """Split `source` into WORD, COLON, NEWLINE and COMMAND tokens.

    Never fails: every byte sequence has a tokenization. Spaces and `#`
    comments produce no tokens; the newline ending a comment does.
    """
    data = source.data
    size = len(data)
    tokens: list[Token] = []
    line = 1
    line_start = 0
    pos = 0
    while pos < size:
        byte = data[pos]
        column = pos - line_start + 1
        if byte == _NEWLINE:
            tokens.append(Token(TokenKind.NEWLINE, Span(source, pos, pos + 1), line, column))
            pos += 1
            line += 1
            line_start = pos
        elif byte == _COLON:
            tokens.append(Token(TokenKind.COLON, Span(source, pos, pos + 1), line, column))
            pos += 1
        elif byte == _HASH:
            pos = _line_end(data, pos)
        elif byte == _SPACE:
            pos += 1
        elif byte == _TAB:
            end = _line_end(data, pos + 1)
            tokens.append(Token(TokenKind.COMMAND, Span(source, pos + 1, end), line, column))
            pos = end
        else:
            end = pos + 1
            while end < size and data[end] not in _WORD_STOP:
                end += 1
            tokens.append(Token(TokenKind.WORD, Span(source, pos, end), line, column))
            pos = end
    return tokens
