"""Rule-file pipeline: tokenize, parse, resolve, execute."""

from __future__ import annotations

from .executor import BuildReport, Executor, execute
from .lexer import tokenize
from .parser import MAX_COMMANDS, MAX_DEPENDENCIES, Rule, RuleTable, parse, parse_source
from .resolver import DependencyChain, resolve
from .tokens import Token, TokenKind

__all__ = [
    "BuildReport",
    "DependencyChain",
    "Executor",
    "MAX_COMMANDS",
    "MAX_DEPENDENCIES",
    "Rule",
    "RuleTable",
    "Token",
    "TokenKind",
    "execute",
    "parse",
    "parse_source",
    "resolve",
    "tokenize",
]
