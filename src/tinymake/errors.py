from __future__ import annotations

from dataclasses import dataclass

from .exit_codes import ERR_BUILD, ERR_CONFIG, ERR_INTERNAL, ERR_IO, ERR_PARSE, ERR_RESOLVE


@dataclass
class TinymakeError(Exception):
    message: str
    code: int = ERR_INTERNAL
    kind: str = "generic_error"

    def __str__(self) -> str:
        return self.message


@dataclass
class SourceError(TinymakeError):
    code: int = ERR_IO
    kind: str = "io_error"
    path: str = ""


@dataclass
class ConfigError(TinymakeError):
    code: int = ERR_CONFIG
    kind: str = "config_error"


@dataclass
class ParseError(TinymakeError):
    """Grammar or limit violation in a rule file.

    `line` is 0 when the input ended before the expected token.
    """

    code: int = ERR_PARSE
    kind: str = "parse_error"
    label: str = ""
    line: int = 0
    column: int = 0
    expected: str = ""
    found: str = ""
    found_text: str = ""


@dataclass
class CycleError(TinymakeError):
    code: int = ERR_RESOLVE
    kind: str = "cycle_error"
    cycle: tuple[str, ...] = ()


@dataclass
class BuildError(TinymakeError):
    code: int = ERR_BUILD
    kind: str = "build_error"
    target: str = ""
    context: str = ""
