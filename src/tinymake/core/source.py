"""Rule-file buffer and the byte spans that point into it."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ..errors import SourceError


@dataclass(frozen=True)
class Source:
    """Immutable rule-file bytes plus the label used in diagnostics."""

    label: str
    data: bytes = field(repr=False)

    @classmethod
    def from_text(cls, text: str, label: str = "<string>") -> Source:
        return cls(label=label, data=text.encode("utf-8", errors="surrogateescape"))

    def __len__(self) -> int:
        return len(self.data)

    def decode(self, start: int, end: int) -> str:
        return self.data[start:end].decode("utf-8", errors="surrogateescape")


@dataclass(frozen=True, eq=False)
class Span:
    """Half-open byte range [start, end) of a Source."""

    source: Source = field(repr=False)
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start or self.end > len(self.source):
            raise ValueError(f"invalid span range {self.start}:{self.end}")

    def __len__(self) -> int:
        return self.end - self.start

    def __bytes__(self) -> bytes:
        return self.source.data[self.start : self.end]

    @property
    def text(self) -> str:
        return self.source.decode(self.start, self.end)


def printable(text: str) -> str:
    """Render decoded rule-file text for a terminal; undecodable bytes become `\\xNN`."""
    return text.encode("utf-8", errors="surrogateescape").decode("utf-8", errors="backslashreplace")


def read_source(path: Path, label: str | None = None) -> Source:
    try:
        data = path.read_bytes()
    except OSError as exc:
        reason = exc.strerror or str(exc)
        raise SourceError(f"{path}: {reason}", path=str(path)) from exc
    return Source(label=label or str(path), data=data)
