from __future__ import annotations

import dataclasses


@dataclasses.dataclass
class AuthorStat:
    name: str = ""
    lines: int = 0
    commits: int = 0
    files: int = 0

    def to_dict(self) -> dict[str, object]:
        return {"name": self.name, "lines": self.lines, "commits": self.commits, "files": self.files}


@dataclasses.dataclass(frozen=True)
class LanguageDefinition:
    name: str
    type: str = ""
    extensions: tuple[str, ...] = ()


@dataclasses.dataclass(frozen=True)
class FilterSpec:
    extensions: tuple[str, ...] | None = None
    languages: tuple[str, ...] | None = None
    exclude: tuple[str, ...] | None = None
    restrict_to: tuple[str, ...] | None = None


@dataclasses.dataclass(frozen=True)
class AttributionEvent:
    commit: str
    author: str
    lines: int


@dataclasses.dataclass
class FileAttribution:
    path: str
    strategy: str  # "blame" | "log"
    claims: list[tuple[str, str]] = dataclasses.field(default_factory=list)  # (commit, author)
    events: list[AttributionEvent] = dataclasses.field(default_factory=list)
