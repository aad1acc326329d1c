from __future__ import annotations

import dataclasses
import enum

from .models import AttributionEvent, FileAttribution

PLACEHOLDER_AUTHOR = "emptyAuthor"

# Header lines in `git blame --porcelain` output start with one of these
# words (`author-mail`, `committer-tz`, ... included).
METADATA_KEYWORDS = ("author", "committer", "summary", "boundary", "filename", "previous")


class BlameParseError(ValueError):
    pass


class LogParseError(ValueError):
    pass


class LineKind(enum.Enum):
    COMMIT_HEADER = "commit-header"
    AUTHOR = "author"
    COMMITTER = "committer"
    FILENAME = "filename"
    CONTENT = "content"
    METADATA = "metadata"
    BLANK = "blank"


@dataclasses.dataclass(frozen=True)
class BlameLine:
    kind: LineKind
    value: str = ""


def classify_line(line: str) -> BlameLine:
    if line.startswith("\t"):
        return BlameLine(LineKind.CONTENT, line[1:])
    if not line:
        return BlameLine(LineKind.BLANK)
    if line.startswith("author "):
        return BlameLine(LineKind.AUTHOR, line[len("author ") :])
    if line.startswith("committer "):
        return BlameLine(LineKind.COMMITTER, line[len("committer ") :])
    if line.startswith("filename "):
        return BlameLine(LineKind.FILENAME, line[len("filename ") :])
    if line.startswith(METADATA_KEYWORDS):
        return BlameLine(LineKind.METADATA, line)
    return BlameLine(LineKind.COMMIT_HEADER, line.split(" ", 1)[0])


class ParserState(enum.Enum):
    AWAITING_HEADER = "awaiting-header"
    IN_COMMIT_BLOCK = "in-commit-block"


class BlameParser:
    """
    Streaming parser for one file's `git blame --porcelain` record.

    Feed lines with `feed()` (or a whole text with `feed_text()`) and call
    `finish()` to get the file's claims and per-commit line counts.
    A claim `(commit, author)` is recorded at every `filename` line; the
    first claim of a commit in this file binds the commit to its author.
    """

    def __init__(self, path: str, *, use_committer: bool = False) -> None:
        self.path = path
        self.use_committer = use_committer
        self.state = ParserState.AWAITING_HEADER
        self.commit = ""
        self.author = PLACEHOLDER_AUTHOR
        self._claims: list[tuple[str, str]] = []
        self._commit_author: dict[str, str] = {}
        self._line_counts: dict[str, int] = {}
        self._line_number = 0

    def feed(self, raw_line: str) -> None:
        self._line_number += 1
        line = classify_line(raw_line.rstrip("\n"))
        if line.kind is LineKind.COMMIT_HEADER:
            self.commit = line.value
            self.state = ParserState.IN_COMMIT_BLOCK
        elif line.kind is LineKind.AUTHOR:
            self.author = line.value
        elif line.kind is LineKind.COMMITTER:
            if self.use_committer:
                self.author = line.value
        elif line.kind is LineKind.FILENAME:
            if self.state is not ParserState.IN_COMMIT_BLOCK:
                raise BlameParseError(f"{self.path}: line {self._line_number}: filename before any commit header")
            self._claims.append((self.commit, self.author))
            self._commit_author.setdefault(self.commit, self.author)
        elif line.kind is LineKind.CONTENT:
            if self.state is not ParserState.IN_COMMIT_BLOCK:
                raise BlameParseError(f"{self.path}: line {self._line_number}: content line before any commit header")
            if self.commit not in self._line_counts:
                self._line_counts[self.commit] = 0
                self._commit_author.setdefault(self.commit, self.author)
            self._line_counts[self.commit] += 1

    def feed_text(self, text: str) -> None:
        for raw_line in text.split("\n"):
            self.feed(raw_line)

    def finish(self) -> FileAttribution:
        events = [
            AttributionEvent(commit=commit, author=self._commit_author[commit], lines=n)
            for commit, n in self._line_counts.items()
        ]
        return FileAttribution(path=self.path, strategy="blame", claims=list(self._claims), events=events)


def parse_last_commit_log(text: str) -> tuple[str, str]:
    """Return `(commit, author name)` of the first entry of a `git log` output."""
    commit = ""
    author = ""
    have_author = False
    for line in text.split("\n"):
        if not commit and line.startswith("commit "):
            parts = line.split()
            if len(parts) >= 2:
                commit = parts[1]
        elif not have_author and line.startswith("Author: "):
            ident = line[len("Author: ") :]
            i = ident.rfind("<")
            author = (ident[:i] if i >= 0 else ident).rstrip()
            have_author = True
        if commit and have_author:
            break
    if not commit:
        raise LogParseError("no `commit <token>` line in git log output")
    if not have_author:
        raise LogParseError(f"no `Author:` line in git log output for commit {commit}")
    return commit, author


def has_attributable_lines(blame_text: str) -> bool:
    return bool(blame_text)


def attribute_from_blame(path: str, blame_text: str, *, use_committer: bool = False) -> FileAttribution:
    parser = BlameParser(path, use_committer=use_committer)
    parser.feed_text(blame_text)
    return parser.finish()


def attribute_from_log(path: str, log_text: str) -> FileAttribution:
    commit, author = parse_last_commit_log(log_text)
    return FileAttribution(path=path, strategy="log", claims=[(commit, author)], events=[])
