from __future__ import annotations

import fnmatch
import re

from .languages import LanguageRegistry
from .models import FilterSpec


def file_extension(path: str) -> str:
    base = path.rsplit("/", 1)[-1]
    i = base.rfind(".")
    if i < 0:
        return ""
    return base[i:]


def is_malformed_glob(pattern: str) -> bool:
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if c == "\\":
            if i + 1 >= n:
                return True
            i += 2
            continue
        if c == "[":
            j = i + 1
            if j < n and pattern[j] in "!^":
                j += 1
            if j < n and pattern[j] == "]":
                j += 1
            close = pattern.find("]", j)
            if close < 0:
                return True
            i = close + 1
            continue
        i += 1
    return False


def to_fnmatch(segment: str) -> str:
    """
    Rewrite a shell glob segment (`\\` escapes, `[^...]` negation) into
    `fnmatch` syntax, where a backslash is literal and negation is `[!...]`.
    """
    out: list[str] = []
    i = 0
    n = len(segment)
    in_class = False
    while i < n:
        c = segment[i]
        if c == "\\" and i + 1 < n:
            esc = segment[i + 1]
            if in_class or esc not in "*?[":
                out.append(esc)
            else:
                out.append(f"[{esc}]")
            i += 2
            continue
        if not in_class and c == "[":
            in_class = True
            out.append(c)
            if i + 1 < n and segment[i + 1] in "^!":
                out.append("!")
                i += 1
            if i + 1 < n and segment[i + 1] == "]":
                out.append("]")
                i += 1
        elif in_class and c == "]":
            in_class = False
            out.append(c)
        else:
            out.append(c)
        i += 1
    return "".join(out)


def match_glob(path: str, pattern: str) -> bool:
    # `*` and `?` stay within one path segment.
    if not pattern or is_malformed_glob(pattern):
        return False
    pat_parts = pattern.split("/")
    path_parts = path.split("/")
    if len(pat_parts) != len(path_parts):
        return False
    try:
        return all(fnmatch.fnmatchcase(p, to_fnmatch(pat)) for p, pat in zip(path_parts, pat_parts))
    except re.error:
        return False


def matches_extension(path: str, extensions: tuple[str, ...] | None) -> bool:
    if not extensions:
        return True
    return file_extension(path) in extensions


def matches_language(path: str, languages: tuple[str, ...] | None, registry: LanguageRegistry) -> bool:
    if not languages:
        return True
    allowed = registry.extensions_for(languages)
    if allowed is None:
        # None of the requested languages is known: do not filter.
        return True
    return file_extension(path) in allowed


def is_excluded(path: str, patterns: tuple[str, ...] | None) -> bool:
    if not patterns:
        return False
    return any(match_glob(path, pat) for pat in patterns)


def matches_restriction(path: str, patterns: tuple[str, ...] | None) -> bool:
    if not patterns:
        return True
    return any(match_glob(path, pat) for pat in patterns)


def file_passes(path: str, spec: FilterSpec, registry: LanguageRegistry) -> bool:
    return (
        matches_extension(path, spec.extensions)
        and matches_language(path, spec.languages, registry)
        and not is_excluded(path, spec.exclude)
        and matches_restriction(path, spec.restrict_to)
    )


def select_files(paths: list[str], spec: FilterSpec, registry: LanguageRegistry) -> list[str]:
    return [p for p in paths if file_passes(p, spec, registry)]
