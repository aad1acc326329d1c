from __future__ import annotations

import json
import sys
from pathlib import Path

from .models import LanguageDefinition

DEFAULT_LANGUAGE_TABLE = Path(__file__).resolve().parent / "data" / "language_extensions.json"


class LanguageRegistry:
    def __init__(self, languages: list[LanguageDefinition] | None = None) -> None:
        self.languages: tuple[LanguageDefinition, ...] = tuple(languages or ())
        self._by_name: dict[str, list[LanguageDefinition]] = {}
        for lang in self.languages:
            self._by_name.setdefault(lang.name.casefold(), []).append(lang)

    def lookup(self, name: str) -> list[LanguageDefinition]:
        return list(self._by_name.get(name.strip().casefold(), []))

    def extensions_for(self, names: list[str] | tuple[str, ...]) -> set[str] | None:
        """
        Union of extensions of every known language among `names`.
        Returns None when none of the names is a known language.
        """
        matched = False
        out: set[str] = set()
        for name in names:
            for lang in self.lookup(name):
                matched = True
                out.update(lang.extensions)
        return out if matched else None


def parse_language_table(data: object) -> list[LanguageDefinition]:
    if not isinstance(data, list):
        raise ValueError("language table must be a JSON array")
    out: list[LanguageDefinition] = []
    for item in data:
        if not isinstance(item, dict):
            raise ValueError(f"language entry must be an object, got: {item!r}")
        name = str(item.get("name", "") or "").strip()
        if not name:
            continue
        exts = item.get("extensions") or []
        if not isinstance(exts, list):
            raise ValueError(f"extensions of {name!r} must be a list")
        out.append(
            LanguageDefinition(
                name=name,
                type=str(item.get("type", "") or ""),
                extensions=tuple(str(e) for e in exts if str(e)),
            )
        )
    return out


def load_language_registry(path: Path | None = None) -> LanguageRegistry:
    table_path = path if path is not None else DEFAULT_LANGUAGE_TABLE
    try:
        data = json.loads(table_path.read_text(encoding="utf-8"))
        languages = parse_language_table(data)
    except (OSError, ValueError) as e:
        print(f"Warning: could not load language table {table_path}: {e}", file=sys.stderr)
        print("Warning: language filtering will treat every requested language as unknown.", file=sys.stderr)
        return LanguageRegistry()
    return LanguageRegistry(languages)
