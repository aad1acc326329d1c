from __future__ import annotations

import csv
import io
import json

from .config import ConfigError
from .models import AuthorStat

HEADER = ("Name", "Lines", "Commits", "Files")
FORMATS = ("tabular", "csv", "json", "json-lines")


def _rows(stats: list[AuthorStat]) -> list[tuple[str, str, str, str]]:
    return [(st.name, str(st.lines), str(st.commits), str(st.files)) for st in stats]


def render_tabular(stats: list[AuthorStat]) -> str:
    rows = [HEADER, *_rows(stats)]
    # Every column but the last is padded to its widest cell plus one space.
    widths = [max(len(r[i]) for r in rows) + 1 for i in range(len(HEADER) - 1)]
    lines = []
    for r in rows:
        cells = [r[i].ljust(widths[i]) for i in range(len(widths))]
        lines.append("".join(cells) + r[-1])
    return "\n".join(lines) + "\n"


def render_csv(stats: list[AuthorStat]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(HEADER)
    for r in _rows(stats):
        writer.writerow(r)
    return buf.getvalue()


def _dumps(data: object) -> str:
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def render_json(stats: list[AuthorStat]) -> str:
    return _dumps([st.to_dict() for st in stats]) + "\n"


def render_json_lines(stats: list[AuthorStat]) -> str:
    return "".join(_dumps(st.to_dict()) + "\n" for st in stats)


_RENDERERS = {
    "tabular": render_tabular,
    "csv": render_csv,
    "json": render_json,
    "json-lines": render_json_lines,
}


def render_stats(stats: list[AuthorStat], fmt: str = "tabular") -> str:
    renderer = _RENDERERS.get(fmt)
    if renderer is None:
        raise ConfigError(f"unknown format {fmt!r} (expected one of: {', '.join(FORMATS)})")
    return renderer(stats)
