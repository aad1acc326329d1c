from __future__ import annotations

from collections.abc import Callable, Iterable

from .config import ConfigError
from .models import AuthorStat

# Primary metric first, then the fixed tie-breaks; name ascending comes last.
ORDER_METRICS: dict[str, tuple[str, str, str]] = {
    "lines": ("lines", "commits", "files"),
    "commits": ("commits", "lines", "files"),
    "files": ("files", "lines", "commits"),
}
ORDER_KEYS = tuple(ORDER_METRICS)


def sort_key_for(order_by: str) -> Callable[[AuthorStat], tuple[int, int, int, str]]:
    metrics = ORDER_METRICS.get(order_by)
    if metrics is None:
        raise ConfigError(f"unknown order {order_by!r} (expected one of: {', '.join(ORDER_KEYS)})")
    a, b, c = metrics

    def key(st: AuthorStat) -> tuple[int, int, int, str]:
        return (-getattr(st, a), -getattr(st, b), -getattr(st, c), st.name)

    return key


def rank_stats(stats: Iterable[AuthorStat], order_by: str = "lines") -> list[AuthorStat]:
    return sorted(stats, key=sort_key_for(order_by))
