from __future__ import annotations

from collections.abc import Iterable

from .models import AuthorStat, FileAttribution


class FameAggregator:
    """
    Folds per-file attributions into one AuthorStat per author.

    Commit dedup is global: the first author to claim a commit owns it and
    gets the commit counted; later claims of the same commit (from any file,
    by any author) count nothing. File dedup is per author within a file.
    Lines of a commit always go to the commit's owner.
    """

    def __init__(self) -> None:
        self.stats: dict[str, AuthorStat] = {}
        self.commit_owner: dict[str, str] = {}

    def _stat(self, author: str) -> AuthorStat:
        st = self.stats.get(author)
        if st is None:
            st = AuthorStat(name=author)
            self.stats[author] = st
        return st

    def apply(self, attribution: FileAttribution) -> None:
        counted_authors: set[str] = set()
        for commit, author in attribution.claims:
            st = self._stat(author)
            if author not in counted_authors:
                counted_authors.add(author)
                st.files += 1
            if commit not in self.commit_owner:
                self.commit_owner[commit] = author
                st.commits += 1

        for ev in attribution.events:
            owner = self.commit_owner.get(ev.commit, ev.author)
            self._stat(owner).lines += ev.lines

    def stats_list(self) -> list[AuthorStat]:
        return list(self.stats.values())


def aggregate(attributions: Iterable[FileAttribution]) -> list[AuthorStat]:
    agg = FameAggregator()
    for attribution in attributions:
        agg.apply(attribution)
    return agg.stats_list()
