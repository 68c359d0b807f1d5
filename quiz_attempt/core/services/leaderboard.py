"""Ranking of scoreboard entries for a quiz."""

from __future__ import annotations

from collections.abc import Iterable

from quiz_attempt.core.models import RankedEntry, ScoreboardEntry


class LeaderboardRanker:
    """Orders scoreboard entries by score, highest first.

    The sort is stable: entries with equal scores keep their input order.
    Positions are 1-based and follow the final order, so tied scores receive
    consecutive distinct positions rather than a shared rank.
    """

    def rank(self, entries: Iterable[ScoreboardEntry], limit: int | None = None) -> list[RankedEntry]:
        ordered = sorted(entries, key=lambda e: -e.score)
        if limit is not None:
            ordered = ordered[:limit]
        return [RankedEntry(position=index, entry=entry) for index, entry in enumerate(ordered, start=1)]

    def get_top_scorers(self, entries: Iterable[ScoreboardEntry], limit: int = 3) -> list[ScoreboardEntry]:
        """Return the top N entries without their positions."""
        return [ranked.entry for ranked in self.rank(entries, limit=limit)]
