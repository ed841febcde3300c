"""TrendingSnapshot aggregate — the published ranking for one trending period.

One record per period, keyed by the period value. Each computation run
replaces ``entries`` wholesale in a single write, so readers see either the
previous ranking or the new one, never a mix.
"""

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime, timedelta

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, String, Text

from ratings.domain import ratings
from ratings.trending.period import TrendingPeriod


@dataclass(frozen=True)
class TrendingEntry:
    entity_id: str
    title: str
    image_ref: str
    average_rating: float
    recent_review_count: int
    score: float
    rank: int

    @property
    def formatted_rank(self) -> str:
        return f"#{self.rank}"

    @property
    def is_top_three(self) -> bool:
        return self.rank <= 3

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "TrendingEntry":
        return cls(
            entity_id=str(data["entity_id"]),
            title=data.get("title") or "",
            image_ref=data.get("image_ref") or "",
            average_rating=float(data.get("average_rating", 0.0)),
            recent_review_count=int(data.get("recent_review_count", 0)),
            score=float(data.get("score", 0.0)),
            rank=int(data["rank"]),
        )


def _load_entries(raw: str | None) -> list[TrendingEntry]:
    if not raw:
        return []
    return [TrendingEntry.from_dict(item) for item in json.loads(raw)]


@ratings.aggregate
class TrendingSnapshot:
    period = String(identifier=True, required=True, max_length=10, choices=TrendingPeriod)
    entries = Text()  # JSON list of TrendingEntry dicts, ordered by rank
    computed_at = DateTime()

    @invariant.post
    def entries_are_ranked_by_score(self):
        previous = None
        for position, entry in enumerate(_load_entries(self.entries), start=1):
            if entry.rank != position:
                raise ValidationError({"entries": ["Ranks must run from 1 without gaps"]})
            if previous is not None and entry.score > previous.score:
                raise ValidationError({"entries": ["Entries must be ordered by descending score"]})
            previous = entry

    @classmethod
    def create(cls, period: TrendingPeriod, entries: list[TrendingEntry], computed_at: datetime) -> "TrendingSnapshot":
        return cls(
            period=period.value,
            entries=json.dumps([entry.to_dict() for entry in entries]),
            computed_at=computed_at,
        )

    def replace_entries(self, entries: list[TrendingEntry], computed_at: datetime) -> None:
        with atomic_change(self):
            self.entries = json.dumps([entry.to_dict() for entry in entries])
            self.computed_at = computed_at

    def entries_list(self) -> list[TrendingEntry]:
        return _load_entries(self.entries)

    def top(self, n: int) -> list[TrendingEntry]:
        return self.entries_list()[: max(n, 0)]

    def is_stale(self, now: datetime | None = None, threshold: timedelta = timedelta(hours=2)) -> bool:
        """True when the snapshot is older than ``threshold`` (or was never computed)."""
        if self.computed_at is None:
            return True
        now = now or datetime.now(UTC)
        computed_at = self.computed_at
        if computed_at.tzinfo is None and now.tzinfo is not None:
            computed_at = computed_at.replace(tzinfo=now.tzinfo)
        elif computed_at.tzinfo is not None and now.tzinfo is None:
            now = now.replace(tzinfo=computed_at.tzinfo)
        return now - computed_at > threshold
