"""
Historical Accuracy Index.

In-memory lookup from (edge type, bucket key) to the aggregate outcome counts
of the precomputed edge-accuracy table. The index is built once per data
refresh and never patched: a refresh builds a new index.

Example:
    >>> rows = [{"edge_type": "SPREAD_EDGE", "bucket": 1.5,
    ...          "games": 40, "correct": 25, "accuracy_pct": 62.5}]
    >>> index = build_index(rows)
    >>> index.lookup(EdgeType.SPREAD_EDGE, 1.5).accuracy_pct
    62.5
    >>> index.lookup(EdgeType.SPREAD_EDGE, 9.0) is None
    True
"""

from dataclasses import dataclass, asdict
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union
import logging

import pandas as pd

from .buckets import EdgeType, coerce_number

logger = logging.getLogger(__name__)

IndexKey = Tuple[EdgeType, float]


@dataclass(frozen=True)
class AccuracyBucketRow:
    """One row of the edge-accuracy-by-bucket table."""
    edge_type: str
    bucket: Optional[float]
    games: int
    correct: int
    accuracy_pct: Optional[float]

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "AccuracyBucketRow":
        """Build from a store row (dict, pandas Series, ...)."""
        games = coerce_number(row.get("games"))
        correct = coerce_number(row.get("correct"))
        return cls(
            edge_type=row.get("edge_type"),
            bucket=coerce_number(row.get("bucket")),
            games=int(games) if games is not None else 0,
            correct=int(correct) if correct is not None else 0,
            accuracy_pct=coerce_number(row.get("accuracy_pct")),
        )


@dataclass(frozen=True)
class AccuracyStat:
    """Aggregate outcome counts for one bucket."""
    games: int
    correct: int
    accuracy_pct: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class AccuracyIndex(Mapping):
    """
    Immutable mapping of (EdgeType, bucket key) -> AccuracyStat.

    Construction tolerates dirty input because the aggregate table refreshes
    independently of game data:
        - duplicate keys: last write wins
        - unknown edge types or missing buckets: row skipped
    Lookups never raise; a missing key returns None.
    """

    def __init__(self, entries: Optional[Mapping[IndexKey, AccuracyStat]] = None):
        self._entries: Mapping[IndexKey, AccuracyStat] = MappingProxyType(dict(entries or {}))

    @classmethod
    def build(
        cls,
        rows: Iterable[Union[AccuracyBucketRow, Mapping[str, Any]]]
    ) -> "AccuracyIndex":
        """
        Build an index from aggregate rows.

        Args:
            rows: AccuracyBucketRow objects or mappings with edge_type,
                bucket, games, correct and accuracy_pct

        Returns:
            New AccuracyIndex
        """
        entries: Dict[IndexKey, AccuracyStat] = {}
        duplicates = 0
        skipped = 0

        for raw in rows:
            row = raw if isinstance(raw, AccuracyBucketRow) else AccuracyBucketRow.from_mapping(raw)

            edge_type = EdgeType.parse(row.edge_type)
            bucket = coerce_number(row.bucket)
            if edge_type is None or bucket is None:
                skipped += 1
                continue

            accuracy_pct = coerce_number(row.accuracy_pct)
            if accuracy_pct is None:
                if row.games <= 0:
                    skipped += 1
                    continue
                accuracy_pct = 100.0 * row.correct / row.games

            key = (edge_type, bucket)
            if key in entries:
                duplicates += 1
            entries[key] = AccuracyStat(
                games=row.games,
                correct=row.correct,
                accuracy_pct=accuracy_pct,
            )

        if duplicates:
            logger.warning(f"Accuracy index: {duplicates} duplicate bucket row(s), last write kept")
        if skipped:
            logger.warning(f"Accuracy index: skipped {skipped} row(s) with unknown edge type or missing bucket")
        logger.debug(f"Accuracy index built with {len(entries)} bucket(s)")

        return cls(entries)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "AccuracyIndex":
        """Build from a DataFrame with the aggregate table's columns."""
        if df.empty:
            return cls()
        return cls.build(df.to_dict("records"))

    def lookup(self, edge_type: Any, bucket_key: Any) -> Optional[AccuracyStat]:
        """
        Find the accuracy stat for a bucket.

        Returns None when the bucket key is missing, the edge type is
        unknown, or no row matches.
        """
        parsed = EdgeType.parse(edge_type)
        bucket = coerce_number(bucket_key)
        if parsed is None or bucket is None:
            return None
        return self._entries.get((parsed, bucket))

    def __getitem__(self, key: IndexKey) -> AccuracyStat:
        return self._entries[key]

    def __iter__(self) -> Iterator[IndexKey]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"AccuracyIndex({len(self)} buckets)"


def build_index(
    rows: Iterable[Union[AccuracyBucketRow, Mapping[str, Any]]]
) -> AccuracyIndex:
    """Build an AccuracyIndex from aggregate rows."""
    return AccuracyIndex.build(rows)


def lookup(index: AccuracyIndex, edge_type: Any, bucket_key: Any) -> Optional[AccuracyStat]:
    """Look up a bucket in an index; None on any miss."""
    return index.lookup(edge_type, bucket_key)
