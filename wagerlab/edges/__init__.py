"""Edge-bucket historical accuracy engine."""

from .buckets import (
    EdgeType,
    coerce_number,
    round_to_step,
    spread_diff,
    ou_diff,
    spread_bucket,
    ou_bucket,
    moneyline_bucket,
)
from .accuracy_index import AccuracyBucketRow, AccuracyStat, AccuracyIndex, build_index, lookup
from .sports import SportFieldMap, NBA, NCAAB, CFB, SPORTS, get_sport_map, resolve, as_records, id_key, is_missing
from .enricher import EdgeStatus, EdgeObservation, EnrichedGame, enrich, enrich_slate, mirror_moneyline
from .ranking import SortMode, sort_games
from .slate import (
    today_in_timezone,
    filter_slate,
    latest_run_id,
    latest_run_predictions,
    format_tipoff,
)

__all__ = [
    # Buckets
    "EdgeType",
    "coerce_number",
    "round_to_step",
    "spread_diff",
    "ou_diff",
    "spread_bucket",
    "ou_bucket",
    "moneyline_bucket",
    # Index
    "AccuracyBucketRow",
    "AccuracyStat",
    "AccuracyIndex",
    "build_index",
    "lookup",
    # Sports
    "SportFieldMap",
    "NBA",
    "NCAAB",
    "CFB",
    "SPORTS",
    "get_sport_map",
    "resolve",
    "as_records",
    "id_key",
    "is_missing",
    # Enrichment
    "EdgeStatus",
    "EdgeObservation",
    "EnrichedGame",
    "enrich",
    "enrich_slate",
    "mirror_moneyline",
    # Ranking
    "SortMode",
    "sort_games",
    # Slate
    "today_in_timezone",
    "filter_slate",
    "latest_run_id",
    "latest_run_predictions",
    "format_tipoff",
]
