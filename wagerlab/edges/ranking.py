"""Ordering of enriched games for presentation."""

from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union

from .buckets import EdgeType
from .enricher import EnrichedGame

NO_DATA_RANK = -1.0


class SortMode(Enum):
    """How to order a slate."""
    TIME = "time"
    SPREAD_ACCURACY = "spread"
    MONEYLINE_ACCURACY = "moneyline"
    OU_ACCURACY = "ou"

    @classmethod
    def parse(cls, value: Union["SortMode", str]) -> "SortMode":
        """
        Accept a SortMode, its name ("SPREAD_ACCURACY") or value ("spread").

        Raises:
            ValueError: If the mode is unknown
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for mode in cls:
            if text.lower() == mode.value or text.upper() == mode.name:
                return mode
        raise ValueError(f"Unknown sort mode '{value}'")

    @property
    def edge_type(self) -> Optional[EdgeType]:
        return {
            SortMode.SPREAD_ACCURACY: EdgeType.SPREAD_EDGE,
            SortMode.MONEYLINE_ACCURACY: EdgeType.MONEYLINE_PROB,
            SortMode.OU_ACCURACY: EdgeType.OU_EDGE,
        }.get(self)


def time_key(game: EnrichedGame) -> Tuple[str, str]:
    """Kickoff ordering: (date, tipoff) compared as strings."""
    return (game.game_date or "", game.tipoff_time or "")


def accuracy_rank(game: EnrichedGame, edge_type: EdgeType) -> float:
    """accuracy_pct for the edge, or -1 when there is no data."""
    stat = game.accuracy(edge_type)
    return stat.accuracy_pct if stat is not None else NO_DATA_RANK


def sort_games(
    games: Iterable[EnrichedGame],
    mode: Union[SortMode, str] = SortMode.TIME
) -> List[EnrichedGame]:
    """
    Return a new list of games in presentation order.

    TIME sorts ascending by kickoff. Accuracy modes sort descending by the
    chosen bucket accuracy with "no data" last, breaking ties by kickoff.
    The input is not modified.
    """
    mode = SortMode.parse(mode)
    edge_type = mode.edge_type

    if edge_type is None:
        return sorted(games, key=time_key)
    return sorted(games, key=lambda g: (-accuracy_rank(g, edge_type), time_key(g)))
