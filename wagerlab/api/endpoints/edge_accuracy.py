"""
Edge Accuracy API Endpoints.

Enriches a slate of games with bucket accuracy and returns it sorted. Rows
are supplied by the caller; this service does not read the store.
"""

from datetime import datetime
from typing import Any, Dict, List
import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from wagerlab.edges import (
    AccuracyIndex,
    SortMode,
    enrich_slate,
    get_sport_map,
    latest_run_predictions,
    sort_games,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/edge-accuracy", tags=["Edge Accuracy"])


class EdgeAccuracyRequest(BaseModel):
    """Slate to enrich."""
    sport: str = Field("nba", description="nba, ncaab or cfb")
    games: List[Dict[str, Any]]
    predictions: List[Dict[str, Any]] = Field(default_factory=list)
    buckets: List[Dict[str, Any]] = Field(default_factory=list)
    sort: str = Field("time", description="time, spread, moneyline or ou")
    latest_run_only: bool = Field(
        False,
        description="Keep only prediction rows from the newest run (by as_of_ts_utc)"
    )


class EdgeAccuracyResponse(BaseModel):
    """Enriched, sorted slate."""
    sport: str
    sort: str
    count: int
    buckets_indexed: int
    games: List[Dict[str, Any]]
    generated_at: str


@router.post("/enrich", response_model=EdgeAccuracyResponse)
async def enrich_games(request: EdgeAccuracyRequest):
    """
    Annotate games with spread, total and moneyline bucket accuracy.

    Example:
        POST /edge-accuracy/enrich
        {
            "sport": "nba",
            "games": [{"game_id": 1, "home_spread": -3.5, ...}],
            "predictions": [{"game_id": 1, "model_fair_home_spread": -2.0, ...}],
            "buckets": [{"edge_type": "SPREAD_EDGE", "bucket": 1.5, ...}],
            "sort": "spread"
        }
    """
    try:
        sport = get_sport_map(request.sport)
        mode = SortMode.parse(request.sort)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        predictions = request.predictions
        if request.latest_run_only:
            predictions = latest_run_predictions(predictions)

        index = AccuracyIndex.build(request.buckets)
        enriched = enrich_slate(request.games, predictions, index, sport)
        ordered = sort_games(enriched, mode)

        return EdgeAccuracyResponse(
            sport=sport.name,
            sort=mode.value,
            count=len(ordered),
            buckets_indexed=len(index),
            games=[game.to_dict() for game in ordered],
            generated_at=datetime.now().isoformat(),
        )

    except Exception as e:
        logger.error(f"Error enriching {request.sport} slate: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error enriching slate: {str(e)}"
        )
