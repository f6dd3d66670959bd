"""
Consensus API Endpoints.

Combines caller-supplied model predictions into a weighted consensus.
"""

from typing import Dict, List, Literal, Optional
import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from wagerlab.consensus import (
    ConsensusResult,
    InsufficientDataError,
    ModelPrediction,
    aggregate,
    aggregate_by_target,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/consensus", tags=["Consensus"])


class ModelPredictionIn(BaseModel):
    """One model's prediction."""
    model_config = ConfigDict(protected_namespaces=())

    model_name: Optional[str] = None
    win_pct: float = Field(..., ge=0.0, le=1.0)
    opponent_win_pct: Optional[float] = Field(None, ge=0.0, le=1.0)
    games: int = Field(0, ge=0)
    confidence: Optional[float] = Field(None, ge=0.0, le=100.0)
    primary_team: Optional[str] = None
    opponent_team: Optional[str] = None
    target: Optional[str] = None


class ConsensusRequest(BaseModel):
    predictions: List[ModelPredictionIn]
    weighting: Optional[Literal["equal", "games"]] = None


class ConsensusResponse(BaseModel):
    """Consensus over the supplied models."""
    primary_percentage: float
    opponent_percentage: float
    confidence: float
    models: int
    predicted_side: str
    predicted_team: Optional[str] = None
    primary_team: Optional[str] = None
    opponent_team: Optional[str] = None
    weighting: str


def _to_predictions(items: List[ModelPredictionIn]) -> List[ModelPrediction]:
    return [
        ModelPrediction.from_mapping(item.model_dump(), index=i)
        for i, item in enumerate(items)
    ]


def _to_response(result: ConsensusResult) -> ConsensusResponse:
    return ConsensusResponse(**result.to_dict())


@router.post("", response_model=ConsensusResponse)
async def compute_consensus(request: ConsensusRequest):
    """
    Weighted consensus for one game and target.

    Returns 422 when no predictions are supplied.
    """
    try:
        result = aggregate(_to_predictions(request.predictions), weighting=request.weighting)
    except InsufficientDataError as e:
        raise HTTPException(
            status_code=422,
            detail=f"Insufficient data: {e}"
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    logger.debug(f"Consensus over {result.models} model(s): {result.predicted_side.value}")
    return _to_response(result)


@router.post("/by-target", response_model=Dict[str, ConsensusResponse])
async def compute_consensus_by_target(request: ConsensusRequest):
    """
    Consensus per bet target (moneyline, spread, over_under).

    Predictions must carry a `target`; targets with no models are omitted.
    """
    try:
        results = aggregate_by_target(_to_predictions(request.predictions), weighting=request.weighting)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return {target.value: _to_response(result) for target, result in results.items()}
