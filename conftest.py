"""
Pytest configuration and shared fixtures for WagerLab testing.

This file provides:
- Rate limit override for tests
- FastAPI test client
- Store row factories (games, predictions, bucket aggregates)
- Model prediction factories for consensus tests
"""

import os
from typing import Any, Dict, Generator, List

# Settings are read at import time; keep the API limiter out of the way
os.environ.setdefault("RATE_LIMIT", "10000/minute")

import pytest
from fastapi.testclient import TestClient


# ============================================================================
# FastAPI Test Client
# ============================================================================

@pytest.fixture
def api_client() -> Generator[TestClient, None, None]:
    """
    FastAPI test client.

    Usage:
        def test_endpoint(api_client):
            response = api_client.get("/health")
            assert response.status_code == 200
    """
    from wagerlab.api.app import app

    with TestClient(app) as client:
        yield client


# ============================================================================
# Store Row Factories
# ============================================================================

@pytest.fixture
def sample_bucket_rows() -> List[Dict[str, Any]]:
    """Rows of an edge_accuracy_by_bucket table."""
    return [
        {"edge_type": "SPREAD_EDGE", "bucket": 1.5, "games": 40, "correct": 25, "accuracy_pct": 62.5},
        {"edge_type": "SPREAD_EDGE", "bucket": 3.0, "games": 22, "correct": 15, "accuracy_pct": 68.2},
        {"edge_type": "OU_EDGE", "bucket": 2.0, "games": 35, "correct": 20, "accuracy_pct": 57.1},
        {"edge_type": "OU_EDGE", "bucket": -2.0, "games": 31, "correct": 18, "accuracy_pct": 58.1},
        {"edge_type": "MONEYLINE_PROB", "bucket": 0.6, "games": 80, "correct": 49, "accuracy_pct": 61.3},
        {"edge_type": "MONEYLINE_PROB", "bucket": 0.75, "games": 52, "correct": 40, "accuracy_pct": 76.9},
    ]


@pytest.fixture
def sample_nba_game() -> Dict[str, Any]:
    """NBA game row from the input values view."""
    return {
        "game_id": 1001,
        "home_team": "Boston",
        "away_team": "Miami",
        "game_date": "2026-10-19",
        "tipoff_time_et": "23:30:00",
        "home_spread": -3.5,
        "total_line": 221.5,
        "home_moneyline": -160,
    }


@pytest.fixture
def sample_nba_prediction() -> Dict[str, Any]:
    """Latest-run prediction row for sample_nba_game."""
    return {
        "game_id": 1001,
        "run_id": "run-2",
        "as_of_ts_utc": "2026-10-19T15:00:00Z",
        "home_win_prob": 0.58,
        "away_win_prob": 0.42,
        "model_fair_total": 223.6,
        "model_fair_home_spread": -2.0,
    }


@pytest.fixture
def sample_ncaab_game() -> Dict[str, Any]:
    """NCAAB game row (v_cbb_input_values naming)."""
    return {
        "game_id": "2002",
        "home_team": "Duke",
        "away_team": "UNC",
        "game_date_et": "2026-10-19",
        "tipoff_time_et": "19:00:00",
        "spread": -6.0,
        "over_under": 150.0,
    }


@pytest.fixture
def make_game(sample_nba_game):
    """
    Factory fixture for NBA game rows.

    Usage:
        def test_sort(make_game):
            game = make_game(game_id=5, tipoff_time_et="20:00:00")
    """
    def _create(**overrides):
        game = sample_nba_game.copy()
        game.update(overrides)
        return game

    return _create


# ============================================================================
# Model Prediction Factories
# ============================================================================

@pytest.fixture
def create_model_predictions():
    """
    Factory fixture for consensus inputs.

    Usage:
        def test_consensus(create_model_predictions):
            preds = create_model_predictions([0.6, 0.7], games=[100, 300])
    """
    from wagerlab.consensus import ModelPrediction

    def _create(win_pcts, games=None, **overrides):
        preds = []
        for i, win_pct in enumerate(win_pcts):
            fields = {
                "model_name": f"Custom Model #{i + 1}",
                "win_pct": win_pct,
                "games": games[i] if games else 0,
            }
            fields.update(overrides)
            preds.append(ModelPrediction(**fields))
        return preds

    return _create


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
