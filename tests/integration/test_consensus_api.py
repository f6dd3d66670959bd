"""
Integration Tests for the Consensus API.
"""

import pytest


@pytest.mark.integration
class TestConsensusEndpoint:
    """Integration tests for POST /consensus."""

    def test_consensus_success(self, api_client):
        payload = {"predictions": [{"model_name": "Elo", "win_pct": 0.62}, {"win_pct": 0.58}]}
        response = api_client.post("/consensus", json=payload)

        assert response.status_code == 200
        data = response.json()
        assert data["primary_percentage"] == pytest.approx(0.60)
        assert data["opponent_percentage"] == pytest.approx(0.40)
        assert data["predicted_side"] == "primary"
        assert data["models"] == 2
        assert 0 <= data["confidence"] <= 100

    def test_games_weighting(self, api_client):
        payload = {
            "predictions": [{"win_pct": 0.6, "games": 100}, {"win_pct": 0.7, "games": 300}],
            "weighting": "games",
        }
        data = api_client.post("/consensus", json=payload).json()

        assert data["primary_percentage"] == pytest.approx(0.675)
        assert data["weighting"] == "games"

    def test_predicted_team(self, api_client):
        payload = {"predictions": [
            {"win_pct": 0.35, "primary_team": "Dodgers", "opponent_team": "Padres"},
            {"win_pct": 0.60, "primary_team": "Padres", "opponent_team": "Dodgers"},
        ]}
        data = api_client.post("/consensus", json=payload).json()

        assert data["primary_team"] == "Dodgers"
        assert data["predicted_team"] == "Padres"

    def test_empty_predictions(self, api_client):
        response = api_client.post("/consensus", json={"predictions": []})

        assert response.status_code == 422
        assert "Insufficient data" in response.json()["detail"]

    def test_out_of_range_probability(self, api_client):
        response = api_client.post("/consensus", json={"predictions": [{"win_pct": 1.4}]})
        assert response.status_code == 422

    def test_unknown_weighting(self, api_client):
        response = api_client.post("/consensus", json={"predictions": [{"win_pct": 0.5}], "weighting": "kelly"})
        assert response.status_code == 422


@pytest.mark.integration
class TestConsensusByTarget:

    def test_grouped_results(self, api_client):
        payload = {"predictions": [
            {"win_pct": 0.55, "target": "primary_win"},
            {"win_pct": 0.65, "target": "primary_win"},
            {"win_pct": 0.48, "target": "ou_result"},
        ]}
        response = api_client.post("/consensus/by-target", json=payload)

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"moneyline", "over_under"}
        assert data["moneyline"]["primary_percentage"] == pytest.approx(0.60)
        assert data["over_under"]["models"] == 1

    def test_unknown_target(self, api_client):
        payload = {"predictions": [{"win_pct": 0.5, "target": "parlay"}]}
        response = api_client.post("/consensus/by-target", json=payload)

        assert response.status_code == 422
