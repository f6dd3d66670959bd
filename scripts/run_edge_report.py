"""
Run Edge Accuracy Report.

Builds today's edge-accuracy board from exported store tables:
1. Load games, predictions and bucket aggregates (CSV)
2. Keep today's games and the newest prediction run
3. Enrich with bucket accuracy
4. Sort and print

Usage:
    python scripts/run_edge_report.py --sport ncaab \\
        --games data/v_cbb_input_values.csv \\
        --predictions data/ncaab_predictions.csv \\
        --buckets data/ncaab_edge_accuracy_by_bucket.csv \\
        --sort spread
"""

from datetime import date, datetime, timezone
import argparse
import logging
import sys

import pandas as pd

from wagerlab.core.config import settings
from wagerlab.edges import (
    AccuracyIndex,
    SortMode,
    enrich_slate,
    filter_slate,
    format_tipoff,
    get_sport_map,
    latest_run_predictions,
    sort_games,
    today_in_timezone,
)

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    "time", "matchup",
    "spread_pick", "spread_bucket_key", "spread_accuracy_pct", "spread_bucket_games",
    "ou_pick", "ou_bucket_key", "ou_accuracy_pct", "ou_bucket_games",
    "ml_bucket_key", "ml_accuracy_pct", "ml_bucket_games",
]


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Edge-bucket accuracy report for a slate")
    parser.add_argument("--sport", default="nba", help="nba, ncaab or cfb")
    parser.add_argument("--games", required=True, help="CSV of game rows")
    parser.add_argument("--predictions", help="CSV of prediction rows (all runs)")
    parser.add_argument("--buckets", required=True, help="CSV of edge accuracy bucket rows")
    parser.add_argument("--sort", default="time", help="time, spread, moneyline or ou")
    parser.add_argument("--date", help="Slate date YYYY-MM-DD (default: today in DISPLAY_TIMEZONE)")
    parser.add_argument("--include-future", action="store_true", help="Also include later games")
    return parser.parse_args(argv)


def build_report(
    games: pd.DataFrame,
    predictions: pd.DataFrame,
    buckets: pd.DataFrame,
    sport: str,
    sort: str,
    today: date,
    include_future: bool = False,
) -> pd.DataFrame:
    """Enrich and order a slate, returning one display row per game."""
    fields = get_sport_map(sport)
    mode = SortMode.parse(sort)

    slate = filter_slate(games, today, fields, include_future=include_future)
    logger.info(f"{len(slate)} {fields.name} game(s) on slate for {today.isoformat()}")

    latest = latest_run_predictions(predictions)
    index = AccuracyIndex.from_frame(buckets)
    logger.info(f"Indexed {len(index)} accuracy bucket(s)")

    ordered = sort_games(enrich_slate(slate, latest, index, fields), mode)

    rows = []
    for game in ordered:
        row = game.to_dict()
        row["time"] = format_tipoff(game.tipoff_time, game.game_date)
        row["matchup"] = f"{game.away_team} @ {game.home_team}"
        rows.append(row)
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        games = pd.read_csv(args.games)
        buckets = pd.read_csv(args.buckets)
        predictions = pd.read_csv(args.predictions) if args.predictions else pd.DataFrame()
    except (OSError, pd.errors.ParserError) as e:
        logger.error(f"Could not load input tables: {e}")
        return 1

    today = (
        date.fromisoformat(args.date) if args.date
        else today_in_timezone(datetime.now(timezone.utc))
    )

    try:
        report = build_report(
            games, predictions, buckets,
            sport=args.sport, sort=args.sort, today=today,
            include_future=args.include_future,
        )
    except ValueError as e:
        logger.error(str(e))
        return 2

    if report.empty:
        logger.warning("No games to report")
        return 0

    print("\n" + "=" * 50)
    print(report.to_string(index=False))
    print("=" * 50 + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
