"""
Slate selection helpers.

"Today" depends on the viewer's timezone (an NCAAB late tip is tomorrow in
UTC but tonight in ET), so it is always passed in explicitly rather than read
from the clock inside the engine.
"""

from datetime import date, datetime, timezone
from typing import Any, List, Mapping, Optional, Union
from zoneinfo import ZoneInfo
import logging

import pandas as pd

from ..core.config import settings
from .sports import NBA, SportFieldMap, as_records, get_sport_map, id_key, is_missing, resolve

logger = logging.getLogger(__name__)


def today_in_timezone(now: datetime, tz_name: Optional[str] = None) -> date:
    """
    Calendar date of `now` in the given timezone.

    Args:
        now: Current instant; naive datetimes are taken as UTC
        tz_name: IANA timezone (default: settings.DISPLAY_TIMEZONE)
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(tz_name or settings.DISPLAY_TIMEZONE)).date()


def _date_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (datetime, pd.Timestamp)):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def filter_slate(
    games: Any,
    today: date,
    sport: Union[SportFieldMap, str] = NBA,
    include_future: bool = False,
) -> List[Mapping[str, Any]]:
    """
    Keep the games scheduled on `today` (or on/after it).

    Games without a date are dropped.
    """
    fields = get_sport_map(sport)
    target = today.isoformat()
    kept = []
    for game in as_records(games):
        game_day = _date_text(resolve(fields.game_date, game))
        if not game_day:
            continue
        if game_day == target or (include_future and game_day > target):
            kept.append(game)
    return kept


def latest_run_id(
    rows: Any,
    run_field: str = "run_id",
    ts_field: str = "as_of_ts_utc",
) -> Optional[Any]:
    """
    Run id of the newest prediction batch.

    Returns None when no row is timestamped or the newest row carries no
    run id.
    """
    newest_id = None
    newest_ts = None
    for row in as_records(rows):
        ts = pd.to_datetime(row.get(ts_field), utc=True, errors="coerce")
        if ts is None or pd.isna(ts):
            continue
        if newest_ts is None or ts > newest_ts:
            newest_ts = ts
            newest_id = row.get(run_field)
    return None if is_missing(newest_id) else newest_id


def latest_run_predictions(
    rows: Any,
    run_field: str = "run_id",
    ts_field: str = "as_of_ts_utc",
) -> List[Mapping[str, Any]]:
    """
    Rows belonging to the newest prediction run.

    A table with no identifiable run (no timestamps, or no run id on the
    newest row) is taken to be a single batch and returned unchanged.
    """
    records = as_records(rows)
    if not records:
        return []

    run_id = latest_run_id(records, run_field, ts_field)
    if run_id is None:
        logger.warning(
            f"No prediction run identified by {run_field}/{ts_field}; "
            f"using all {len(records)} prediction row(s)"
        )
        return records

    target = id_key(run_id)
    latest = [row for row in records if id_key(row.get(run_field)) == target]
    logger.debug(f"Latest prediction run {run_id}: {len(latest)} of {len(records)} row(s)")
    return latest


def format_tipoff(
    tipoff: Any,
    game_date: Any = None,
    tz_name: Optional[str] = None,
    suffix: str = "ET",
) -> str:
    """
    Format a UTC tipoff as local clock time, e.g. "7:30 PM ET".

    `tipoff` may be a full timestamp or a bare "HH:MM[:SS]" time that is
    combined with `game_date`. Returns "" when the value cannot be parsed.
    """
    if tipoff is None or (isinstance(tipoff, float) and pd.isna(tipoff)):
        return ""
    text = str(tipoff).strip()
    if not text:
        return ""

    if "T" in text or (len(text) > 10 and " " in text):
        raw = text
    elif game_date is not None:
        time_part = f"{text}:00" if len(text) == 5 and ":" in text else text
        raw = f"{_date_text(game_date)}T{time_part}"
    else:
        raw = text

    ts = pd.to_datetime(raw, utc=True, errors="coerce")
    if ts is None or pd.isna(ts):
        return ""

    local = ts.tz_convert(tz_name or settings.DISPLAY_TIMEZONE)
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {meridiem} {suffix}".rstrip()
