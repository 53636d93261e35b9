from __future__ import annotations

import calendar
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from solis_chart.client import SolisClient

FETCH_FAILED = "Failed to fetch data"

SWEDISH_MONTHS = (
    "januari",
    "februari",
    "mars",
    "april",
    "maj",
    "juni",
    "juli",
    "augusti",
    "september",
    "oktober",
    "november",
    "december",
)


@dataclass
class AggregationResult:
    daily_totals: List[float] = field(default_factory=list)
    monthly_total: float = 0.0
    month_name: str = ""
    error: Optional[str] = None

    @classmethod
    def failed(cls, message: str = FETCH_FAILED) -> "AggregationResult":
        return cls(error=message)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "dailyTotals": list(self.daily_totals),
            "monthlyTotal": self.monthly_total,
            "monthName": self.month_name,
            "error": self.error,
        }


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def round_one_decimal(value: float) -> float:
    """Round half up to one decimal (0.25 -> 0.3, not banker's 0.2)."""
    return math.floor(value * 10 + 0.5) / 10


def swedish_month_name(month: int) -> str:
    return SWEDISH_MONTHS[month - 1]


def _energy(entry: Any) -> float:
    if not isinstance(entry, dict):
        return 0.0
    value = entry.get("energy")
    if value is None:
        return 0.0
    try:
        energy = float(value)
    except (TypeError, ValueError):
        return 0.0
    return energy if math.isfinite(energy) else 0.0


def _station_records(payload: Any) -> List[Dict[str, Any]]:
    records = payload["data"]["page"]["records"]
    if not isinstance(records, list):
        raise TypeError(f"station records is {type(records).__name__}, expected list")
    return records


def _add_station(totals: List[float], payload: Any) -> None:
    daily = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(daily, list):
        raise TypeError(f"station month data is {type(daily).__name__}, expected list")
    for i in range(len(totals)):
        entry = daily[i] if i < len(daily) else None
        totals[i] += _energy(entry)


def fetch_monthly_production(
    client: SolisClient,
    log: Optional[logging.Logger] = None,
    now: Optional[datetime] = None,
    timezone: Optional[str] = None,
    currency: Optional[str] = None,
) -> AggregationResult:
    """
    Sum the current month's daily production across every station.

    A failing station is logged and skipped; a failing station list turns
    the whole result into an error.
    """
    log = log or logging.getLogger(__name__)
    try:
        if now is None:
            now = datetime.now(ZoneInfo(timezone)) if timezone else datetime.now()
        month_str = f"{now.year:04d}-{now.month:02d}"
        day_count = days_in_month(now.year, now.month)

        stations = _station_records(client.user_station_list(page_no=1, page_size=100))
        if len(stations) >= 100:
            log.warning("Station list hit the page size (100); later pages are not fetched")

        totals = [0.0] * day_count

        for station in stations:
            station_id = station.get("id") if isinstance(station, dict) else None
            if station_id is None:
                log.warning("Skipping station record without id: %r", station)
                continue
            try:
                payload = client.station_month(station_id, month_str, currency)
                _add_station(totals, payload)
            except Exception as exc:
                log.warning("Failed for station %s: %s", station_id, exc)

        return AggregationResult(
            daily_totals=[round_one_decimal(e) for e in totals],
            monthly_total=round_one_decimal(sum(totals)),
            month_name=swedish_month_name(now.month),
            error=None,
        )
    except Exception as exc:
        log.error("Failed: %s", exc)
        return AggregationResult.failed()
