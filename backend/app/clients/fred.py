"""FRED (Federal Reserve Economic Data) observations client."""

from datetime import date
from typing import Any

from app.clients.base import ProviderClient, ProviderError, as_float
from app.models import Observation, ObservationSeries

# FRED marks a missing observation with a lone dot
MISSING_VALUE = "."


class FredClient(ProviderClient):
    """St. Louis Fed series observations (needs an API key)."""

    BASE_URL = "https://api.stlouisfed.org"

    def __init__(self, base_url: str = BASE_URL, api_key: str = "", **kwargs):
        super().__init__(base_url, **kwargs)
        self.api_key = api_key

    async def get_observations(self, series_id: str, start: date) -> ObservationSeries:
        """
        Fetch observations from ``start`` onwards, oldest first.

        Args:
            series_id: FRED series (e.g., "WALCL")
            start: First observation date

        Returns:
            ObservationSeries without missing values
        """
        if not self.api_key:
            raise ProviderError(f"FRED {series_id}: no API key configured")
        data = await self._request(
            "GET",
            "/fred/series/observations",
            {
                "series_id": series_id,
                "api_key": self.api_key,
                "file_type": "json",
                "observation_start": start.isoformat(),
                "sort_order": "asc",
            },
        )
        return parse_observations(series_id, data)


def parse_observations(series_id: str, data: Any) -> ObservationSeries:
    rows = data.get("observations") if isinstance(data, dict) else None
    if not isinstance(rows, list):
        raise ProviderError(f"FRED {series_id}: no observations")

    observations = []
    for row in rows:
        if not isinstance(row, dict) or row.get("value") == MISSING_VALUE:
            continue
        value = as_float(row.get("value"))
        try:
            day = date.fromisoformat(row.get("date") or "")
        except (TypeError, ValueError):
            continue
        if value is not None:
            observations.append(Observation(date=day, value=value))
    return ObservationSeries(series_id=series_id, observations=observations)
