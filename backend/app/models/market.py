"""Market data returned by the provider clients."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class ChartSeries(BaseModel):
    """Daily (or intraday) chart for one symbol, nulls already removed."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    closes: list[float] = Field(default_factory=list)
    volumes: list[float] = Field(default_factory=list)
    timestamps: list[datetime] = Field(default_factory=list)
    price: float | None = None  # regularMarketPrice
    previous_close: float | None = None
    volume: float | None = None  # regularMarketVolume
    market_state: str | None = None  # REGULAR, PRE, POST, CLOSED

    @property
    def is_empty(self) -> bool:
        return not self.closes


class SpotPrice(BaseModel):
    """Spot price with optional 24h change (percent)."""

    model_config = ConfigDict(frozen=True)

    price: float
    change_24h: float | None = None


class ShareCounts(BaseModel):
    """Basic and diluted share counts from key statistics."""

    model_config = ConfigDict(frozen=True)

    basic_shares: float
    diluted_shares: float | None = None


class VolumeBar(BaseModel):
    """One traded bar: volume with its close when Yahoo reported one."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    volume: float
    close: float | None = None


class VolumeHistory(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    bars: list[VolumeBar] = Field(default_factory=list)


class Observation(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: date
    value: float


class ObservationSeries(BaseModel):
    """Economic data series (FRED), oldest first, missing values removed."""

    model_config = ConfigDict(frozen=True)

    series_id: str
    observations: list[Observation] = Field(default_factory=list)
