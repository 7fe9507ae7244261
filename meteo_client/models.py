"""Normalized forecast records returned to callers."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from meteo_client.domain import ForecastModel, WeatherVariable

Number = Union[int, float]


@dataclass(frozen=True)
class ForecastMetadata:
    """Location and generation details echoed back by the API."""
    latitude: float
    longitude: float
    generationtime_ms: float
    utc_offset_seconds: int
    timezone: str
    timezone_abbreviation: str
    elevation: float


@dataclass
class ModelSample:
    """One model's hourly variables at a single timestamp.

    Every value is optional; every unit label is always set (the API's label,
    or the variable's conventional unit when the API left it out).
    """
    wind_speed: Optional[float] = None
    wind_speed_unit: str = WeatherVariable.WIND_SPEED.default_unit
    wind_direction: Optional[Number] = None
    wind_direction_unit: str = WeatherVariable.WIND_DIRECTION.default_unit
    wind_gusts: Optional[float] = None
    wind_gusts_unit: str = WeatherVariable.WIND_GUSTS.default_unit
    precipitation: Optional[float] = None
    precipitation_unit: str = WeatherVariable.PRECIPITATION.default_unit
    rain: Optional[float] = None
    rain_unit: str = WeatherVariable.RAIN.default_unit
    showers: Optional[float] = None
    showers_unit: str = WeatherVariable.SHOWERS.default_unit
    snowfall: Optional[float] = None
    snowfall_unit: str = WeatherVariable.SNOWFALL.default_unit
    precipitation_probability: Optional[Number] = None
    precipitation_probability_unit: str = WeatherVariable.PRECIPITATION_PROBABILITY.default_unit
    weather_code: Optional[Number] = None
    weather_code_unit: str = WeatherVariable.WEATHER_CODE.default_unit

    def value(self, variable: WeatherVariable) -> Optional[Number]:
        return getattr(self, variable.field_name)

    def unit(self, variable: WeatherVariable) -> str:
        return getattr(self, f"{variable.field_name}_unit")

    def is_empty(self) -> bool:
        """True when the model contributed no value at all for this hour."""
        return all(self.value(v) is None for v in WeatherVariable)

    @staticmethod
    def _fmt(val, unit, fmt: str) -> str:
        """Format a value/unit pair or return an empty string."""
        if val is None:
            return ""
        return f"{fmt.format(val)} {unit}"

    def to_display_strings(self) -> Dict[str, str]:
        """Return "value unit" strings keyed by field name, "" where unset."""
        return {
            "wind_speed": self._fmt(self.wind_speed, self.wind_speed_unit, "{:.1f}"),
            "wind_direction": self._fmt(self.wind_direction, self.wind_direction_unit, "{:.0f}"),
            "wind_gusts": self._fmt(self.wind_gusts, self.wind_gusts_unit, "{:.1f}"),
            "precipitation": self._fmt(self.precipitation, self.precipitation_unit, "{:.1f}"),
            "rain": self._fmt(self.rain, self.rain_unit, "{:.1f}"),
            "showers": self._fmt(self.showers, self.showers_unit, "{:.1f}"),
            "snowfall": self._fmt(self.snowfall, self.snowfall_unit, "{:.2f}"),
            "precipitation_probability": self._fmt(
                self.precipitation_probability, self.precipitation_probability_unit, "{:.0f}"
            ),
            "weather_code": self._fmt(self.weather_code, self.weather_code_unit, "{:.0f}"),
        }


@dataclass
class HourlyRecord:
    """Weather across all requested models for one hour."""
    time: dt.datetime  # timezone-aware, UTC
    models: Dict[ForecastModel, ModelSample] = field(default_factory=dict)

    def __getitem__(self, model: Union[ForecastModel, str]) -> Optional[ModelSample]:
        """Sample for `model` (member or wire tag); None if absent or unknown."""
        try:
            model = ForecastModel.parse(model)
        except ValueError:
            return None
        return self.models.get(model)


@dataclass
class ForecastResponse:
    """Decoded forecast: metadata plus the per-hour records, in API order."""
    metadata: ForecastMetadata
    hourly: List[HourlyRecord]
    models: Tuple[ForecastModel, ...] = ()
