"""Forecast vocabulary: models, units, data-type selector and hourly variables.

Pure data. The wire strings here are the ones Open-Meteo uses both in query
parameters and as key suffixes in the `hourly` / `hourly_units` objects.
"""

from __future__ import annotations

from enum import Enum, Flag
from typing import Tuple, Type


class ForecastModel(str, Enum):
    """Numerical weather prediction models the forecast API can return."""
    ECMWF_IFS025 = "ecmwf_ifs025"
    ECMWF_AIFS025 = "ecmwf_aifs025"
    ICON_SEAMLESS = "icon_seamless"
    GFS_SEAMLESS = "gfs_seamless"
    HRRR = "ncep_hrrr_conus"
    NBM = "ncep_nbm_conus"
    GEM_GLOBAL = "gem_global"
    GEM_REGIONAL = "gem_regional"
    GEM_HRDPS_CONTINENTAL = "gem_hrdps_continental"

    @property
    def wire_tag(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: "ForecastModel | str") -> "ForecastModel":
        """Accept a member, its wire tag, or its member name (any case)."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        try:
            return cls(text.lower())
        except ValueError:
            pass
        try:
            return cls[text.upper()]
        except KeyError:
            raise ValueError(f"Unknown forecast model '{value}'") from None


DEFAULT_MODELS: Tuple[ForecastModel, ...] = (
    ForecastModel.ECMWF_IFS025,
    ForecastModel.ICON_SEAMLESS,
)


class WindSpeedUnit(str, Enum):
    """Values accepted by the API's `wind_speed_unit` parameter."""
    KNOTS = "kn"
    KMH = "kmh"
    MPH = "mph"
    MS = "ms"

    @property
    def label(self) -> str:
        """Unit label the API reports in `hourly_units` for this choice."""
        return _WIND_SPEED_LABELS[self]

    @classmethod
    def parse(cls, value: "WindSpeedUnit | str") -> "WindSpeedUnit":
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for unit in cls:
            if text.lower() in (unit.value, unit.label.lower()) or text.upper() == unit.name:
                return unit
        raise ValueError(f"Unknown wind speed unit '{value}'")


_WIND_SPEED_LABELS = {
    WindSpeedUnit.KNOTS: "kn",
    WindSpeedUnit.KMH: "km/h",
    WindSpeedUnit.MPH: "mph",
    WindSpeedUnit.MS: "m/s",
}


class WeatherDataType(Flag):
    """Groups of hourly variables to request. Combine with `|`."""
    WIND = 1
    PRECIPITATION = 2
    ALL = WIND | PRECIPITATION

    @classmethod
    def parse(cls, value: "WeatherDataType | str") -> "WeatherDataType":
        """Parse "wind", "precipitation", "all" or a comma list of them."""
        if isinstance(value, cls):
            return value
        result = cls(0)
        for part in str(value).split(","):
            name = part.strip().upper()
            if not name:
                continue
            try:
                result |= cls[name]
            except KeyError:
                raise ValueError(f"Unknown data type '{part.strip()}'") from None
        return result


class WeatherVariable(str, Enum):
    """Hourly variables, in the order they are requested.

    Each member knows its data-type group, the unit label assumed when the API
    leaves it out, the ModelSample field it fills and whether values are ints.
    """
    WIND_SPEED = "wind_speed_10m"
    WIND_DIRECTION = "wind_direction_10m"
    WIND_GUSTS = "wind_gusts_10m"
    PRECIPITATION = "precipitation"
    RAIN = "rain"
    SHOWERS = "showers"
    SNOWFALL = "snowfall"
    PRECIPITATION_PROBABILITY = "precipitation_probability"
    WEATHER_CODE = "weather_code"

    @property
    def data_type(self) -> WeatherDataType:
        return _VARIABLE_SPECS[self][0]

    @property
    def default_unit(self) -> str:
        return _VARIABLE_SPECS[self][1]

    @property
    def field_name(self) -> str:
        return _VARIABLE_SPECS[self][2]

    @property
    def value_type(self) -> Type:
        return _VARIABLE_SPECS[self][3]

    def key_for(self, model: ForecastModel) -> str:
        """Key of this variable's array for `model` in the hourly payload."""
        return f"{self.value}_{model.value}"

    @classmethod
    def for_data_types(cls, data_types: WeatherDataType) -> Tuple["WeatherVariable", ...]:
        return tuple(v for v in cls if v.data_type & data_types)


_VARIABLE_SPECS = {
    WeatherVariable.WIND_SPEED: (WeatherDataType.WIND, "kn", "wind_speed", float),
    WeatherVariable.WIND_DIRECTION: (WeatherDataType.WIND, "°", "wind_direction", int),
    WeatherVariable.WIND_GUSTS: (WeatherDataType.WIND, "kn", "wind_gusts", float),
    WeatherVariable.PRECIPITATION: (WeatherDataType.PRECIPITATION, "mm", "precipitation", float),
    WeatherVariable.RAIN: (WeatherDataType.PRECIPITATION, "mm", "rain", float),
    WeatherVariable.SHOWERS: (WeatherDataType.PRECIPITATION, "mm", "showers", float),
    WeatherVariable.SNOWFALL: (WeatherDataType.PRECIPITATION, "cm", "snowfall", float),
    WeatherVariable.PRECIPITATION_PROBABILITY: (
        WeatherDataType.PRECIPITATION, "%", "precipitation_probability", int,
    ),
    WeatherVariable.WEATHER_CODE: (WeatherDataType.PRECIPITATION, "wmo code", "weather_code", int),
}
