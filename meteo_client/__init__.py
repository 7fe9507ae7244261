"""Typed client for Open-Meteo multi-model hourly forecasts."""

from .async_client import AsyncOpenMeteoClient
from .client import OpenMeteoClient, build_url, decode_forecast
from .domain import DEFAULT_MODELS, ForecastModel, WeatherDataType, WeatherVariable, WindSpeedUnit
from .errors import DecodingError, InvalidResponse, InvalidURL, OpenMeteoError
from .models import ForecastMetadata, ForecastResponse, HourlyRecord, ModelSample
from .transport import HttpResult, HttpTransport, RequestsTransport

__all__ = [
    "AsyncOpenMeteoClient",
    "OpenMeteoClient",
    "build_url",
    "decode_forecast",
    "DEFAULT_MODELS",
    "ForecastModel",
    "WeatherDataType",
    "WeatherVariable",
    "WindSpeedUnit",
    "DecodingError",
    "InvalidResponse",
    "InvalidURL",
    "OpenMeteoError",
    "ForecastMetadata",
    "ForecastResponse",
    "HourlyRecord",
    "ModelSample",
    "HttpResult",
    "HttpTransport",
    "RequestsTransport",
]
