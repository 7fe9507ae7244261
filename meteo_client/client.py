"""Client for the Open-Meteo multi-model hourly forecast endpoint."""
from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import requests

from meteo_client.config import Settings, settings as default_settings
from meteo_client.domain import ForecastModel, WeatherDataType, WeatherVariable, WindSpeedUnit
from meteo_client.errors import InvalidResponse, InvalidURL
from meteo_client.models import ForecastResponse, HourlyRecord
from meteo_client.normalizer import normalize
from meteo_client.parser import UnitsBundle, loads, parse_payload
from meteo_client.transport import HttpTransport, RequestsTransport
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="meteo_client/client")

ModelArg = Union[ForecastModel, str]
WIND_SPEED_VARIABLES = (WeatherVariable.WIND_SPEED, WeatherVariable.WIND_GUSTS)


def resolve_models(models: Optional[Iterable[ModelArg]], settings: Settings) -> Tuple[ForecastModel, ...]:
    """Parse models (members or wire tags), drop duplicates, keep order."""
    if models is None:
        return tuple(settings.models())
    resolved: List[ForecastModel] = []
    for m in models:
        try:
            model = ForecastModel.parse(m)
        except ValueError as exc:
            raise InvalidURL(str(exc)) from exc
        if model not in resolved:
            resolved.append(model)
    return tuple(resolved)


def resolve_params(
    models: Optional[Iterable[ModelArg]],
    wind_speed_unit: Union[WindSpeedUnit, str, None],
    data_types: Union[WeatherDataType, str],
    settings: Settings,
) -> Tuple[Tuple[ForecastModel, ...], WindSpeedUnit, WeatherDataType]:
    """Turn caller arguments into enums, filling gaps from settings."""
    models = resolve_models(models, settings)
    try:
        unit = WindSpeedUnit.parse(wind_speed_unit) if wind_speed_unit is not None else settings.wind_speed_unit()
        data_types = WeatherDataType.parse(data_types)
    except ValueError as exc:
        raise InvalidURL(str(exc)) from exc
    return models, unit, data_types


def _check_coordinate(name: str, value: float, limit: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidURL(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or not -limit <= value <= limit:
        raise InvalidURL(f"{name} must be within [-{limit:g}, {limit:g}], got {value!r}")


def build_url(
    base_url: str,
    latitude: float,
    longitude: float,
    models: Sequence[ForecastModel],
    wind_speed_unit: WindSpeedUnit,
    data_types: WeatherDataType = WeatherDataType.ALL,
) -> str:
    """
    Compose the forecast request URL.

    `hourly` lists the variables selected by `data_types` in their canonical
    order; `models` lists the wire tags in the order given.

    Raises:
        InvalidURL: coordinates out of range, nothing to request, or a base
            URL that cannot be prepared.
    """
    _check_coordinate("latitude", latitude, 90)
    _check_coordinate("longitude", longitude, 180)
    if not models:
        raise InvalidURL("At least one forecast model is required")
    variables = WeatherVariable.for_data_types(data_types)
    if not variables:
        raise InvalidURL(f"No hourly variables selected by {data_types!r}")

    params = [
        ("latitude", str(latitude)),
        ("longitude", str(longitude)),
        ("hourly", ",".join(v.value for v in variables)),
        ("models", ",".join(m.value for m in models)),
        ("wind_speed_unit", wind_speed_unit.value),
    ]
    try:
        prepared = requests.Request("GET", f"{base_url}/forecast", params=params).prepare()
    except requests.exceptions.RequestException as exc:
        raise InvalidURL(f"Cannot build forecast URL from base '{base_url}'") from exc
    return prepared.url


def _warn_on_unexpected_units(units: UnitsBundle, wind_speed_unit: WindSpeedUnit) -> None:
    """Log a warning if the API labels wind speeds differently from what we asked for."""
    for (model, variable), label in units.labels.items():
        if variable in WIND_SPEED_VARIABLES and label != wind_speed_unit.label:
            logger.warning(
                "Unexpected Open-Meteo unit for %s: %r (requested %r)",
                variable.key_for(model), label, wind_speed_unit.label,
            )


def decode_forecast(
    body: Union[bytes, str],
    models: Sequence[ForecastModel],
    wind_speed_unit: Optional[WindSpeedUnit] = None,
) -> ForecastResponse:
    """Run a response body through parse + normalize. Raises DecodingError."""
    parsed = parse_payload(loads(body), models)
    if wind_speed_unit is not None:
        _warn_on_unexpected_units(parsed.units, wind_speed_unit)
    hourly = normalize(parsed.series, parsed.units, models)
    return ForecastResponse(metadata=parsed.metadata, hourly=hourly, models=tuple(models))


class OpenMeteoClient:
    """
    Fetch and decode hourly wind/precipitation forecasts for several models.

    Instances hold no per-call state, but the default transport wraps a
    `requests.Session`, which is not documented as thread-safe: use one client
    per thread, or pass a transport that is.
    """

    def __init__(
        self,
        transport: Optional[HttpTransport] = None,
        *,
        base_url: Optional[str] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or default_settings
        self.base_url = (base_url or self.settings.base_url).rstrip("/")
        self.transport = transport or RequestsTransport(settings=self.settings)

    def build_url(
        self,
        latitude: float,
        longitude: float,
        models: Optional[Iterable[ModelArg]] = None,
        wind_speed_unit: Union[WindSpeedUnit, str, None] = None,
        data_types: Union[WeatherDataType, str] = WeatherDataType.ALL,
    ) -> str:
        models, unit, data_types = resolve_params(models, wind_speed_unit, data_types, self.settings)
        return build_url(self.base_url, latitude, longitude, models, unit, data_types)

    def fetch_response(
        self,
        latitude: float,
        longitude: float,
        models: Optional[Iterable[ModelArg]] = None,
        wind_speed_unit: Union[WindSpeedUnit, str, None] = None,
        data_types: Union[WeatherDataType, str] = WeatherDataType.ALL,
    ) -> ForecastResponse:
        """
        Fetch the forecast and return metadata plus hourly records.

        Args:
            latitude: Decimal degrees, -90..90.
            longitude: Decimal degrees, -180..180.
            models: Models to request (members or wire tags). Defaults to
                ``settings.default_models`` (ECMWF IFS + ICON seamless).
            wind_speed_unit: Unit the API should render wind speeds in
                (default knots).
            data_types: Which variable groups to request (default all).

        Raises:
            InvalidURL: parameters cannot form a request URL.
            InvalidResponse: the API answered with a non-2xx status.
            DecodingError: the body does not match the forecast schema.
            requests.RequestException: transport failures, unchanged.
        """
        models, unit, data_types = resolve_params(models, wind_speed_unit, data_types, self.settings)
        url = build_url(self.base_url, latitude, longitude, models, unit, data_types)

        logger.debug("Requesting forecast: %s", mask_url(url))
        result = self.transport.get(url)
        if not result.ok:
            raise InvalidResponse(result.status_code, url=url)

        response = decode_forecast(result.content, models, unit)
        logger.debug("Decoded %d hourly records for %s", len(response.hourly), ",".join(m.value for m in models))
        return response

    def fetch(
        self,
        latitude: float,
        longitude: float,
        models: Optional[Iterable[ModelArg]] = None,
        wind_speed_unit: Union[WindSpeedUnit, str, None] = None,
        data_types: Union[WeatherDataType, str] = WeatherDataType.ALL,
    ) -> List[HourlyRecord]:
        """Fetch the forecast and return only the ordered hourly records."""
        return self.fetch_response(
            latitude,
            longitude,
            models=models,
            wind_speed_unit=wind_speed_unit,
            data_types=data_types,
        ).hourly
