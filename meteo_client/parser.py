"""Decode the raw forecast payload into per-model, per-variable arrays.

The API flattens its hourly block into one array per (variable, model) pair,
keyed ``<variable>_<model wire tag>``. This module validates the fixed
top-level fields and collects whichever of those arrays are present; it never
fails because a model or variable is missing.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    StrictFloat,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
)

from meteo_client.domain import ForecastModel, WeatherVariable
from meteo_client.errors import DecodingError
from meteo_client.models import ForecastMetadata
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="meteo_client/parser")

Number = Union[int, float]
SeriesKey = Tuple[ForecastModel, WeatherVariable]

# Strict so that "52.5" or true never pass for a number.
_SERIES_ADAPTER = TypeAdapter(List[Optional[Union[StrictInt, StrictFloat]]])


class _RawHourly(BaseModel):
    """`hourly` block: a `time` column plus any number of suffixed arrays."""
    model_config = ConfigDict(extra="allow")

    time: List[StrictStr]


class _RawPayload(BaseModel):
    latitude: StrictFloat
    longitude: StrictFloat
    generationtime_ms: StrictFloat
    utc_offset_seconds: StrictInt
    timezone: StrictStr
    timezone_abbreviation: StrictStr
    elevation: StrictFloat
    hourly_units: Dict[str, Any]
    hourly: _RawHourly


@dataclass
class RawSeries:
    """Parallel arrays for one response, keyed by (model, variable).

    A pair is missing from `values` when the API sent no array for it.
    """
    time: List[str]
    values: Dict[SeriesKey, List[Optional[Number]]] = field(default_factory=dict)

    def get(self, model: ForecastModel, variable: WeatherVariable) -> Optional[List[Optional[Number]]]:
        return self.values.get((model, variable))


@dataclass
class UnitsBundle:
    """Unit labels reported by the API, keyed by (model, variable)."""
    labels: Dict[SeriesKey, str] = field(default_factory=dict)

    def unit_for(self, model: ForecastModel, variable: WeatherVariable) -> str:
        return self.labels.get((model, variable), variable.default_unit)


class ParsedForecast(NamedTuple):
    metadata: ForecastMetadata
    series: RawSeries
    units: UnitsBundle


def loads(body: Union[bytes, str]) -> Dict[str, Any]:
    """Decode a response body into a JSON object."""
    try:
        payload = json.loads(body)
    except (TypeError, ValueError, RecursionError) as exc:  # RecursionError: deeply nested input
        raise DecodingError("Response body is not valid JSON", exc) from exc
    if not isinstance(payload, dict):
        raise DecodingError(f"Expected a JSON object, got {type(payload).__name__}")
    return payload


def _coerce(values: List[Optional[Number]], variable: WeatherVariable) -> List[Optional[Number]]:
    """Turn integral floats into ints for count-like variables (direction, code, probability)."""
    if variable.value_type is not int:
        return values
    return [
        int(v) if isinstance(v, float) and v.is_integer() else v
        for v in values
    ]


def _lookup(
    table: Dict[str, Any],
    model: ForecastModel,
    variable: WeatherVariable,
    single_model: bool,
) -> Tuple[Optional[str], Any]:
    """Find the entry for (model, variable); bare keys only count for single-model requests."""
    key = variable.key_for(model)
    if key in table:
        return key, table[key]
    if single_model and variable.value in table:
        return variable.value, table[variable.value]
    return None, None


def parse_payload(
    payload: Dict[str, Any],
    models: Optional[Iterable[ForecastModel]] = None,
) -> ParsedForecast:
    """
    Validate `payload` and split its hourly block into RawSeries + UnitsBundle.

    Args:
        payload: Decoded JSON object as returned by the forecast endpoint.
        models: Models to look for. Defaults to every known model. When exactly
            one model is given, unsuffixed keys are attributed to it, since the
            API drops the suffix for single-model requests.

    Raises:
        DecodingError: a required top-level field is missing or mistyped, or a
            present variable array holds something other than numbers/nulls.
    """
    try:
        raw = _RawPayload.model_validate(payload)
    except ValidationError as exc:
        raise DecodingError("Forecast payload does not match the expected schema", exc) from exc

    models = tuple(models) if models is not None else tuple(ForecastModel)
    single_model = len(models) == 1
    columns = raw.hourly.model_extra or {}

    series = RawSeries(time=list(raw.hourly.time))
    units = UnitsBundle()
    for model in models:
        for variable in WeatherVariable:
            key, column = _lookup(columns, model, variable, single_model)
            if column is not None:
                try:
                    values = _SERIES_ADAPTER.validate_python(column)
                except ValidationError as exc:
                    raise DecodingError(f"Invalid values for '{key}'", exc) from exc
                series.values[(model, variable)] = _coerce(values, variable)

            key, label = _lookup(raw.hourly_units, model, variable, single_model)
            if isinstance(label, str):
                units.labels[(model, variable)] = label

    logger.debug(
        "Parsed %d timestamps, %d series for %d models",
        len(series.time), len(series.values), len(models),
    )

    metadata = ForecastMetadata(
        latitude=raw.latitude,
        longitude=raw.longitude,
        generationtime_ms=raw.generationtime_ms,
        utc_offset_seconds=raw.utc_offset_seconds,
        timezone=raw.timezone,
        timezone_abbreviation=raw.timezone_abbreviation,
        elevation=raw.elevation,
    )
    return ParsedForecast(metadata=metadata, series=series, units=units)
