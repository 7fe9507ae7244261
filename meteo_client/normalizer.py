"""Zip per-model parallel arrays into one record per forecast hour."""
from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional, Sequence

from meteo_client.domain import ForecastModel, WeatherVariable
from meteo_client.errors import DecodingError
from meteo_client.models import HourlyRecord, ModelSample, Number
from meteo_client.parser import RawSeries, UnitsBundle

# Open-Meteo hourly timestamps: local, minute resolution, no offset suffix.
TIME_FORMAT = "%Y-%m-%dT%H:%M"


def parse_time(value: str) -> dt.datetime:
    """Read a `YYYY-MM-DDThh:mm` string as a UTC instant."""
    if len(value) != 16:
        raise ValueError(f"time data {value!r} does not match format {TIME_FORMAT!r}")
    return dt.datetime.strptime(value, TIME_FORMAT).replace(tzinfo=dt.timezone.utc)


def _at(values: Optional[Sequence[Optional[Number]]], index: int) -> Optional[Number]:
    """Element `index` of `values`, or None when the array is missing or too short."""
    if values is None or index >= len(values):
        return None
    return values[index]


def build_sample(
    series: RawSeries,
    units: UnitsBundle,
    model: ForecastModel,
    index: int,
) -> ModelSample:
    """Assemble one model's sample for hour `index` from whatever arrays exist."""
    kwargs = {}
    for variable in WeatherVariable:
        kwargs[variable.field_name] = _at(series.get(model, variable), index)
        kwargs[f"{variable.field_name}_unit"] = units.unit_for(model, variable)
    return ModelSample(**kwargs)


def normalize(
    series: RawSeries,
    units: UnitsBundle,
    models: Optional[Iterable[ForecastModel]] = None,
) -> List[HourlyRecord]:
    """
    Build one HourlyRecord per entry of `series.time`, keeping the API's order.

    Every record maps each of `models` (default: all known models) to a
    ModelSample, even when the payload carried nothing for that model.

    Raises:
        DecodingError: a timestamp does not match `YYYY-MM-DDThh:mm`.
    """
    models = tuple(models) if models is not None else tuple(ForecastModel)

    out: List[HourlyRecord] = []
    for i, t in enumerate(series.time):
        try:
            timestamp = parse_time(t)
        except ValueError as exc:
            raise DecodingError(f"Invalid timestamp at index {i}: {t!r}", exc) from exc

        out.append(
            HourlyRecord(
                time=timestamp,
                models={model: build_sample(series, units, model, i) for model in models},
            )
        )
    return out
