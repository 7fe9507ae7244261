"""Command-line entry point: print an hourly multi-model forecast table."""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional, Sequence, TextIO

import requests

from meteo_client.client import OpenMeteoClient
from meteo_client.config import settings
from meteo_client.domain import ForecastModel, WeatherDataType, WindSpeedUnit
from meteo_client.errors import OpenMeteoError
from meteo_client.models import HourlyRecord
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="meteo_cli")

COLUMNS = ("wind_speed", "wind_direction", "wind_gusts", "precipitation", "precipitation_probability", "weather_code")


def _models_arg(value: str) -> List[ForecastModel]:
    try:
        return [ForecastModel.parse(v) for v in value.split(",") if v.strip()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _enum_arg(parse):
    def _inner(value: str):
        try:
            return parse(value)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(str(exc)) from exc
    return _inner


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meteo-client",
        description="Fetch an hourly wind/precipitation forecast from several Open-Meteo models.",
    )
    parser.add_argument("--lat", type=float, required=True, help="Latitude in decimal degrees")
    parser.add_argument("--lon", type=float, required=True, help="Longitude in decimal degrees")
    parser.add_argument(
        "--models",
        type=_models_arg,
        default=None,
        help=f"Comma-separated model tags (default: {settings.default_models})",
    )
    parser.add_argument(
        "--wind-speed-unit",
        type=_enum_arg(WindSpeedUnit.parse),
        default=None,
        help=f"kn, kmh, mph or ms (default: {settings.default_wind_speed_unit})",
    )
    parser.add_argument(
        "--data-types",
        type=_enum_arg(WeatherDataType.parse),
        default=WeatherDataType.ALL,
        help="wind, precipitation or all (default: all)",
    )
    parser.add_argument("--hours", type=int, default=None, help="Only print the first N hours")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (default: %(default)s)")
    return parser


def render(records: Sequence[HourlyRecord], out: TextIO) -> None:
    """Write one line per (hour, model) with the non-empty display values."""
    for record in records:
        stamp = record.time.strftime("%Y-%m-%d %H:%M")
        for model, sample in record.models.items():
            shown = sample.to_display_strings()
            cells = [f"{name}={shown[name]}" for name in COLUMNS if shown[name]]
            out.write(f"{stamp}  {model.value:<22} {'  '.join(cells) or '-'}\n")


def main(argv: Optional[Sequence[str]] = None, out: TextIO = sys.stdout) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level.upper(), job_name="meteo_cli")

    client = OpenMeteoClient()
    try:
        records = client.fetch(
            args.lat,
            args.lon,
            models=args.models,
            wind_speed_unit=args.wind_speed_unit,
            data_types=args.data_types,
        )
    except (OpenMeteoError, requests.RequestException) as exc:
        logger.error("Forecast request failed: %s", exc)
        return 1

    if args.hours is not None:
        records = records[: max(args.hours, 0)]
    render(records, out)
    logger.info("Printed %d hours", len(records))
    return 0


if __name__ == "__main__":
    sys.exit(main())
