"""asyncio flavour of the forecast client, built on httpx.

Cancelling the task awaiting `fetch` aborts the in-flight request and the
caller sees `asyncio.CancelledError`.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Union

import httpx

from meteo_client.client import ModelArg, build_url, decode_forecast, resolve_params
from meteo_client.config import Settings, settings as default_settings
from meteo_client.domain import WeatherDataType, WindSpeedUnit
from meteo_client.errors import InvalidResponse
from meteo_client.models import ForecastResponse, HourlyRecord
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="meteo_client/async_client")


class AsyncOpenMeteoClient:
    """Same surface as OpenMeteoClient, with coroutine `fetch`/`fetch_response`.

    Pass an `httpx.AsyncClient` to reuse connections; otherwise a short-lived
    client is opened per call.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        base_url: Optional[str] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or default_settings
        self.base_url = (base_url or self.settings.base_url).rstrip("/")
        self.client = client
        self.headers = {
            "Accept": "application/json",
            "User-Agent": self.settings.user_agent,
        }

    async def _get(self, url: str) -> httpx.Response:
        if self.client is not None:
            return await self.client.get(url, headers=self.headers)
        async with httpx.AsyncClient(
            timeout=self.settings.request_timeout_seconds,
            headers=self.headers,
        ) as client:
            return await client.get(url)

    async def fetch_response(
        self,
        latitude: float,
        longitude: float,
        models: Optional[Iterable[ModelArg]] = None,
        wind_speed_unit: Union[WindSpeedUnit, str, None] = None,
        data_types: Union[WeatherDataType, str] = WeatherDataType.ALL,
    ) -> ForecastResponse:
        """Async counterpart of OpenMeteoClient.fetch_response; httpx errors propagate."""
        models, unit, data_types = resolve_params(models, wind_speed_unit, data_types, self.settings)
        url = build_url(self.base_url, latitude, longitude, models, unit, data_types)

        logger.debug("Requesting forecast: %s", mask_url(url))
        resp = await self._get(url)
        if not 200 <= resp.status_code <= 299:
            raise InvalidResponse(resp.status_code, url=url)
        return decode_forecast(resp.content, models, unit)

    async def fetch(
        self,
        latitude: float,
        longitude: float,
        models: Optional[Iterable[ModelArg]] = None,
        wind_speed_unit: Union[WindSpeedUnit, str, None] = None,
        data_types: Union[WeatherDataType, str] = WeatherDataType.ALL,
    ) -> List[HourlyRecord]:
        response = await self.fetch_response(
            latitude,
            longitude,
            models=models,
            wind_speed_unit=wind_speed_unit,
            data_types=data_types,
        )
        return response.hourly
