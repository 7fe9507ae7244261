import json
import unittest
from urllib.parse import parse_qs, urlparse

import requests

from meteo_client.client import OpenMeteoClient, build_url
from meteo_client.config import Settings
from meteo_client.domain import ForecastModel, WeatherDataType, WindSpeedUnit
from meteo_client.errors import DecodingError, InvalidResponse, InvalidURL
from meteo_client.transport import HttpResult, RequestsTransport

ECMWF = ForecastModel.ECMWF_IFS025
ICON = ForecastModel.ICON_SEAMLESS
GEM = ForecastModel.GEM_HRDPS_CONTINENTAL


class DummyTransport:
    def __init__(self, status_code=200, content=b""):
        self.status_code = status_code
        self.content = content
        self.urls = []

    def get(self, url):
        self.urls.append(url)
        return HttpResult(status_code=self.status_code, content=self.content)


class FailingTransport:
    def get(self, url):
        raise requests.exceptions.ConnectTimeout("timed out")


class DummyResp:
    def __init__(self, status_code, content):
        self.status_code = status_code
        self.content = content


def _make_weather_payload():
    return {
        "latitude": 52.5,
        "longitude": 13.5,
        "generationtime_ms": 0.16367435455322266,
        "utc_offset_seconds": 0,
        "timezone": "GMT",
        "timezone_abbreviation": "GMT",
        "elevation": 38.0,
        "hourly_units": {
            "time": "iso8601",
            "wind_speed_10m_ecmwf_ifs025": "kn",
            "wind_direction_10m_ecmwf_ifs025": "°",
            "wind_gusts_10m_ecmwf_ifs025": "kn",
            "wind_speed_10m_icon_seamless": "kn",
            "wind_direction_10m_icon_seamless": "°",
            "wind_gusts_10m_icon_seamless": "kn",
            "precipitation_ecmwf_ifs025": "mm",
            "rain_ecmwf_ifs025": "mm",
        },
        "hourly": {
            "time": ["2025-06-18T00:00", "2025-06-18T01:00"],
            "wind_speed_10m_ecmwf_ifs025": [3.8, 3.8],
            "wind_direction_10m_ecmwf_ifs025": [240, 249],
            "wind_gusts_10m_ecmwf_ifs025": [7.0, 7.6],
            "wind_speed_10m_icon_seamless": [1.6, 2.5],
            "wind_direction_10m_icon_seamless": [256, 274],
            "wind_gusts_10m_icon_seamless": [2.9, 4.9],
            "precipitation_ecmwf_ifs025": [None, 0.3],
            "rain_ecmwf_ifs025": [1.5, 0.3],
        },
    }


def _body(payload=None):
    return json.dumps(payload or _make_weather_payload()).encode("utf-8")


class TestBuildUrl(unittest.TestCase):
    def _query(self, url):
        return {k: v[0] for k, v in parse_qs(urlparse(url).query).items()}

    def test_all_data_types(self):
        url = build_url("https://api.open-meteo.com/v1", 49.2827, -123.1207, [ECMWF, ICON], WindSpeedUnit.KNOTS)
        parsed = urlparse(url)
        self.assertEqual(parsed.path, "/v1/forecast")
        query = self._query(url)
        self.assertEqual(query["latitude"], "49.2827")
        self.assertEqual(query["longitude"], "-123.1207")
        self.assertEqual(
            query["hourly"],
            "wind_speed_10m,wind_direction_10m,wind_gusts_10m,precipitation,rain,showers,"
            "snowfall,precipitation_probability,weather_code",
        )
        self.assertEqual(query["models"], "ecmwf_ifs025,icon_seamless")
        self.assertEqual(query["wind_speed_unit"], "kn")

    def test_wind_only(self):
        url = build_url("https://x.test/v1", 1.0, 2.0, [ECMWF, ICON], WindSpeedUnit.MPH, WeatherDataType.WIND)
        query = self._query(url)
        self.assertEqual(query["hourly"], "wind_speed_10m,wind_direction_10m,wind_gusts_10m")
        self.assertEqual(query["wind_speed_unit"], "mph")

    def test_precipitation_only(self):
        url = build_url("https://x.test/v1", 1.0, 2.0, [ICON], WindSpeedUnit.KNOTS, WeatherDataType.PRECIPITATION)
        self.assertEqual(
            self._query(url)["hourly"],
            "precipitation,rain,showers,snowfall,precipitation_probability,weather_code",
        )

    def test_rejects_bad_coordinates(self):
        for lat, lon in ((91, 0), (0, -181), (float("nan"), 0), (0, float("inf")), ("1", 0), (True, 0)):
            with self.subTest(lat=lat, lon=lon):
                with self.assertRaises(InvalidURL):
                    build_url("https://x.test/v1", lat, lon, [ECMWF, ICON], WindSpeedUnit.KNOTS)

    def test_rejects_empty_selection(self):
        with self.assertRaises(InvalidURL):
            build_url("https://x.test/v1", 0, 0, [], WindSpeedUnit.KNOTS)
        with self.assertRaises(InvalidURL):
            build_url("https://x.test/v1", 0, 0, [ECMWF], WindSpeedUnit.KNOTS, WeatherDataType(0))

    def test_rejects_unpreparable_base_url(self):
        with self.assertRaises(InvalidURL):
            build_url("not a url", 0, 0, [ECMWF, ICON], WindSpeedUnit.KNOTS)


class TestOpenMeteoClient(unittest.TestCase):
    def setUp(self):
        self.settings = Settings(base_url="https://api.open-meteo.com/v1/")

    def _client(self, transport):
        return OpenMeteoClient(transport, settings=self.settings)

    def test_fetch_decodes_records(self):
        transport = DummyTransport(content=_body())
        records = self._client(transport).fetch(52.5, 13.5)

        self.assertEqual(len(records), 2)
        self.assertEqual(records[0][ECMWF].wind_speed, 3.8)
        self.assertEqual(records[0][ECMWF].wind_direction, 240)
        self.assertEqual(records[1][ECMWF].wind_speed, 3.8)
        self.assertEqual(records[1][ECMWF].wind_direction, 249)
        self.assertEqual(records[1][ICON].wind_gusts, 4.9)
        self.assertEqual(set(records[0].models), {ECMWF, ICON})
        self.assertEqual(len(transport.urls), 1)
        self.assertTrue(transport.urls[0].startswith("https://api.open-meteo.com/v1/forecast?"))

    def test_null_precipitation_keeps_other_fields(self):
        records = self._client(DummyTransport(content=_body())).fetch(52.5, 13.5)
        sample = records[0][ECMWF]
        self.assertIsNone(sample.precipitation)
        self.assertEqual(sample.rain, 1.5)
        self.assertEqual(sample.wind_speed, 3.8)
        self.assertEqual(records[1][ECMWF].precipitation, 0.3)

    def test_requested_model_missing_from_payload(self):
        records = self._client(DummyTransport(content=_body())).fetch(52.5, 13.5, models=[ECMWF, GEM])
        gem = records[0][GEM]
        self.assertIsNotNone(gem)
        self.assertTrue(gem.is_empty())
        self.assertEqual(gem.snowfall_unit, "cm")
        self.assertEqual(gem.precipitation_probability_unit, "%")

    def test_models_accept_wire_tags(self):
        transport = DummyTransport(content=_body())
        records = self._client(transport).fetch(52.5, 13.5, models=["icon_seamless", "ecmwf_ifs025"])
        self.assertEqual(list(records[0].models), [ICON, ECMWF])
        self.assertIn("models=icon_seamless%2Cecmwf_ifs025", transport.urls[0])

    def test_unknown_model_is_invalid_url(self):
        with self.assertRaises(InvalidURL):
            self._client(DummyTransport(content=_body())).fetch(0, 0, models=["nope", "ecmwf_ifs025"])

    def test_fetch_response_carries_metadata(self):
        response = self._client(DummyTransport(content=_body())).fetch_response(52.5, 13.5)
        self.assertEqual(response.metadata.timezone, "GMT")
        self.assertEqual(response.metadata.elevation, 38.0)
        self.assertEqual(response.models, (ECMWF, ICON))
        self.assertEqual(len(response.hourly), 2)

    def test_non_2xx_is_invalid_response(self):
        for status in (500, 404, 301):
            with self.subTest(status=status):
                transport = DummyTransport(status_code=status, content=_body())
                with self.assertRaises(InvalidResponse) as ctx:
                    self._client(transport).fetch(52.5, 13.5)
                self.assertEqual(ctx.exception.status_code, status)

    def test_any_2xx_is_accepted(self):
        records = self._client(DummyTransport(status_code=203, content=_body())).fetch(52.5, 13.5)
        self.assertEqual(len(records), 2)

    def test_malformed_json_is_decoding_error(self):
        transport = DummyTransport(content=b"<html>oops</html>")
        with self.assertRaises(DecodingError) as ctx:
            self._client(transport).fetch(52.5, 13.5)
        self.assertIsNotNone(ctx.exception.cause)
        self.assertIs(ctx.exception.__cause__, ctx.exception.cause)

    def test_schema_mismatch_is_decoding_error(self):
        payload = _make_weather_payload()
        del payload["hourly"]
        with self.assertRaises(DecodingError):
            self._client(DummyTransport(content=_body(payload))).fetch(52.5, 13.5)

    def test_transport_errors_propagate_unchanged(self):
        with self.assertRaises(requests.exceptions.ConnectTimeout):
            self._client(FailingTransport()).fetch(52.5, 13.5)

    def test_decoding_is_idempotent(self):
        client = self._client(DummyTransport(content=_body()))
        self.assertEqual(client.fetch(52.5, 13.5), client.fetch(52.5, 13.5))

    def test_unexpected_wind_unit_is_logged(self):
        payload = _make_weather_payload()
        payload["hourly_units"]["wind_speed_10m_icon_seamless"] = "km/h"
        with self.assertLogs("meteo_client.client", level="WARNING") as logs:
            self._client(DummyTransport(content=_body(payload))).fetch(52.5, 13.5)
        self.assertIn("wind_speed_10m_icon_seamless", logs.output[0])

    def test_settings_defaults_used(self):
        settings = Settings(default_models="gfs_seamless,ncep_hrrr_conus", default_wind_speed_unit="ms")
        transport = DummyTransport(content=_body())
        records = OpenMeteoClient(transport, settings=settings).fetch(40.7, -74.0)
        self.assertEqual(set(records[0].models), {ForecastModel.GFS_SEAMLESS, ForecastModel.HRRR})
        query = parse_qs(urlparse(transport.urls[0]).query)
        self.assertEqual(query["models"], ["gfs_seamless,ncep_hrrr_conus"])
        self.assertEqual(query["wind_speed_unit"], ["ms"])


class TestRequestsTransport(unittest.TestCase):
    def test_uses_session_with_timeout_and_headers(self):
        calls = []

        def fake_get(url, headers=None, timeout=None):
            calls.append((url, headers, timeout))
            return DummyResp(200, b"{}")

        session = type("S", (), {"get": staticmethod(fake_get)})()
        transport = RequestsTransport(session, timeout=3.5, user_agent="tests/1.0")
        result = transport.get("https://x.test/v1/forecast")

        self.assertEqual(result, HttpResult(status_code=200, content=b"{}"))
        self.assertTrue(result.ok)
        url, headers, timeout = calls[0]
        self.assertEqual(url, "https://x.test/v1/forecast")
        self.assertEqual(timeout, 3.5)
        self.assertEqual(headers["User-Agent"], "tests/1.0")

    def test_timeout_defaults_from_settings(self):
        transport = RequestsTransport(settings=Settings(request_timeout_seconds=4))
        self.assertEqual(transport.timeout, 4)
        self.assertIsInstance(transport.session, requests.Session)


if __name__ == "__main__":
    unittest.main()
