"""Client configuration pulled from environment variables via pydantic."""
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from meteo_client.domain import DEFAULT_MODELS, ForecastModel, WindSpeedUnit


class Settings(BaseSettings):
    """Environment-driven defaults for the forecast client (METEO_* variables)."""
    model_config = SettingsConfigDict(env_prefix="METEO_", extra="ignore")

    base_url: str = "https://api.open-meteo.com/v1"
    request_timeout_seconds: float = 10.0
    user_agent: str = "meteo-client/0.1"
    # comma-separated wire tags, e.g. METEO_DEFAULT_MODELS=gfs_seamless,ncep_hrrr_conus
    default_models: str = ",".join(m.value for m in DEFAULT_MODELS)
    default_wind_speed_unit: str = WindSpeedUnit.KNOTS.value
    log_level: str = "INFO"

    @field_validator("base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("default_models", mode="after")
    @classmethod
    def validate_models(cls, v: str) -> str:
        """Check each comma-separated entry is a known model and canonicalize it."""
        models = [ForecastModel.parse(p).value for p in v.split(",") if p.strip()]
        if not models:
            raise ValueError("default_models must name at least one model")
        return ",".join(models)

    @field_validator("default_wind_speed_unit", mode="after")
    @classmethod
    def validate_wind_speed_unit(cls, v: str) -> str:
        return WindSpeedUnit.parse(v).value

    def models(self) -> List[ForecastModel]:
        return [ForecastModel(m) for m in self.default_models.split(",")]

    def wind_speed_unit(self) -> WindSpeedUnit:
        return WindSpeedUnit(self.default_wind_speed_unit)


settings = Settings()
