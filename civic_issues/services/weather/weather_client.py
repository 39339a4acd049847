# Standard library imports
from typing import Any

# Third-party imports
import httpx

# Local application imports
from civic_issues.core.monitoring.logging import get_contextual_logger
from civic_issues.schemas.issues.weather_schemas import WeatherReport
from civic_issues.services.weather.exceptions import WeatherUnavailableError
from civic_issues.settings import settings

logger = get_contextual_logger(__name__)


class WeatherClient:
    """Current conditions from weatherapi.com."""

    def __init__(
        self,
        api_key: str | None,
        base_url: str,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport

    async def fetch_current(self, latitude: float, longitude: float) -> WeatherReport:
        if not self.api_key:
            raise WeatherUnavailableError("Weather provider is not configured")

        params = {"key": self.api_key, "q": f"{latitude},{longitude}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(f"Weather provider returned {exc.response.status_code}: {exc.response.text[:200]}")
            raise WeatherUnavailableError("Weather provider returned an error") from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(f"Weather request failed: {exc}")
            raise WeatherUnavailableError("Weather provider is unreachable") from exc

        return self._parse(payload, latitude, longitude)

    @staticmethod
    def _parse(payload: dict[str, Any], latitude: float, longitude: float) -> WeatherReport:
        try:
            current = payload["current"]
            condition = current.get("condition") or {}
            return WeatherReport(
                condition_text=condition["text"],
                condition_code=condition.get("code"),
                temp_c=current["temp_c"],
                wind_kph=current["wind_kph"],
                humidity=current["humidity"],
                latitude=latitude,
                longitude=longitude,
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.error(f"Unexpected weather payload: {exc}")
            raise WeatherUnavailableError("Weather provider sent an unexpected response") from exc


def build_weather_client() -> WeatherClient:
    return WeatherClient(
        api_key=settings.WEATHER_API_KEY,
        base_url=settings.WEATHER_API_URL,
        timeout=settings.WEATHER_TIMEOUT_SECONDS,
    )
