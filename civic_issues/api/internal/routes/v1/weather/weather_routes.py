# Third-party imports
from fastapi import APIRouter, Depends, Query

# Local application imports
from civic_issues.dependancies.common import get_weather_client
from civic_issues.schemas.issues.weather_schemas import WeatherReport
from civic_issues.services.weather.weather_client import WeatherClient
from civic_issues.settings import settings

router = APIRouter(prefix="/weather", tags=["Weather"])


@router.get("", response_model=WeatherReport)
async def get_current_weather(
    lat: float | None = Query(None, ge=-90, le=90),
    lon: float | None = Query(None, ge=-180, le=180),
    client: WeatherClient = Depends(get_weather_client),
):
    """Current weather at the given point, or at the default location"""
    if lat is None or lon is None:
        lat, lon = settings.DEFAULT_LATITUDE, settings.DEFAULT_LONGITUDE
    return await client.fetch_current(lat, lon)
