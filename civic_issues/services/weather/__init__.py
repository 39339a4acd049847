# Local application imports
from civic_issues.services.weather.exceptions import WeatherUnavailableError
from civic_issues.services.weather.weather_client import WeatherClient, build_weather_client

__all__ = ["WeatherClient", "WeatherUnavailableError", "build_weather_client"]
