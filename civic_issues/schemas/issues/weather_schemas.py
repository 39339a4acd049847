# Local application imports
from civic_issues.schemas.issues.issue_schemas import DocumentModel


class WeatherReport(DocumentModel):
    condition_text: str
    condition_code: int | None = None
    temp_c: float
    wind_kph: float
    humidity: int
    latitude: float
    longitude: float
