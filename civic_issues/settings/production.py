# Local application imports
from civic_issues.settings.common import CommonSettings


class ProductionSettings(CommonSettings):
    DEBUG_MODE: bool = False
    AUTO_CREATE_TABLES: bool = False
    SQL_ECHO: bool = False

    # Sessions must survive restarts in production, so the key cannot be generated
    JWT_SECRET_KEY: str
