# Local application imports
from civic_issues.settings.common import CommonSettings


class DevSettings(CommonSettings):
    DEBUG_MODE: bool = True
