# Local application imports
from civic_issues.core.monitoring.logging import get_contextual_logger, get_logger
from civic_issues.core.monitoring.sentry import setup_sentry

__all__ = ["get_contextual_logger", "setup_sentry", "get_logger"]
