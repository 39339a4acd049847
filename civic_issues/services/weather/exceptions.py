class WeatherUnavailableError(Exception):
    """The weather provider could not answer."""

    status_code = 502
    code = "bad_gateway"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
