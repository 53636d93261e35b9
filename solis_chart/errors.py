class SolisChartError(Exception):
    """Base class for errors raised by this package."""


class ConfigError(SolisChartError):
    pass


class RequestError(SolisChartError):
    """Non-success response from the SolisCloud API."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP {status_code}: {body}")
