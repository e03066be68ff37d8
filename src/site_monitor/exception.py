"""Site Monitor Exception Definitions"""


class SiteMonitorError(Exception):
    """Base exception for the site monitor"""

    pass


class ConfigError(SiteMonitorError):
    """Startup configuration is missing or invalid (fatal)"""

    def __init__(self, message: str, problems: list[str] | None = None):
        super().__init__(message)
        self.problems: list[str] = problems or []


class ProbeError(SiteMonitorError):
    """Base class for health endpoint probe failures"""

    def __init__(self, message: str, endpoint: str | None = None):
        super().__init__(message)
        self.endpoint = endpoint


class ProbeTransportError(ProbeError):
    """Connection, DNS, TLS or timeout failure while calling the endpoint"""

    pass


class ProbeStatusError(ProbeError):
    """Endpoint answered with a non-200 HTTP status"""

    def __init__(self, message: str, endpoint: str | None = None, status_code: int | None = None):
        super().__init__(message, endpoint)
        self.status_code = status_code


class ProbePayloadError(ProbeError):
    """Response body could not be parsed into the expected envelope"""

    pass


class ProbeApiFailureError(ProbeError):
    """Envelope parsed but the API itself reported a failure"""

    pass
