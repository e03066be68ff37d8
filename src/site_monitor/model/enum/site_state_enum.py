from enum import StrEnum


class SiteState(StrEnum):
    """
    Observed site states:
    UNKNOWN: Initial pseudo-state before the first completed check
    ONLINE: API reachable and reports the site online
    OFFLINE: API reachable and reports the site offline
    API_ERROR: Probe failed (transport, HTTP status, payload or API failure flag)
    """

    UNKNOWN = "unknown"
    ONLINE = "online"
    OFFLINE = "offline"
    API_ERROR = "api_error"
