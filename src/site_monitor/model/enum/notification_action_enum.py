from enum import StrEnum


class NotificationAction(StrEnum):
    """What a check cycle does with its transition"""

    SUPPRESS = "suppress"  # Log only
    API_ERROR_ALERT = "api_error_alert"
    OFFLINE_ALERT = "offline_alert"
    RECOVERY_NOTICE = "recovery_notice"
