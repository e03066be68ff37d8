import logging
from datetime import datetime
from typing import Callable

from site_monitor.model.enum.notification_action_enum import NotificationAction
from site_monitor.model.enum.site_state_enum import SiteState
from site_monitor.model.monitor_model import (
    NotificationIntent,
    ProbeFailure,
    ProbeOutcome,
    ProbeSuccess,
    TransitionEvent,
)
from site_monitor.schema.monitor_config_schema import MonitorConfig
from site_monitor.util.time_util import format_rfc3339, utc_now

SUBJECT_PREFIX = "[Pangolin Monitor]"

RECOVERABLE_STATES = frozenset({SiteState.OFFLINE, SiteState.API_ERROR})


class SiteDecisionEngine:
    """
    Turns a probe outcome plus the state transition into a notification decision.

    Policy:
    - API_ERROR: alert on entry, suppress while it persists
    - OFFLINE: alert on entry, suppress while it persists
    - ONLINE after OFFLINE/API_ERROR: recovery notice
    - ONLINE after ONLINE/UNKNOWN: suppress (no "recovered" on startup)
    """

    def __init__(
        self,
        endpoint: str,
        org_id: str,
        site_nice_id: str,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.endpoint = endpoint
        self.org_id = org_id
        self.site_nice_id = site_nice_id
        self._clock = clock
        self.logger = logging.getLogger(__class__.__name__)

    @classmethod
    def from_config(cls, config: MonitorConfig) -> "SiteDecisionEngine":
        return cls(endpoint=config.endpoint, org_id=config.API.ORG_ID, site_nice_id=config.API.SITE_NICE_ID)

    @staticmethod
    def classify(outcome: ProbeOutcome) -> SiteState:
        """A failed probe is always API_ERROR, never OFFLINE."""
        if isinstance(outcome, ProbeFailure):
            return SiteState.API_ERROR
        return SiteState.ONLINE if outcome.online else SiteState.OFFLINE

    def decide(self, outcome: ProbeOutcome, transition: TransitionEvent) -> NotificationIntent:
        previous, current = transition.previous, transition.current

        if current == SiteState.API_ERROR:
            if not transition.changed:
                self.logger.info("API CHECK FAILED (unchanged, suppressing repeat email)")
                return NotificationIntent(action=NotificationAction.SUPPRESS)
            self.logger.warning(f"API CHECK FAILED (prev={previous})")
            return self._api_error_alert(outcome)

        if current == SiteState.OFFLINE:
            if not transition.changed:
                self.logger.info("SITE OFFLINE (unchanged, suppressing repeat email)")
                return NotificationIntent(action=NotificationAction.SUPPRESS)
            name = self._display_name(outcome)
            self.logger.warning(f"SITE OFFLINE: {name} ({self.site_nice_id}) (prev={previous})")
            return self._offline_alert(outcome, name)

        if current == SiteState.ONLINE:
            if previous in RECOVERABLE_STATES:
                self.logger.info(f"RECOVERY: site back ONLINE (prev={previous})")
                return self._recovery_notice(outcome, previous)
            self.logger.info("OK: site online (no change)")
            return NotificationIntent(action=NotificationAction.SUPPRESS)

        # UNKNOWN is never produced by classify()
        self.logger.warning(f"[DECISION] Ignoring transition into {current} (prev={previous})")
        return NotificationIntent(action=NotificationAction.SUPPRESS)

    # ----------------------------------------------------------------------
    # Message composition
    # ----------------------------------------------------------------------
    def _api_error_alert(self, outcome: ProbeOutcome) -> NotificationIntent:
        error = outcome.description if isinstance(outcome, ProbeFailure) else "unknown error"
        body = self._format_body(
            [
                ("Time (UTC)", self._timestamp()),
                ("Endpoint", self.endpoint),
                ("Error", error),
            ]
        )
        return NotificationIntent(
            action=NotificationAction.API_ERROR_ALERT,
            subject=f"{SUBJECT_PREFIX} API check FAILED",
            body=body,
        )

    def _offline_alert(self, outcome: ProbeOutcome, name: str) -> NotificationIntent:
        online = outcome.online if isinstance(outcome, ProbeSuccess) else False
        message = outcome.message if isinstance(outcome, ProbeSuccess) else ""
        body = self._format_body(
            [
                ("Time (UTC)", self._timestamp()),
                ("Endpoint", self.endpoint),
                ("Org", self.org_id),
                ("Site", self.site_nice_id),
                ("Online", str(online).lower()),
                ("Message", message),
            ]
        )
        return NotificationIntent(
            action=NotificationAction.OFFLINE_ALERT,
            subject=f"{SUBJECT_PREFIX} Site {name} is OFFLINE",
            body=body,
        )

    def _recovery_notice(self, outcome: ProbeOutcome, previous: SiteState) -> NotificationIntent:
        name = self._display_name(outcome)
        body = self._format_body(
            [
                ("Time (UTC)", self._timestamp()),
                ("Endpoint", self.endpoint),
                ("Org", self.org_id),
                ("Site", self.site_nice_id),
                ("Previous state", previous.value),
            ]
        )
        return NotificationIntent(
            action=NotificationAction.RECOVERY_NOTICE,
            subject=f"{SUBJECT_PREFIX} Site {name} is ONLINE (recovered)",
            body=body,
        )

    def _display_name(self, outcome: ProbeOutcome) -> str:
        name = outcome.name if isinstance(outcome, ProbeSuccess) else ""
        # Subject header must stay on one line
        name = " ".join(name.splitlines()).strip()
        return name or self.site_nice_id

    def _timestamp(self) -> str:
        return format_rfc3339(self._clock())

    @staticmethod
    def _format_body(fields: list[tuple[str, str]]) -> str:
        return "".join(f"{label}: {value}\n" for label, value in fields)
