from dataclasses import dataclass

from site_monitor.model.enum.notification_action_enum import NotificationAction
from site_monitor.model.enum.site_state_enum import SiteState


@dataclass(frozen=True)
class ProbeSuccess:
    """API answered and reported the site status"""

    online: bool
    name: str = ""
    message: str = ""


@dataclass(frozen=True)
class ProbeFailure:
    """API could not be checked; description is shown in the alert body"""

    description: str


ProbeOutcome = ProbeSuccess | ProbeFailure


@dataclass(frozen=True)
class TransitionEvent:
    previous: SiteState
    current: SiteState

    @property
    def changed(self) -> bool:
        return self.previous != self.current


@dataclass(frozen=True)
class NotificationIntent:
    action: NotificationAction
    subject: str = ""
    body: str = ""

    @property
    def should_send(self) -> bool:
        return self.action != NotificationAction.SUPPRESS
