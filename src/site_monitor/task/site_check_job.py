import asyncio
import logging

from site_monitor.evaluator.decision_engine import SiteDecisionEngine
from site_monitor.evaluator.site_state_tracker import SiteStateTracker
from site_monitor.model.enum.site_state_enum import SiteState
from site_monitor.model.monitor_model import NotificationIntent, ProbeFailure, ProbeOutcome, TransitionEvent
from site_monitor.util.notifier.base import BaseNotifier
from site_monitor.util.probe.site_probe_client import SiteProbeClient

logger = logging.getLogger(__name__)


class SiteCheckJob:
    """
    One full check cycle: probe → classify → exchange state → decide → notify.

    Invoked by the scheduler on every tick and once at startup. The tracker is
    the only state shared between cycles.
    """

    def __init__(
        self,
        endpoint: str,
        probe_client: SiteProbeClient,
        tracker: SiteStateTracker,
        engine: SiteDecisionEngine,
        notifier: BaseNotifier,
        cycle_deadline_sec: float = 15.0,
    ):
        """
        Args:
            endpoint: Full URL of the site status resource
            probe_client: Performs the HTTP check
            tracker: Owner of the previous observed state
            engine: Classification and notification policy
            notifier: Delivery channel for alerts
            cycle_deadline_sec: Probe is abandoned and treated as API_ERROR after this
        """
        self.endpoint = endpoint
        self.probe_client = probe_client
        self.tracker = tracker
        self.engine = engine
        self.notifier = notifier
        self.cycle_deadline_sec = float(cycle_deadline_sec)
        self.cycle_count: int = 0

    async def run_once(self) -> NotificationIntent:
        self.cycle_count += 1
        cycle = self.cycle_count
        logger.debug(f"[CHECK #{cycle}] Probing {self.endpoint}")

        outcome: ProbeOutcome = await self._probe_with_deadline()

        current: SiteState = self.engine.classify(outcome)
        previous: SiteState = self.tracker.exchange(current)
        intent: NotificationIntent = self.engine.decide(outcome, TransitionEvent(previous=previous, current=current))

        if intent.should_send:
            sent: bool = await self.notifier.send(intent.subject, intent.body)
            if not sent:
                logger.error(f"[CHECK #{cycle}] {intent.action} notification was not delivered")

        return intent

    async def run_safely(self) -> None:
        """Scheduler entry point; a failing cycle must not stop later ticks."""
        try:
            await self.run_once()
        except asyncio.CancelledError:
            logger.info("[CHECK] cycle cancelled")
            raise
        except Exception as e:
            logger.exception(f"[CHECK] unexpected exception in check cycle: {e}")

    async def _probe_with_deadline(self) -> ProbeOutcome:
        try:
            return await asyncio.wait_for(self.probe_client.check(self.endpoint), timeout=self.cycle_deadline_sec)
        except asyncio.TimeoutError:
            logger.warning(f"[CHECK] Probe exceeded cycle deadline of {self.cycle_deadline_sec}s")
            return ProbeFailure(description=f"check deadline exceeded after {self.cycle_deadline_sec}s")
