from datetime import datetime, timezone

import pytest

from site_monitor.evaluator.decision_engine import SiteDecisionEngine

FIXED_NOW = datetime(2025, 1, 31, 12, 0, 0, tzinfo=timezone.utc)
ENDPOINT = "https://pangolin.example.com:3003/v1/org/acme/home-lab"


@pytest.fixture
def engine() -> SiteDecisionEngine:
    return SiteDecisionEngine(
        endpoint=ENDPOINT,
        org_id="acme",
        site_nice_id="home-lab",
        clock=lambda: FIXED_NOW,
    )
