import logging

import httpx
from pydantic import ValidationError

from site_monitor.exception import (
    ProbeApiFailureError,
    ProbeError,
    ProbePayloadError,
    ProbeStatusError,
    ProbeTransportError,
)
from site_monitor.model.monitor_model import ProbeFailure, ProbeOutcome, ProbeSuccess
from site_monitor.schema.site_response_schema import SiteResponseSchema

EXPECTED_STATUS = 200


class SiteProbeClient:
    """
    Issues one GET against the site status endpoint per check.

    `check()` never raises: every problem becomes a ProbeFailure so the caller
    can classify it as API_ERROR.
    """

    def __init__(
        self,
        token: str,
        timeout_sec: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.timeout_sec = timeout_sec
        self.logger = logging.getLogger(__class__.__name__)
        self._headers = {"Accept": "application/json", "Authorization": f"Bearer {token}"}
        self._client = client or httpx.AsyncClient(timeout=timeout_sec)
        self._owns_client = client is None

    async def check(self, endpoint: str) -> ProbeOutcome:
        try:
            response = await self.fetch(endpoint)
        except ProbeError as e:
            self.logger.warning(f"[PROBE] {e.__class__.__name__}: {e}")
            return ProbeFailure(description=str(e))

        data = response.data
        self.logger.debug(f"[PROBE] {endpoint}: online={data.online}, name={data.name!r}")
        return ProbeSuccess(online=data.online, name=data.name or "", message=data.message or "")

    async def fetch(self, endpoint: str) -> SiteResponseSchema:
        """Perform the request and validate the envelope, raising ProbeError subclasses."""
        try:
            response: httpx.Response = await self._client.get(endpoint, headers=self._headers)
        except httpx.TimeoutException as e:
            raise ProbeTransportError(f"request timed out after {self.timeout_sec}s: {e}", endpoint) from e
        except httpx.HTTPError as e:
            raise ProbeTransportError(f"request failed: {e}", endpoint) from e

        if response.status_code != EXPECTED_STATUS:
            raise ProbeStatusError(
                f"unexpected status: {response.status_code} {response.reason_phrase}".rstrip(),
                endpoint,
                status_code=response.status_code,
            )

        try:
            payload = SiteResponseSchema.model_validate_json(response.content)
        except ValidationError as e:
            raise ProbePayloadError(f"invalid response payload: {e.error_count()} error(s): {e}", endpoint) from e

        if not payload.success or payload.status != EXPECTED_STATUS:
            raise ProbeApiFailureError(
                f"api indicated failure: success={str(payload.success).lower()} "
                f"status={payload.status} message={payload.message or ''}",
                endpoint,
            )

        return payload

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
