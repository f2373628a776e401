"""Risk API HTTP client for fetching scored applicants"""

import logging
import httpx
from typing import List
from pydantic import BaseModel, Field, TypeAdapter, ValidationError
from riskmap.domain.models import ApplicantRecord
from riskmap.domain.exceptions import FetchError, MalformedResponseError
from riskmap.infrastructure.observability.metrics import fetch_latency_histogram, record_fetch
from riskmap.config import settings

logger = logging.getLogger(__name__)


class ApplicantRecordPayload(BaseModel):
    """Wire format of one applicant in risk API responses"""

    lat: float = Field(..., allow_inf_nan=False)
    lon: float = Field(..., allow_inf_nan=False)
    age: int = Field(..., ge=0)
    prior_claims: int = Field(..., ge=0)
    credit_band: str
    geo_risk: float
    asset_value: float = Field(..., ge=0)
    risk_score: float

    def to_record(self) -> ApplicantRecord:
        return ApplicantRecord(**self.model_dump())


_batch_adapter = TypeAdapter(List[ApplicantRecordPayload])


class RiskApiClient:
    """Client for the risk model backend (baseline and weighted scores)"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        base = settings.risk_api_base if base_url is None else base_url
        # Empty base means the dashboard's own origin
        self.base_url = (base or settings.same_origin_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def fetch_baseline(self) -> List[ApplicantRecord]:
        """
        Fetch the unweighted applicant listing.

        Raises:
            FetchError: On network failure or non-success status
            MalformedResponseError: If the body is not a list of applicants
        """
        return await self._get_records("fetch_baseline", "/api/applicants")

    async def fetch_scored(self, age_weight: float) -> List[ApplicantRecord]:
        """
        Fetch applicants with risk scores recomputed at the given age weight.

        Raises:
            FetchError: On network failure or non-success status
            MalformedResponseError: If the body is not a list of applicants
        """
        return await self._get_records(
            "fetch_scored", "/api/risk-scores", params={"age_weight": age_weight}
        )

    async def _get_records(self, operation: str, path: str, params: dict | None = None) -> List[ApplicantRecord]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with fetch_latency_histogram.labels(operation=operation).time():
                    response = await client.get(f"{self.base_url}{path}", params=params)
                response.raise_for_status()

            except httpx.TimeoutException as e:
                record_fetch(operation, "fetch_error")
                raise FetchError(operation, e, f"timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                record_fetch(operation, "fetch_error")
                raise FetchError(operation, e, f"HTTP {e.response.status_code}") from e
            except httpx.RequestError as e:
                record_fetch(operation, "fetch_error")
                raise FetchError(operation, e) from e

        try:
            payloads = _batch_adapter.validate_json(response.content)
        except ValidationError as e:
            record_fetch(operation, "malformed")
            raise MalformedResponseError(operation, e) from e

        record_fetch(operation, "success")
        logger.debug(
            "Fetched applicants",
            extra={"operation": operation, "record_count": len(payloads), "params": params},
        )
        return [payload.to_record() for payload in payloads]
