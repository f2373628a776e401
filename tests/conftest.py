"""Pytest fixtures for testing"""

import asyncio
import httpx
import pytest
from typing import Callable, Dict, List

from mock_risk_api.main import app as mock_risk_app
from riskmap.domain.models import ApplicantRecord
from riskmap.infrastructure.clients.risk_api import RiskApiClient


def make_record(lat: float = 29.95, lon: float = -90.07, risk_score: float = 0.5, **overrides) -> ApplicantRecord:
    fields = dict(
        lat=lat,
        lon=lon,
        age=40,
        prior_claims=1,
        credit_band="B",
        geo_risk=0.25,
        asset_value=250000.0,
        risk_score=risk_score,
    )
    fields.update(overrides)
    return ApplicantRecord(**fields)


class FakeRiskSource:
    """Scripted risk API: canned batches or errors per weight, optional delays"""

    def __init__(self, baseline=None, scored: Dict[float, object] | None = None, delays: Dict[object, float] | None = None):
        self.baseline = baseline if baseline is not None else []
        self.scored = scored or {}
        self.delays = delays or {}
        self.calls: List[tuple] = []

    async def fetch_baseline(self) -> List[ApplicantRecord]:
        self.calls.append(("fetch_baseline", None))
        return await self._respond("baseline", self.baseline)

    async def fetch_scored(self, age_weight: float) -> List[ApplicantRecord]:
        self.calls.append(("fetch_scored", age_weight))
        return await self._respond(age_weight, self.scored.get(age_weight, []))

    async def _respond(self, key, outcome):
        await asyncio.sleep(self.delays.get(key, 0))
        if isinstance(outcome, Exception):
            raise outcome
        return list(outcome)


@pytest.fixture
def record_factory() -> Callable[..., ApplicantRecord]:
    return make_record


@pytest.fixture
def fake_source_factory() -> Callable[..., FakeRiskSource]:
    return FakeRiskSource


@pytest.fixture
def sample_records() -> list[ApplicantRecord]:
    """Three applicants spanning the risk scale"""
    return [
        make_record(lat=10.0, lon=1.0, risk_score=0.1, age=25, prior_claims=0, credit_band="A"),
        make_record(lat=20.0, lon=2.0, risk_score=0.5, age=45, prior_claims=2, credit_band="C"),
        make_record(lat=30.0, lon=3.0, risk_score=0.9, age=70, prior_claims=4, credit_band="F"),
    ]


@pytest.fixture
def mock_risk_client() -> RiskApiClient:
    """Risk API client wired in-process to the mock risk model server"""
    return RiskApiClient(
        base_url="http://risk.test",
        transport=httpx.ASGITransport(app=mock_risk_app),
    )
