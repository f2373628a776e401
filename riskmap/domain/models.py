"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ApplicantRecord:
    """One scored applicant as returned by the risk API"""

    lat: float
    lon: float
    age: int
    prior_claims: int
    credit_band: str  # "A" .. "F"
    geo_risk: float
    asset_value: float
    risk_score: float

    def tooltip_payload(self) -> tuple:
        return (
            self.age,
            self.prior_claims,
            self.credit_band,
            self.geo_risk,
            self.asset_value,
            self.risk_score,
        )
