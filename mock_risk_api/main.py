from fastapi import FastAPI, Query
import math
import random

app = FastAPI(title="Mock Risk Model Server", version="1.0.0")

APPLICANT_COUNT = 200
CENTER_LAT, CENTER_LON = 29.95, -90.07  # New Orleans
CREDIT_BANDS = ["A", "B", "C", "D", "E", "F"]
BAND_PENALTY = {"A": -1.0, "B": -0.5, "C": 0.0, "D": 0.4, "E": 0.8, "F": 1.2}


def generate_applicants(count: int = APPLICANT_COUNT, seed: int = 42) -> list[dict]:
    rng = random.Random(seed)
    applicants = []
    for _ in range(count):
        applicants.append({
            "lat": round(CENTER_LAT + rng.gauss(0, 0.05), 6),
            "lon": round(CENTER_LON + rng.gauss(0, 0.07), 6),
            "age": rng.randint(18, 85),
            "prior_claims": min(int(rng.expovariate(1.2)), 6),
            "credit_band": rng.choices(CREDIT_BANDS, weights=[15, 25, 25, 15, 12, 8])[0],
            "geo_risk": round(rng.betavariate(2, 5), 4),
            "asset_value": round(rng.lognormvariate(12.3, 0.5), 2),
        })
    return applicants


def risk_score(applicant: dict, age_weight: float) -> float:
    # Older and younger applicants both carry more risk than the middle band
    age_term = abs(applicant["age"] - 45) / 20
    z = (
        -1.5
        + 1.2 * age_weight * age_term
        + 0.35 * applicant["prior_claims"]
        + BAND_PENALTY[applicant["credit_band"]]
        + 2.0 * (applicant["geo_risk"] - 0.3)
        - 0.3 * math.log(applicant["asset_value"] / 220_000)
    )
    return round(1 / (1 + math.exp(-z)), 4)


APPLICANTS = generate_applicants()


def scored(age_weight: float) -> list[dict]:
    return [{**a, "risk_score": risk_score(a, age_weight)} for a in APPLICANTS]


@app.get("/health")
def health(): return {"status": "ok"}

@app.get("/api/applicants")
def get_applicants():
    return scored(1.0)

@app.get("/api/risk-scores")
def get_risk_scores(age_weight: float = Query(1.0, gt=0, le=5)):
    return scored(age_weight)
