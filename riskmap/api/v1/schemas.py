"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, Optional

AGE_WEIGHT_MIN = 0.5
AGE_WEIGHT_MAX = 2.0
AGE_WEIGHT_STEP = 0.1


class AgeWeightRequest(BaseModel):
    """Request body for PUT /v1/age-weight"""

    age_weight: float = Field(..., ge=AGE_WEIGHT_MIN, le=AGE_WEIGHT_MAX, description="Multiplier applied to applicant age")

    @field_validator("age_weight")
    @classmethod
    def on_step_grid(cls, value: float) -> float:
        steps = (value - AGE_WEIGHT_MIN) / AGE_WEIGHT_STEP
        if abs(steps - round(steps)) > 1e-6:
            raise ValueError(f"age_weight must move in steps of {AGE_WEIGHT_STEP}")
        return round(value, 1)


class FigureResponse(BaseModel):
    """Response for GET /v1/figure and the endpoints that change it"""

    status: str
    age_weight: float
    point_count: int
    title: str
    error: Optional[str] = None
    figure: Dict[str, Any]
