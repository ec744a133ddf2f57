from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict

# ---------- Plan ----------


PlanCategory = Literal["solo", "friends", "couple"]
PLAN_CATEGORIES: tuple[PlanCategory, ...] = ("solo", "friends", "couple")


class Plan(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    category: PlanCategory
    duration: str
    cost: str
    location: str


# ---------- Request/Response ----------


class GeneratePlansRequest(BaseModel):
    # Optional so a missing location reaches the service and yields the 400 contract
    location: Optional[str] = None


class GeneratePlansResponse(BaseModel):
    plans: List[Plan]


class ErrorResponse(BaseModel):
    error: str


class RateLimitResponse(BaseModel):
    error: Literal["rate_limit_exceeded"] = "rate_limit_exceeded"
    message: str
    resetTime: int
