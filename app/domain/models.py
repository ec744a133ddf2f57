from dataclasses import dataclass, field
from typing import List, Literal, Optional

from app.api.models.schemas import Plan

OutcomeKind = Literal["success", "empty", "fallback"]


@dataclass
class ClientState:
    attempts: int
    last_attempt: float
    blocked_until: Optional[float] = None

    def is_blocked(self, now: float) -> bool:
        return self.blocked_until is not None and now < self.blocked_until

    def last_seen(self) -> float:
        return max(self.last_attempt, self.blocked_until or 0.0)


@dataclass(frozen=True)
class AdmissionDecision:
    allowed: bool
    attempts_remaining: Optional[int] = None
    retry_after_seconds: Optional[int] = None

    @classmethod
    def allow(cls, attempts_remaining: int) -> "AdmissionDecision":
        return cls(allowed=True, attempts_remaining=attempts_remaining)

    @classmethod
    def deny(cls, retry_after_seconds: int) -> "AdmissionDecision":
        return cls(allowed=False, retry_after_seconds=retry_after_seconds)


@dataclass(frozen=True)
class PlanOutcome:
    """Tagged result of a generation run so callers can tell which branch produced the plans."""

    kind: OutcomeKind
    plans: List[Plan] = field(default_factory=list)
    reason: Optional[str] = None

    @classmethod
    def success(cls, plans: List[Plan]) -> "PlanOutcome":
        return cls(kind="success", plans=list(plans))

    @classmethod
    def empty(cls, reason: str) -> "PlanOutcome":
        return cls(kind="empty", plans=[], reason=reason)

    @classmethod
    def fallback(cls, reason: str) -> "PlanOutcome":
        from app.ai.fallback_plans import fallback_plans

        return cls(kind="fallback", plans=fallback_plans(), reason=reason)
