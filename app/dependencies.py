from fastapi import Depends, Request

from app.ai.openai_client import get_client
from app.core.client_identity import client_key_from_request
from app.core.config import settings
from app.core.errors import RateLimitError
from app.domain.models import AdmissionDecision
from app.domain.repositories import (
    ClientStateRepository,
    InMemoryClientStateRepository,
    SupabaseClientStateRepository,
)
from app.domain.services.admission_service import AdmissionController
from app.domain.services.plan_service import PlanService
from app.external.supabase_client import get_supabase_client

_supabase_client = get_supabase_client() if settings.use_supabase else None
if settings.use_supabase and _supabase_client:
    _repo: ClientStateRepository = SupabaseClientStateRepository(
        _supabase_client, idle_ttl_seconds=settings.rate_limit_idle_ttl_seconds
    )
else:
    _repo = InMemoryClientStateRepository(
        max_clients=settings.rate_limit_max_clients,
        idle_ttl_seconds=settings.rate_limit_idle_ttl_seconds,
    )

_admission = AdmissionController(
    _repo,
    max_attempts=settings.rate_limit_max_attempts,
    block_seconds=settings.rate_limit_block_seconds,
)


def get_admission_controller() -> AdmissionController:
    return _admission


async def enforce_admission(
    request: Request,
    controller: AdmissionController = Depends(get_admission_controller),
) -> AdmissionDecision:
    decision = await controller.check(client_key_from_request(request))
    if not decision.allowed:
        raise RateLimitError(decision.retry_after_seconds or settings.rate_limit_block_seconds)
    return decision


def get_plan_service() -> PlanService:
    return PlanService(client=get_client())


__all__ = [
    "get_admission_controller",
    "enforce_admission",
    "get_plan_service",
    "settings",
]
