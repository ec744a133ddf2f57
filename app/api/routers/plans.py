import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError as PydanticValidationError

from app.api.models.schemas import ErrorResponse, GeneratePlansRequest, GeneratePlansResponse, RateLimitResponse
from app.dependencies import enforce_admission, get_plan_service
from app.domain.models import AdmissionDecision
from app.domain.services.plan_service import PlanService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["plans"])


@router.post(
    "/generate-plans",
    response_model=GeneratePlansResponse,
    responses={400: {"model": ErrorResponse}, 429: {"model": RateLimitResponse}},
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": GeneratePlansRequest.model_json_schema()}},
        }
    },
)
async def generate_plans(
    request: Request,
    response: Response,
    decision: AdmissionDecision = Depends(enforce_admission),
    svc: PlanService = Depends(get_plan_service),
):
    # The body is read only after admission so that every request counts, unreadable ones included.
    response.headers["X-RateLimit-Remaining"] = str(decision.attempts_remaining)
    outcome = await svc.generate_plans(await _read_location(request))
    return GeneratePlansResponse(plans=outcome.plans)


async def _read_location(request: Request) -> Optional[str]:
    try:
        payload = await request.json()
    except ValueError as exc:
        logger.info("Plan request body is not valid JSON: %s", exc)
        return None
    try:
        return GeneratePlansRequest.model_validate(payload).location
    except PydanticValidationError as exc:
        logger.info("Plan request body has an unexpected shape: %s", exc.errors()[:1])
        return None
