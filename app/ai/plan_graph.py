from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional, TypedDict

from langgraph.graph import END, StateGraph
from pydantic import ValidationError as PydanticValidationError

from app.ai.openai_client import get_client
from app.ai.prompts import NO_SPECIFIC_INFO, PLANS_SYSTEM_PROMPT, UNCONFIRMED_PLACE, build_plans_prompt
from app.api.models.schemas import PLAN_CATEGORIES, Plan
from app.core.config import settings
from app.domain.models import PlanOutcome

logger = logging.getLogger(__name__)

MAX_PLANS = len(PLAN_CATEGORIES)
_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


class PlanState(TypedDict):
    location: str
    client: Any
    require_all_categories: bool
    raw_response: Optional[str]
    plans: List[Plan]
    failure: Optional[str]
    outcome: Optional[PlanOutcome]


async def request_completion(state: PlanState) -> Dict[str, Any]:
    client = state["client"]
    if client is None:
        logger.warning("OpenAI client not configured; serving fallback plans.")
        return {"failure": "collaborator_unavailable"}

    logger.info("Requesting plans for %s (model=%s)", state["location"], settings.openai_model_plans)
    try:
        completion = await client.chat.completions.create(
            model=settings.openai_model_plans,
            messages=[
                {"role": "system", "content": PLANS_SYSTEM_PROMPT},
                {"role": "user", "content": build_plans_prompt(state["location"])},
            ],
            max_completion_tokens=settings.openai_max_completion_tokens,
        )
    except Exception as exc:
        logger.warning("OpenAI plan request failed: %s", exc)
        return {"failure": f"collaborator_error: {type(exc).__name__}"}

    choices = getattr(completion, "choices", None) or []
    content = choices[0].message.content if choices else None
    if not content:
        logger.warning("OpenAI returned no content for %s", state["location"])
        return {"failure": "empty_response"}

    logger.info("OpenAI response received (%s chars)", len(content))
    logger.debug("First 200 chars of response: %s", content[:200])
    return {"raw_response": content}


async def parse_plans(state: PlanState) -> Dict[str, Any]:
    text = (state.get("raw_response") or "").strip()
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Plan response is not valid JSON: %s", exc)
        return {"failure": "invalid_json"}

    if not isinstance(payload, list):
        logger.warning("Plan response is not a JSON array (got %s)", type(payload).__name__)
        return {"failure": "not_a_list"}

    try:
        plans = [Plan.model_validate(item) for item in payload]
    except PydanticValidationError as exc:
        logger.warning("Plan response does not match the plan shape: %s", exc.errors()[:1])
        return {"failure": "invalid_plan"}

    logger.info("Parsed %s plans", len(plans))
    return {"plans": plans}


async def screen_plans(state: PlanState) -> Dict[str, Any]:
    plans = state.get("plans") or []

    reason = _low_confidence_reason(plans)
    if reason:
        logger.info("Model reported no reliable data for %s (%s); returning no plans", state["location"], reason)
        return {"outcome": PlanOutcome.empty(reason)}

    if not plans:
        logger.warning("Model returned an empty plan list")
        return {"failure": "empty_plans"}

    categories = sorted(plan.category for plan in plans[:MAX_PLANS])
    if categories != sorted(PLAN_CATEGORIES):
        if state["require_all_categories"]:
            logger.warning("Plan categories incomplete: %s", categories)
            return {"failure": "incomplete_categories"}
        logger.info("Plan categories incomplete, keeping them as returned: %s", categories)

    if len(plans) > MAX_PLANS:
        logger.info("Trimming %s plans down to %s", len(plans), MAX_PLANS)
    return {"outcome": PlanOutcome.success(plans[:MAX_PLANS])}


async def use_fallback(state: PlanState) -> Dict[str, Any]:
    reason = state.get("failure") or "unknown"
    logger.warning("Serving fallback plans for %s (%s)", state["location"], reason)
    return {"outcome": PlanOutcome.fallback(reason)}


def _low_confidence_reason(plans: List[Plan]) -> Optional[str]:
    no_info = NO_SPECIFIC_INFO.casefold()
    unconfirmed = UNCONFIRMED_PLACE.casefold()
    for plan in plans:
        if no_info in plan.description.casefold():
            return "no_specific_information"
        if unconfirmed in plan.location.casefold():
            return "unconfirmed_place"
    return None


def _unless_failed(next_node: str) -> Callable[[PlanState], str]:
    def route(state: PlanState) -> str:
        return "use_fallback" if state.get("failure") else next_node

    return route


def build_plan_graph():
    builder = StateGraph(PlanState)
    builder.add_node("request_completion", request_completion)
    builder.add_node("parse_plans", parse_plans)
    builder.add_node("screen_plans", screen_plans)
    builder.add_node("use_fallback", use_fallback)

    builder.set_entry_point("request_completion")
    builder.add_conditional_edges("request_completion", _unless_failed("parse_plans"), ["parse_plans", "use_fallback"])
    builder.add_conditional_edges("parse_plans", _unless_failed("screen_plans"), ["screen_plans", "use_fallback"])
    builder.add_conditional_edges("screen_plans", _unless_failed(END), [END, "use_fallback"])
    builder.add_edge("use_fallback", END)
    return builder.compile()


_GRAPH = build_plan_graph()


async def generate_plans(
    location: str,
    client: Any = None,
    require_all_categories: Optional[bool] = None,
) -> PlanOutcome:
    """
    Run the LangGraph plan generator. Never raises: every failure becomes a fallback outcome.
    """
    initial_state: PlanState = {
        "location": location,
        "client": client if client is not None else get_client(),
        "require_all_categories": (
            settings.require_all_categories if require_all_categories is None else require_all_categories
        ),
        "raw_response": None,
        "plans": [],
        "failure": None,
        "outcome": None,
    }
    try:
        result = await _GRAPH.ainvoke(initial_state)
        outcome = result.get("outcome")
        if outcome is None:
            return PlanOutcome.fallback("no_outcome")
        return outcome
    except Exception as exc:  # pragma: no cover - ensures API still answers without graph
        logger.exception("Plan graph failed, serving fallback plans: %s", exc)
        return PlanOutcome.fallback("unexpected_error")
