from __future__ import annotations

import logging
from typing import Any, Optional

from app.ai.plan_graph import generate_plans
from app.core.errors import LOCATION_REQUIRED, ValidationError
from app.domain.models import PlanOutcome

logger = logging.getLogger(__name__)


class PlanService:
    def __init__(self, client: Any = None, require_all_categories: Optional[bool] = None):
        self.client = client
        self.require_all_categories = require_all_categories

    async def generate_plans(self, location: Optional[str]) -> PlanOutcome:
        cleaned = self._validate_location(location)
        outcome = await generate_plans(
            cleaned,
            client=self.client,
            require_all_categories=self.require_all_categories,
        )
        logger.info("Plan generation for %s finished: %s (%s plans)", cleaned, outcome.kind, len(outcome.plans))
        return outcome

    def _validate_location(self, location: Optional[str]) -> str:
        if location is None or not location.strip():
            raise ValidationError(LOCATION_REQUIRED)
        return location.strip()
