from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from app.domain.repositories import InMemoryClientStateRepository
from app.domain.services.admission_service import AdmissionController


class FakeCompletions:
    """Stands in for `client.chat.completions`, replaying a canned reply or raising."""

    def __init__(self, content: Optional[str] = None, error: Optional[Exception] = None) -> None:
        self.content = content
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    def __init__(self, content: Optional[str] = None, error: Optional[Exception] = None) -> None:
        self.completions = FakeCompletions(content=content, error=error)
        self.chat = SimpleNamespace(completions=self.completions)

    @property
    def calls(self) -> List[Dict[str, Any]]:
        return self.completions.calls


MADRID_PLANS: List[Dict[str, str]] = [
    {
        "title": "Mañana de vermut en La Latina",
        "description": "A las 12pm entra en Casa Lucas en la Cava Baja y pide un vermut de grifo (€3).",
        "category": "solo",
        "duration": "2 horas",
        "cost": "€10-15",
        "location": "Cava Baja, La Latina",
    },
    {
        "title": "Tapeo por Lavapiés",
        "description": "Empieza en Bodegas Lo Máximo a las 8pm y termina en la Tabacalera.",
        "category": "friends",
        "duration": "4 horas",
        "cost": "€20-30 por persona",
        "location": "Calle de Argumosa, Lavapiés",
    },
    {
        "title": "Atardecer en el Templo de Debod",
        "description": "Llega a las 7pm al Templo de Debod y cena después en el Café de Oriente.",
        "category": "couple",
        "duration": "3 horas",
        "cost": "€40-60 por pareja",
        "location": "Parque del Oeste, Moncloa",
    },
]


@pytest.fixture()
def madrid_plans_json() -> str:
    return json.dumps(MADRID_PLANS, ensure_ascii=False)


@pytest.fixture()
def fake_openai(madrid_plans_json: str) -> FakeOpenAI:
    return FakeOpenAI(content=madrid_plans_json)


@pytest.fixture()
def controller() -> AdmissionController:
    return AdmissionController(InMemoryClientStateRepository(), max_attempts=3, block_seconds=60)
