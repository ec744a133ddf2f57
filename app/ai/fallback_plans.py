from __future__ import annotations

from typing import List

from app.api.models.schemas import Plan

# Generic but realistic plans served whenever the model cannot produce usable output.
FALLBACK_PLANS: tuple[Plan, ...] = (
    Plan(
        title="Caminata por el Centro Histórico",
        description=(
            "Comienza a las 10am en la plaza principal. Camina por las calles peatonales del casco histórico, "
            "visita la iglesia principal (gratis), y termina en un café local para tomar algo. "
            "Perfecto para conocer la ciudad a tu ritmo."
        ),
        category="solo",
        duration="2-3 horas",
        cost="$8-15",
        location="Centro histórico - Plaza principal",
    ),
    Plan(
        title="Ruta de Tapas y Bares",
        description=(
            "Reúnete con amigos a las 8pm en el primer bar. Haz una ruta caminando por 3-4 bares locales, "
            "pidiendo una tapa y una bebida en cada uno. Termina en un bar con música en vivo o terraza."
        ),
        category="friends",
        duration="4-5 horas",
        cost="$25-35 por persona",
        location="Zona de bares - Centro",
    ),
    Plan(
        title="Paseo Romántico al Atardecer",
        description=(
            "Sal a las 7pm hacia el parque o paseo marítimo. Camina tomados de la mano, encuentra un banco "
            "con vista bonita para sentarse, y termina cenando en un restaurante con terraza o vista panorámica."
        ),
        category="couple",
        duration="3-4 horas",
        cost="$30-50 por pareja",
        location="Parque principal o paseo marítimo",
    ),
)


def fallback_plans() -> List[Plan]:
    return list(FALLBACK_PLANS)
