"""Prompt templates used for plan generation."""

UNCONFIRMED_PLACE = "Lugar no confirmado"
NO_SPECIFIC_INFO = "No tengo información específica"

PLANS_SYSTEM_PROMPT = (
    "Eres un experto local que conoce lugares REALES y específicos. "
    "Solo sugiere lugares que sabes que existen. "
    f"Si no estás seguro, di '{UNCONFIRMED_PLACE}'. "
    "Da instrucciones paso a paso específicas, horarios reales, costos reales, y nombres exactos de lugares. "
    "Responde SOLO en español con JSON válido."
)

PLANS_USER_PROMPT = """Genera 3 planes ESPECÍFICOS y REALES para alguien en {location}.

CRÍTICO: Solo sugiere lugares que SABES que existen realmente. Si no estás seguro de un lugar, di "{unconfirmed}" en location.

Requisitos ESTRICTOS:
- 1 plan para viajeros solos (category: "solo")
- 1 plan para grupos de amigos (category: "friends")
- 1 plan para parejas (category: "couple")
- NOMBRES EXACTOS de lugares: restaurantes, bares, museos, parques, calles específicas
- ACTIVIDADES CONCRETAS: qué hacer paso a paso, horarios reales
- PRESUPUESTOS REALISTAS: costos reales en la MONEDA LOCAL del país/ciudad
- UBICACIONES EXACTAS: barrio, calle, o zona específica verificable
- DURACIONES REALES: cuánto tiempo realmente toma
- Solo lugares que la mayoría de turistas NO conocen pero que existen
- Si no conoces lugares reales en {location}, di "{no_info} sobre {location}"
- RESPONDE TODO EN ESPAÑOL

IMPORTANTE: Usa la moneda local correcta:
{currencies}
- etc.

Ejemplo de lo que busco:
"Ir al Mercado de San Miguel a las 10am, probar jamón ibérico en el puesto de Joselito (€8), luego caminar por la Plaza Mayor hasta el Café Gijón para tomar un cortado (€2.50)"

Devuelve SOLO un array JSON válido:
[
  {{
    "title": "Nombre específico del plan",
    "description": "Descripción paso a paso de qué hacer exactamente, dónde ir, qué comer/beber, horarios",
    "category": "solo|friends|couple",
    "duration": "Tiempo real (ej: 3 horas)",
    "cost": "Presupuesto real en moneda local (ej: $15-25, €20-30, ¥2000-3000)",
    "location": "Lugar exacto verificable o '{unconfirmed}'"
  }}
]"""

LOCAL_CURRENCIES = {
    "España": "€ (euros)",
    "México": "$ (pesos mexicanos)",
    "Argentina": "$ (pesos argentinos)",
    "Chile": "$ (pesos chilenos)",
    "Colombia": "$ (pesos colombianos)",
    "Perú": "S/ (soles peruanos)",
    "Brasil": "R$ (reales brasileños)",
    "Estados Unidos": "$ (dólares)",
    "Reino Unido": "£ (libras esterlinas)",
    "Japón": "¥ (yenes)",
}


def build_plans_prompt(location: str) -> str:
    currencies = "\n".join(f"- {country}: {symbol}" for country, symbol in LOCAL_CURRENCIES.items())
    return PLANS_USER_PROMPT.format(
        location=location,
        unconfirmed=UNCONFIRMED_PLACE,
        no_info=NO_SPECIFIC_INFO,
        currencies=currencies,
    )
