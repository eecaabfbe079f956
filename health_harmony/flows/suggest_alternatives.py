from health_harmony.app.errors import InputValidationError
from health_harmony.app.schemas import AlternativesResult, SuggestAlternativesInput
from health_harmony.flows.base import profile_fields, run_structured
from health_harmony.observability.tracing import traced_flow
from health_harmony.prompts.alternatives_prompt import ALTERNATIVES_SYSTEM, ALTERNATIVES_USER_TEMPLATE

MAX_ALTERNATIVES = 3


@traced_flow("suggest_alternatives")
async def suggest_alternatives(payload: SuggestAlternativesInput) -> AlternativesResult:
    item_name = payload.item_name.strip()
    if not item_name:
        raise InputValidationError("An item name is required to suggest alternatives.")
    result = await run_structured(
        "suggest_alternatives",
        ALTERNATIVES_SYSTEM,
        ALTERNATIVES_USER_TEMPLATE,
        AlternativesResult,
        {"item_name": item_name, **profile_fields(payload.user_profile)},
    )
    return AlternativesResult(alternatives=result.alternatives[:MAX_ALTERNATIVES])
