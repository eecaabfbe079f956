from health_harmony.app.errors import InputValidationError
from health_harmony.app.schemas import (
    URGENT_DISCLAIMER,
    AdviceResult,
    GetPostIngestionAdviceInput,
    PostIngestionAdvice,
)
from health_harmony.flows.base import profile_fields, run_structured
from health_harmony.observability.tracing import traced_flow
from health_harmony.prompts.advice_prompt import ADVICE_SYSTEM, ADVICE_USER_TEMPLATE


@traced_flow("get_post_ingestion_advice")
async def get_post_ingestion_advice(payload: GetPostIngestionAdviceInput) -> AdviceResult:
    # Generic symptom monitoring only; the urgent disclaimer is fixed text.
    item_name = payload.item_name.strip()
    if not item_name:
        raise InputValidationError("An item name is required for post-ingestion advice.")
    result = await run_structured(
        "get_post_ingestion_advice",
        ADVICE_SYSTEM,
        ADVICE_USER_TEMPLATE,
        PostIngestionAdvice,
        {"item_name": item_name, **profile_fields(payload.user_profile)},
    )
    return AdviceResult(advice=result.advice, disclaimer=URGENT_DISCLAIMER)
