import logging

from health_harmony.app.schemas import ValidateProfileItemInput, ValidationResult
from health_harmony.app.settings import settings
from health_harmony.flows.base import run_structured
from health_harmony.observability.tracing import traced_flow
from health_harmony.prompts.validate_prompt import VALIDATE_SYSTEM, VALIDATE_USER_TEMPLATE

logger = logging.getLogger(__name__)


async def validate_profile_item(payload: ValidateProfileItemInput) -> ValidationResult:
    """Ask the model whether ``item_name`` is a real term for its category.

    Names shorter than the minimum length are rejected without a model call.
    """
    item_name = payload.item_name.strip()
    if len(item_name) < settings.min_input_length:
        logger.debug("validate_profile_item skipped for short input %r", item_name)
        return ValidationResult(is_valid=False)
    return await _validate(payload.category.value, item_name)


@traced_flow("validate_profile_item")
async def _validate(category: str, item_name: str) -> ValidationResult:
    return await run_structured(
        "validate_profile_item",
        VALIDATE_SYSTEM,
        VALIDATE_USER_TEMPLATE,
        ValidationResult,
        {"category": category, "item_name": item_name},
    )
