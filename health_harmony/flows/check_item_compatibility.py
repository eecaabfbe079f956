from health_harmony.app.errors import InputValidationError
from health_harmony.app.schemas import (
    STANDARD_DISCLAIMER,
    CheckItemCompatibilityInput,
    CompatibilityAssessment,
    CompatibilityResult,
)
from health_harmony.flows.base import check_photos, enforce, profile_fields, run_structured
from health_harmony.observability.tracing import traced_flow
from health_harmony.prompts.compatibility_prompt import COMPATIBILITY_SYSTEM, COMPATIBILITY_USER_TEMPLATE

FLOW = "check_item_compatibility"


@traced_flow(FLOW)
async def check_item_compatibility(payload: CheckItemCompatibilityInput) -> CompatibilityResult:
    """Classify the item, then rate its risk against the user's profile.

    Photos, when present, are the primary evidence for what the item is.
    Invalid items come back with no risk level and no analysis; valid ones
    always carry both. The standard disclaimer is attached here, never by
    the model.
    """
    item_name = payload.item_name.strip()
    photos = check_photos(payload.photo_data_uris)
    if not item_name and not photos:
        raise InputValidationError("Please enter an item name or upload a photo to check.")

    assessment = await run_structured(
        FLOW,
        COMPATIBILITY_SYSTEM,
        COMPATIBILITY_USER_TEMPLATE,
        CompatibilityAssessment,
        {
            "item_name": item_name or "(not provided, identify from photos)",
            "photo_count": len(photos),
            **profile_fields(payload.user_profile),
        },
        photo_data_uris=photos,
    )
    return enforce(
        FLOW,
        CompatibilityResult,
        {**assessment.model_dump(), "disclaimer": STANDARD_DISCLAIMER},
    )
