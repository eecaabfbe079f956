from health_harmony.app.schemas import TIPS_DISCLAIMER, GetLifestyleTipsInput, LifestyleTips, LifestyleTipsResult
from health_harmony.flows.base import profile_fields, run_structured
from health_harmony.observability.tracing import traced_flow
from health_harmony.prompts.lifestyle_prompt import LIFESTYLE_SYSTEM, LIFESTYLE_USER_TEMPLATE

MAX_TIPS = 5


@traced_flow("get_lifestyle_tips")
async def get_lifestyle_tips(payload: GetLifestyleTipsInput) -> LifestyleTipsResult:
    fields = profile_fields(payload.user_profile)
    result = await run_structured(
        "get_lifestyle_tips",
        LIFESTYLE_SYSTEM,
        LIFESTYLE_USER_TEMPLATE,
        LifestyleTips,
        {"allergies": fields["allergies"], "conditions": fields["conditions"]},
    )
    return LifestyleTipsResult(tips=result.tips[:MAX_TIPS], disclaimer=TIPS_DISCLAIMER)
