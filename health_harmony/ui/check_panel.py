from typing import Any, Callable, List, Optional

from health_harmony.app.errors import InputValidationError
from health_harmony.app.schemas import (
    AdviceResult,
    AlternativesResult,
    CamelModel,
    CheckItemCompatibilityInput,
    CompatibilityResult,
    GetPostIngestionAdviceInput,
    Notification,
    RiskLevel,
    SuggestAlternativesInput,
    UserProfile,
)
from health_harmony.flows.base import check_photos
from health_harmony.flows.check_item_compatibility import check_item_compatibility
from health_harmony.flows.get_post_ingestion_advice import get_post_ingestion_advice
from health_harmony.flows.suggest_alternatives import suggest_alternatives
from health_harmony.ui.request_state import RequestState, RequestStatus

FOLLOW_UP_RISKS = frozenset({RiskLevel.LOW, RiskLevel.MODERATE, RiskLevel.HIGH})
UPLOADED_ITEM = "Uploaded Item"


class AlternativesView(CamelModel):
    status: RequestStatus
    result: Optional[AlternativesResult] = None
    error: Optional[str] = None


class AdviceView(CamelModel):
    status: RequestStatus
    result: Optional[AdviceResult] = None
    error: Optional[str] = None


class CheckPanelView(CamelModel):
    status: RequestStatus
    item_name: Optional[str] = None
    result: Optional[CompatibilityResult] = None
    error: Optional[str] = None
    show_placeholder: bool
    can_suggest_alternatives: bool
    can_get_advice: bool
    alternatives: AlternativesView
    advice: AdviceView


class CheckPanel:
    """Compatibility-check panel with its two follow-up actions.

    A new check resets both follow-ups. Follow-ups are offered only for a
    valid item whose risk is Low, Moderate or High.
    """

    def __init__(self, notify: Callable[[Notification], Any]):
        self.notify = notify
        self.check: RequestState[CompatibilityResult] = RequestState("check_item_compatibility")
        self.alternatives: RequestState[AlternativesResult] = RequestState("suggest_alternatives")
        self.advice: RequestState[AdviceResult] = RequestState("get_post_ingestion_advice")
        self.analyzed_item: Optional[str] = None
        self._analyzed_profile: Optional[UserProfile] = None

    @property
    def offers_follow_ups(self) -> bool:
        result = self.check.result
        return (
            self.check.status is RequestStatus.SUCCESS
            and result is not None
            and result.is_valid_item
            and result.risk_level in FOLLOW_UP_RISKS
        )

    async def run_check(self, profile: UserProfile, item_name: str, photo_data_uris: List[str]) -> bool:
        name = item_name.strip()
        try:
            photos = check_photos(photo_data_uris)
        except InputValidationError as exc:
            self.notify(Notification(title="Invalid photo", description=str(exc), variant="destructive"))
            return False
        if not name and not photos:
            self.notify(
                Notification(
                    title="Item details required",
                    description="Please enter an item name or upload a photo to check.",
                    variant="destructive",
                )
            )
            return False

        self.alternatives.reset()
        self.advice.reset()
        snapshot = profile.model_copy(deep=True)
        payload = CheckItemCompatibilityInput(user_profile=snapshot, item_name=name, photo_data_uris=photos)
        applied = await self.check.run(
            lambda: check_item_compatibility(payload),
            notify=self.notify,
            failure_title="Analysis Failed",
        )
        if applied and self.check.status is RequestStatus.SUCCESS:
            self.analyzed_item = name or UPLOADED_ITEM
            self._analyzed_profile = snapshot
        return applied

    async def run_alternatives(self) -> bool:
        self._require_follow_ups()
        payload = SuggestAlternativesInput(user_profile=self._analyzed_profile, item_name=self.analyzed_item)
        return await self.alternatives.run(
            lambda: suggest_alternatives(payload),
            notify=self.notify,
            failure_title="Suggestions Failed",
        )

    async def run_advice(self) -> bool:
        self._require_follow_ups()
        payload = GetPostIngestionAdviceInput(user_profile=self._analyzed_profile, item_name=self.analyzed_item)
        return await self.advice.run(
            lambda: get_post_ingestion_advice(payload),
            notify=self.notify,
            failure_title="Advice Unavailable",
        )

    def _require_follow_ups(self) -> None:
        if not self.offers_follow_ups:
            raise InputValidationError("Follow-up actions are only available after a check that found a risk.")

    def view(self) -> CheckPanelView:
        offered = self.offers_follow_ups
        return CheckPanelView(
            status=self.check.status,
            item_name=self.analyzed_item if self.check.status is RequestStatus.SUCCESS else None,
            result=self.check.result,
            error=self.check.error,
            show_placeholder=self.check.status is RequestStatus.IDLE,
            can_suggest_alternatives=offered,
            can_get_advice=offered,
            alternatives=AlternativesView(
                status=self.alternatives.status, result=self.alternatives.result, error=self.alternatives.error
            ),
            advice=AdviceView(status=self.advice.status, result=self.advice.result, error=self.advice.error),
        )
