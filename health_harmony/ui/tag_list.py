import logging
from typing import Any, Callable, List

from health_harmony.app.errors import HealthHarmonyError
from health_harmony.app.schemas import (
    CamelModel,
    Category,
    GetSuggestionsInput,
    Notification,
    ValidateProfileItemInput,
)
from health_harmony.app.settings import settings
from health_harmony.flows.get_suggestions import get_suggestions
from health_harmony.flows.validate_profile_item import validate_profile_item
from health_harmony.profile.store import Outcome, ProfileStore
from health_harmony.ui.debounce import Debouncer
from health_harmony.ui.request_state import failure_message

logger = logging.getLogger(__name__)


class TagListView(CamelModel):
    category: Category
    title: str
    items: List[str]
    is_empty: bool
    empty_message: str
    is_validating: bool
    query: str
    suggestions: List[str]


class TagListController:
    """One editable profile list with optional pre-add validation and autocomplete."""

    def __init__(
        self,
        category: Category,
        store: ProfileStore,
        notify: Callable[[Notification], Any],
        validate: bool = True,
        autocomplete: bool = True,
        debounce_seconds: float | None = None,
    ):
        self.category = category
        self.store = store
        self.notify = notify
        self.validate = validate
        self.autocomplete = autocomplete
        self.query = ""
        self.suggestions: List[str] = []
        self._validating = 0
        delay = settings.suggestion_debounce_seconds if debounce_seconds is None else debounce_seconds
        self.debouncer = Debouncer(delay, self._fetch_suggestions)

    @property
    def noun(self) -> str:
        return self.category.label.lower()

    async def add(self, text: str) -> bool:
        value = text.strip()
        if not value:
            return False
        if self.store.contains(self.category, value):
            self._already_added(value)
            return False
        if self.validate and not await self._is_valid(value):
            return False

        mutation = await self.store.add(self.category, value)
        if mutation.outcome is Outcome.DUPLICATE:
            # added by a concurrent request while validation was in flight
            self._already_added(value)
            return False
        if mutation.notification is not None:
            self.notify(mutation.notification)
        self.clear_query()
        return mutation.changed

    async def remove(self, item: str) -> bool:
        mutation = await self.store.remove(self.category, item)
        if mutation.notification is not None:
            self.notify(mutation.notification)
        return mutation.changed

    def update_query(self, text: str) -> None:
        self.query = text
        if not self.autocomplete or len(text.strip()) < settings.min_input_length:
            self.debouncer.cancel()
            self.suggestions = []
            return
        self.debouncer.trigger(text.strip())

    def clear_query(self) -> None:
        self.debouncer.cancel()
        self.query = ""
        self.suggestions = []

    def view(self) -> TagListView:
        items = list(self.store.profile.items(self.category))
        return TagListView(
            category=self.category,
            title=self.category.label,
            items=items,
            is_empty=not items,
            empty_message=f"No {self.noun} added yet.",
            is_validating=self._validating > 0,
            query=self.query,
            suggestions=list(self.suggestions),
        )

    async def _is_valid(self, value: str) -> bool:
        self._validating += 1
        try:
            result = await validate_profile_item(ValidateProfileItemInput(category=self.category, item_name=value))
        except HealthHarmonyError as exc:
            logger.warning("validation of %r failed: %s", value, exc)
            self.notify(
                Notification(title="Could not verify item", description=failure_message(exc), variant="destructive")
            )
            return False
        finally:
            self._validating -= 1
        if not result.is_valid:
            self.notify(
                Notification(
                    title="Unrecognized item",
                    description=f'"{value}" does not look like a valid entry for {self.noun}.',
                    variant="destructive",
                )
            )
        return result.is_valid

    def _already_added(self, value: str) -> None:
        self.notify(Notification(title="Already added", description=f'"{value}" is already in your {self.noun}.'))

    async def _fetch_suggestions(self, query: str) -> None:
        try:
            result = await get_suggestions(GetSuggestionsInput(category=self.category, query=query))
        except HealthHarmonyError as exc:
            logger.warning("suggestions for %r failed: %s", query, exc)
            result = None
        if query != self.query.strip():
            logger.debug("dropping suggestions for outdated query %r", query)
            return
        self.suggestions = result.suggestions if result is not None else []
