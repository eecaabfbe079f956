import logging
from typing import List

from health_harmony.app.schemas import GetSuggestionsInput, SuggestionsResult, dedupe_items
from health_harmony.app.settings import settings
from health_harmony.flows.base import run_structured
from health_harmony.observability.tracing import traced_flow
from health_harmony.prompts.suggestions_prompt import SUGGESTIONS_SYSTEM, SUGGESTIONS_USER_TEMPLATE

logger = logging.getLogger(__name__)


def _prefix_matches(query: str, candidates: List[str]) -> List[str]:
    prefix = query.lower()
    matches = [c for c in dedupe_items(candidates) if c.lower().startswith(prefix)]
    return matches[: settings.max_suggestions]


async def get_suggestions(payload: GetSuggestionsInput) -> SuggestionsResult:
    query = payload.query.strip()
    if len(query) < settings.min_input_length:
        return SuggestionsResult(suggestions=[])
    raw = await _suggest(payload.category.value, query)
    suggestions = _prefix_matches(query, raw.suggestions)
    if len(suggestions) < len(raw.suggestions):
        logger.debug("dropped %d suggestion(s) for %r", len(raw.suggestions) - len(suggestions), query)
    return SuggestionsResult(suggestions=suggestions)


@traced_flow("get_suggestions")
async def _suggest(category: str, query: str) -> SuggestionsResult:
    return await run_structured(
        "get_suggestions",
        SUGGESTIONS_SYSTEM,
        SUGGESTIONS_USER_TEMPLATE,
        SuggestionsResult,
        {"category": category, "query": query, "limit": settings.max_suggestions},
    )
