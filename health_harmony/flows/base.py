"""Shared plumbing for the model-backed flows.

Every flow renders a prompt, sends it to the chat model exactly once and
parses the reply into a pydantic model. Malformed replies become
``ModelContractError`` and transport/provider failures become
``ProviderError``; nothing is retried here.
"""
import logging
import re
from typing import Any, Dict, List, Sequence, Type, TypeVar

import httpx
import openai
from langchain_core.exceptions import OutputParserException
from langchain_core.messages import BaseMessage, HumanMessage
from langchain_core.output_parsers import PydanticOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, ValidationError

from health_harmony.app.errors import InputValidationError, ModelContractError, ProviderError
from health_harmony.app.schemas import UserProfile
from health_harmony.app.settings import settings

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

DATA_URI_PATTERN = re.compile(r"^data:[\w.+-]+/[\w.+-]+;base64,[A-Za-z0-9+/=\s]+$")


def _llm():
    # IMPORTANT: only pass api_key if it is set, otherwise let langchain-openai
    # resolve OPENAI_API_KEY from the environment.
    kwargs: Dict[str, Any] = {
        "model": settings.model_name,
        "temperature": settings.temperature,
        "timeout": settings.request_timeout,
        "max_retries": 0,
    }
    if settings.openai_api_key:
        kwargs["api_key"] = settings.openai_api_key
    return ChatOpenAI(**kwargs)


def format_items(items: Sequence[str]) -> str:
    return ", ".join(items) if items else "None specified."


def profile_fields(profile: UserProfile) -> Dict[str, str]:
    return {
        "allergies": format_items(profile.allergies),
        "medications": format_items(profile.medications),
        "conditions": format_items(profile.conditions),
    }


def check_photos(photo_data_uris: Sequence[str]) -> List[str]:
    if len(photo_data_uris) > settings.max_photos:
        raise InputValidationError(f"At most {settings.max_photos} photos can be attached.")
    for uri in photo_data_uris:
        if not DATA_URI_PATTERN.match(uri):
            raise InputValidationError("Photos must be base64 data URIs with a MIME type.")
    return list(photo_data_uris)


def attach_photos(messages: List[BaseMessage], photo_data_uris: Sequence[str]) -> List[BaseMessage]:
    """Turn the final user message into a multi-part message carrying the photos."""
    if not photo_data_uris:
        return messages
    *head, last = messages
    parts: List[Dict[str, Any]] = [{"type": "text", "text": last.content}]
    parts.extend({"type": "image_url", "image_url": {"url": uri}} for uri in photo_data_uris)
    return [*head, HumanMessage(content=parts)]


def _content_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    # some providers return a list of content blocks
    return "".join(block.get("text", "") if isinstance(block, dict) else str(block) for block in content)


async def run_structured(
    flow: str,
    system: str,
    user_template: str,
    output_model: Type[M],
    inputs: Dict[str, Any],
    photo_data_uris: Sequence[str] = (),
) -> M:
    parser = PydanticOutputParser(pydantic_object=output_model)
    prompt = ChatPromptTemplate.from_messages(
        [
            ("system", system),
            ("user", user_template + "\nReturn JSON only.\n{format_instructions}"),
        ]
    ).partial(format_instructions=parser.get_format_instructions())
    messages = attach_photos(prompt.format_messages(**inputs), photo_data_uris)

    try:
        reply = await _llm().ainvoke(messages)
    except (openai.APIError, httpx.HTTPError) as exc:
        logger.error("%s: model provider call failed: %s", flow, exc)
        raise ProviderError(flow, str(exc)) from exc

    try:
        return parser.parse(_content_text(reply.content))
    except (OutputParserException, ValidationError) as exc:
        logger.error("%s: model output rejected: %s", flow, exc)
        raise ModelContractError(flow, str(exc)) from exc


def enforce(flow: str, model: Type[M], data: Dict[str, Any]) -> M:
    """Re-validate a post-processed result; failures are contract violations."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ModelContractError(flow, str(exc)) from exc
