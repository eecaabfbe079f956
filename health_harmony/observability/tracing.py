import os
import time
from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

from health_harmony.app.errors import InputValidationError, ModelContractError, ProviderError
from health_harmony.app.logging import event
from health_harmony.app.settings import settings

T = TypeVar("T")


def configure_tracing() -> None:
    """
    Configure LangSmith/LangChain tracing via environment variables.

    With `LANGCHAIN_TRACING_V2=true` and LangSmith creds present, every
    flow's model call is traced.
    """
    if settings.langchain_tracing_v2:
        os.environ["LANGCHAIN_TRACING_V2"] = "true"
    if settings.langsmith_api_key:
        os.environ["LANGSMITH_API_KEY"] = settings.langsmith_api_key
    if settings.langsmith_project:
        os.environ["LANGSMITH_PROJECT"] = settings.langsmith_project
    return None


def traced_flow(name: str) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Log one line per flow call with latency and outcome."""

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            start = time.monotonic()
            status = "ok"
            try:
                return await func(*args, **kwargs)
            except InputValidationError:
                status = "rejected"
                raise
            except ModelContractError:
                status = "contract_error"
                raise
            except ProviderError:
                status = "provider_error"
                raise
            except Exception:
                status = "error"
                raise
            finally:
                latency = int((time.monotonic() - start) * 1000)
                event(
                    f"flow={name} latency_ms={latency} status={status}",
                    extra={"flow": name, "latency_ms": latency, "status": status},
                )

        return wrapper

    return decorator
