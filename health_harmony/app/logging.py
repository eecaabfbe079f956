import logging
from typing import Any, Dict

from rich.logging import RichHandler


def configure_logging(level: int | str = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    # httpx logs every provider round-trip at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def event(msg: str, extra: Dict[str, Any] | None = None, level: int = logging.INFO) -> None:
    logging.getLogger("health_harmony.events").log(level, msg, extra=extra or {})
