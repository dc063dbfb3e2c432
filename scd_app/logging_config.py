from __future__ import annotations
import logging
import sys
from typing import Any, MutableMapping, Optional
import structlog

# event keys that could carry copied or pasted text
PLAINTEXT_KEYS = frozenset({"text", "content", "value"})


def drop_plaintext(_logger: Any, _method: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Replace any plaintext-bearing key with its length; digests stay as they are."""
    for key in [k for k in PLAINTEXT_KEYS if k in event_dict]:
        value = event_dict.pop(key)
        event_dict[f"{key}_len"] = len(value) if isinstance(value, str) else None
    return event_dict


def bind_session_context(user_id: Optional[str]) -> None:
    """Every log line emitted after this carries the monitored user."""
    structlog.contextvars.clear_contextvars()
    if user_id is not None:
        structlog.contextvars.bind_contextvars(user_id=user_id)


def configure_logging(debug: bool = False) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            drop_plaintext,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.INFO
        ),
        cache_logger_on_first_use=True,
    )

    # stdout is reserved for CLI JSON output
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=logging.DEBUG if debug else logging.INFO,
    )
