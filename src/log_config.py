"""Logging setup for the brand registry console.

Applies the root level and per-category levels from settings so the HTTP
client loggers can be silenced without touching the rest of the app.
"""

import logging
import sys

from config import settings

_CATEGORY_MAP: dict[str, list[str]] = {
    "log_level_http": [
        "httpx",
        "httpcore",
    ],
}


def setup_logging() -> None:
    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level))

    # Streamlit reruns the entry script, only install the handler once
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)-8s %(name)s - %(message)s"))
        root.addHandler(handler)

    for settings_field, logger_names in _CATEGORY_MAP.items():
        level = _parse_level(getattr(settings, settings_field, "INFO"))
        for name in logger_names:
            logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).debug(
        "Logging configured - root=%s, http=%s",
        settings.log_level,
        settings.log_level_http,
    )


def _parse_level(raw: str) -> int:
    numeric = getattr(logging, raw.upper(), None)
    if isinstance(numeric, int):
        return numeric
    return logging.INFO
