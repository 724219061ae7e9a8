from __future__ import annotations

import logging
from typing import Any


def configure_logging(level: str) -> None:
    # basicConfig writes to stderr; stdout carries the MCP stream.
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def log_extra(**kwargs: Any) -> dict[str, Any]:
    return {k: v for k, v in kwargs.items() if v is not None}
