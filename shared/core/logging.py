"""Loguru sink setup shared by both tools.

Services log with `logger.bind(service_name=..., event=..., **fields).info("")`,
so the useful payload lives in `record["extra"]`. The human format renders it as
`key=value` pairs after the event name; JSON mode uses loguru's serializer.
"""
from __future__ import annotations

import sys
from typing import Any

from loguru import logger

_RESERVED_EXTRA = ("service_name", "event", "fields")

HUMAN_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "{extra[service_name]} | "
    "<cyan>{extra[event]}</cyan>{extra[fields]} {message}\n{exception}"
)


def _format(record: dict[str, Any]) -> str:
    extra = record["extra"]
    extra.setdefault("service_name", "-")
    extra.setdefault("event", "")
    pairs = [f"{key}={value}" for key, value in extra.items() if key not in _RESERVED_EXTRA]
    extra["fields"] = (" " + " ".join(pairs)) if pairs else ""
    return HUMAN_FORMAT


def configure_logging(level: str = "INFO", *, json: bool = False) -> None:
    logger.remove()
    if json:
        logger.add(sys.stderr, level=level.upper(), serialize=True)
    else:
        logger.add(sys.stderr, level=level.upper(), format=_format)
