from __future__ import annotations

import logging
from typing import Any

import structlog


def configure_logging(level: int = logging.INFO, *, renderer: str = "json") -> None:
    logging.basicConfig(format="%(message)s", level=level)
    final_processor = (
        structlog.dev.ConsoleRenderer() if renderer == "console" else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            final_processor,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )


def level_from_name(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def get_logger(**initial_values: Any) -> structlog.BoundLogger:
    return structlog.get_logger().bind(**initial_values)


__all__ = ["configure_logging", "level_from_name", "get_logger"]
