"""Structured logging with structlog.

Console output by default, JSON when ``json_format`` is set. Every entry
carries the pipeline run id and stage when one is active.
"""
from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

import structlog

# Context variables for run-scoped logging
run_id_var: ContextVar[Optional[str]] = ContextVar("run_id", default=None)
stage_var: ContextVar[Optional[str]] = ContextVar("stage", default=None)


def add_run_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: Dict[str, Any],
) -> Dict[str, Any]:
    """Add the active run id and stage to every log entry."""
    run_id = run_id_var.get()
    if run_id:
        event_dict.setdefault("run_id", run_id)

    stage = stage_var.get()
    if stage:
        event_dict.setdefault("stage", stage)

    return event_dict


def add_timestamp(
    logger: logging.Logger,
    method_name: str,
    event_dict: Dict[str, Any],
) -> Dict[str, Any]:
    """Add an ISO format UTC timestamp."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def setup_logging(log_level: str = "INFO", json_format: bool = False) -> None:
    """Configure structlog on top of the standard library logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output JSON; if False, output colored console logs
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper()),
    )
    logging.getLogger("PIL").setLevel(logging.WARNING)

    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            add_timestamp,
            add_run_context,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance backed by the stdlib logger ``name``.

    Until ``setup_logging`` runs, events go through stdlib logging only, so
    an unconfigured host sees nothing below WARNING and nothing on stdout.
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


@contextmanager
def stage_context(stage: str, run_id: Optional[str] = None) -> Iterator[None]:
    """Bind ``stage`` (and optionally ``run_id``) for log entries in the block.

    Usage:
        with stage_context("resample", run_id="3f2a"):
            logger.info("resample_started")
    """
    stage_token = stage_var.set(stage)
    run_token = run_id_var.set(run_id) if run_id is not None else None
    try:
        yield
    finally:
        stage_var.reset(stage_token)
        if run_token is not None:
            run_id_var.reset(run_token)
