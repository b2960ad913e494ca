"""structlog configuration for segseq.

Library modules log through stdlib ``logging.getLogger(__name__)``; this
module routes those records through structlog when the CLI starts.

Two output modes:
- Human (default): console-rendered lines on stderr
- JSON (--log-json): one JSON object per line on stderr

``--verbose`` lowers the ``segseq`` logger to DEBUG (retry notices,
table accesses) and echoes SQLAlchemy statements at INFO.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Install a structlog-formatted stderr handler on the root logger.

    Args:
        verbose: DEBUG for ``segseq`` and statement echo for SQLAlchemy.
        log_json: Use the JSON renderer instead of the console renderer.
    """
    shared = _shared_processors()

    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("segseq").setLevel(logging.DEBUG if verbose else logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if verbose else logging.WARNING)


@contextmanager
def generator_log_context(generator: str, segment: str) -> Iterator[None]:
    """Tag every log record emitted inside the block with the generator and segment."""
    with structlog.contextvars.bound_contextvars(generator=generator, segment=segment):
        yield
