"""structlog setup for folkstore.

Stdlib and structlog records share one ProcessorFormatter on stderr:
console lines by default, JSON lines with ``--log-json``.

Levels:
- ``folkstore``: DEBUG with ``--verbose``, WARNING otherwise.
- Message event loggers (broker and multiplexer): INFO under ``--verbose``
  unless ``[logging] trace_messages`` is set, so per-message chatter stays
  out of ordinary debug output.
- SQLAlchemy, httpx and friends: WARNING always.
"""

from __future__ import annotations

import logging
import sys

import structlog

MESSAGE_LOGGERS = ("folkstore.client.broker", "folkstore.server.multiplexer")
NOISY_LOGGERS = ("sqlalchemy", "httpx", "httpcore", "asyncio")

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def _message_level(verbose: bool, trace_messages: bool) -> int:
    if not verbose:
        return logging.NOTSET
    return logging.DEBUG if trace_messages else logging.INFO


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    trace_messages: bool = False,
) -> None:
    """Route all folkstore logging to stderr through structlog.

    Safe to call repeatedly: the root handler is replaced, not stacked.
    """
    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("folkstore").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in MESSAGE_LOGGERS:
        logging.getLogger(name).setLevel(_message_level(verbose, trace_messages))
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
