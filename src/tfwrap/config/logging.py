"""Route structlog and stdlib logging to stderr.

stdout belongs to command results, so a wrapper path printed by
``tfwrap -q generate`` can be piped. Diagnostics go to stderr, rendered
for humans by default or as JSON lines with ``--log-json``.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Third-party loggers kept at WARNING even under --verbose.
_QUIET_LOGGERS = ("lark",)


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install a single stderr handler shared by structlog and stdlib loggers.

    ``tfwrap.*`` loggers drop to DEBUG when *verbose*; everything else
    stays at WARNING. Safe to call more than once.
    """
    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    # Plain logging.getLogger() records take the same pre_chain, so module
    # loggers in infrastructure/ render identically to structlog events.
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.WARNING)

    logging.getLogger("tfwrap").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
