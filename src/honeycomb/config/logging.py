"""structlog configuration for honeycomb.

Logs go to stderr only; stdout carries command output (and ``--json``
payloads).  Stdlib ``logging.getLogger(__name__)`` records from the
service layer and structlog events from telemetry share one handler and
one renderer:

- console (default): colored when stderr is a terminal
- JSON (``--log-json``): one object per line, tracebacks as dicts

Context bound with :func:`bind_command` (the subcommand and profile)
is merged into every record.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

LOGGER_NAME = "honeycomb"

# Marks the handler we install so reconfiguring replaces only ours.
_HANDLER_NAME = "honeycomb-stderr"


def _level_for(*, verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    return logging.WARNING


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def _renderer(log_json: bool) -> list[structlog.types.Processor]:
    if log_json:
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_json: bool = False,
) -> None:
    """Install the stderr handler and set the ``honeycomb`` level.

    Safe to call more than once; the previous honeycomb handler is
    replaced, handlers installed by others are left alone.

    Args:
        verbose: DEBUG records from the ``honeycomb`` logger tree.
        quiet: Only ERROR and above. *verbose* wins when both are set.
        log_json: JSON lines instead of the console renderer.
    """
    pre_chain = _pre_chain()
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    for old in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(LOGGER_NAME).setLevel(_level_for(verbose=verbose, quiet=quiet))


def bind_command(command: str | None, **context: Any) -> None:
    """Attach *command* (and extra *context*) to every following record."""
    structlog.contextvars.clear_contextvars()
    if command is not None:
        structlog.contextvars.bind_contextvars(command=command, **context)
