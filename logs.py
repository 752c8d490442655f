import logging
import sys

import structlog

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.JSONRenderer(),
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


STDERR_HANDLER = logging.StreamHandler(sys.stderr)
STDERR_HANDLER.setFormatter(logging.Formatter("%(message)s"))


def configure_logging(verbose: bool = False) -> None:
    """
    Send log events to stderr. Until this is called, everything below WARNING is dropped. Calling it again only
    changes the level
    """
    root = logging.getLogger()
    if STDERR_HANDLER not in root.handlers:
        root.addHandler(STDERR_HANDLER)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
