import logging

import structlog

LOGGER_NAME = "rod_tickler"


def configure_logging(level: int = logging.WARNING, json_logs: bool = False) -> None:
    """Route structlog events through stdlib logging, filtered at `level`."""
    renderer = (
        structlog.processors.JSONRenderer(indent=2)
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
    logging.basicConfig(format="%(message)s", level=level, force=True)
