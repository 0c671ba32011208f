"""structlog setup shared by the CLI and any embedding service."""
import logging

import structlog


def configure_logging(level: str = "WARNING", json: bool = False) -> None:
    """Initialise stdlib logging and route structlog through it.

    Output carries an ISO timestamp and the log level; ``json`` switches the
    renderer from key=value pairs to one JSON object per line.
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(level=numeric_level, format="%(message)s")
    logging.getLogger().setLevel(numeric_level)
    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def get_logger(name: str):
    """A structlog logger backed by the stdlib logger ``name``.

    Events pass through ``logging``, so they obey its levels and handlers
    even when ``configure_logging`` was never called.
    """
    return structlog.wrap_logger(logging.getLogger(name))
