"""
Logging setup.

Module loggers are created with `logging.getLogger(__name__)`; this sets
the root handler and level once, at app startup. Output goes to stdout so
gunicorn / the container runtime captures it.
"""
import logging
import sys

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=_FORMAT,
        stream=sys.stdout,
    )
    # requests' connection pool chatter is not useful at INFO
    logging.getLogger("urllib3").setLevel(logging.WARNING)
