"""
Logging configuration: one stdout handler for pushwave and uvicorn.

A broadcast makes one HTTP request per subscription per wave through
pywebpush (requests/urllib3). Their connection chatter is held at WARNING
unless pushwave itself runs at DEBUG.
"""
import logging
import sys

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
PUSH_CLIENT_LOGGERS = ("urllib3", "requests", "pywebpush")


def _as_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(
    level: int | str = logging.INFO,
    format_string: str | None = None,
) -> int:
    """Configure root, uvicorn and pushwave loggers; returns the numeric level."""
    numeric = _as_level(level)
    logging.basicConfig(
        level=numeric,
        format=format_string or DEFAULT_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    for name in UVICORN_LOGGERS:
        logging.getLogger(name).setLevel(numeric)
    logging.getLogger("pushwave").setLevel(numeric)
    client_level = numeric if numeric <= logging.DEBUG else max(numeric, logging.WARNING)
    for name in PUSH_CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(client_level)
    return numeric
