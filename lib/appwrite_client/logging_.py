from __future__ import annotations

import logging

LIBRARY_LOGGER = "appwrite_client"
TRANSPORT_LOGGERS = ("httpx", "httpcore")


def setup_logging(verbose: bool, *, transport_debug: bool | None = None) -> None:
    """Configure root logging for an application using this client.

    ``transport_debug`` defaults to ``verbose``; httpx logs every request at
    INFO, so it stays at WARNING unless asked for.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger(LIBRARY_LOGGER).setLevel(level)

    if transport_debug is None:
        transport_debug = verbose
    for name in TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if transport_debug else logging.WARNING)
