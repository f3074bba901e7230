from __future__ import annotations

import contextvars
import logging
import sys

# set per request by RequestLoggingMiddleware; "-" outside a request
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"

# client libraries that log every HTTP call at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "hpack")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def setup_logging(level: str = "INFO") -> None:
    """Stdout logging tagged with the current request id; installed once per process."""
    root = logging.getLogger()
    for h in root.handlers:
        if any(isinstance(f, RequestIdFilter) for f in h.filters):
            return  # already installed (e.g., uvicorn reload, repeated create_app)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))

    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
