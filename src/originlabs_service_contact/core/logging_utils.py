"""Log format of the service

Structured records are single-line `key=value` pairs, e.g.

    log_level=ERROR | log_timestamp=... | log_source=...dispatcher:dispatch(83) | log_oec=OEC:... | log_msg=...

so that a failed submission is found in the logs by the error code it was reported with.
"""

import logging
import time
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any, Final, NotRequired, TypedDict

_logger = logging.getLogger(__name__)

# loggers that own the handlers when the app runs under uvicorn ("" is the root logger)
_SERVED_LOGGERS: Final[tuple[str, ...]] = (
    "",
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
)

# SEE https://docs.python.org/3/library/logging.html#logrecord-attributes
_STRUCTURED_FORMAT: Final[str] = " | ".join(
    [
        "log_level=%(levelname)s",
        "log_timestamp=%(asctime)s",
        "log_source=%(name)s:%(funcName)s(%(lineno)d)",
        "log_oec=%(log_oec)s",
        "log_msg=%(message)s",
    ]
)

_LOCAL_DEV_FORMAT: Final[str] = (
    "%(levelname)-8s [%(asctime)s] [%(name)s:%(funcName)s(%(lineno)d)] %(message)s"
)


class LogExtra(TypedDict):
    log_oec: NotRequired[str]


def get_log_record_extra(*, error_code: str | None = None) -> LogExtra | None:
    if error_code:
        return {"log_oec": error_code}
    return None


class ServiceLogFormatter(logging.Formatter):
    def __init__(self, *, local_dev: bool) -> None:
        super().__init__(_LOCAL_DEV_FORMAT if local_dev else _STRUCTURED_FORMAT)
        self.local_dev = local_dev

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "log_oec"):
            record.log_oec = None  # type: ignore[attr-defined]
        formatted = super().format(record)
        if self.local_dev:
            return formatted
        # tracebacks and visitor messages span lines
        return formatted.replace("\n", "\\n")


class MessageFilter(logging.Filter):
    """Drops records whose message contains any of the substrings"""

    def __init__(self, substrings: Iterable[str]) -> None:
        super().__init__()
        self.substrings = tuple(substrings)

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        return not any(s in msg for s in self.substrings)


def setup_loggers(
    *,
    log_format_local_dev_enabled: bool,
    logger_filter_mapping: dict[str, list[str]],
    logger_names: Iterable[str] = _SERVED_LOGGERS,
) -> None:
    """Formats the handlers of the served loggers and installs message filters

    e.g. CONTACT_LOG_FILTER_MAPPING='{"uvicorn.access": ["/api/health"]}' silences
    the health checks of the load balancer
    """
    formatter = ServiceLogFormatter(local_dev=log_format_local_dev_enabled)
    for name in logger_names:
        for handler in logging.getLogger(name).handlers:
            handler.setFormatter(formatter)

    for name, substrings in logger_filter_mapping.items():
        logger = logging.getLogger(name)
        if not logger.hasHandlers():
            _logger.warning(
                "Logger %s has no handlers. Filter %s not installed", name, substrings
            )
            continue
        logger.addFilter(MessageFilter(substrings))


@contextmanager
def log_context(
    logger: logging.Logger,
    level: int,
    msg: str,
    *args: Any,
    log_duration: bool = False,
) -> Iterator[None]:
    """Logs `Starting <msg> ...` on entry and `Finished <msg>` when the block succeeds"""
    msg = msg.strip()
    msg = msg[:1].lower() + msg[1:]
    started = time.monotonic()

    # 1 => log_context, 2 => contextlib, 3 => caller
    logger.log(level, f"Starting {msg} ...", *args, stacklevel=3)
    yield
    elapsed = f" in {time.monotonic() - started:.3f}s" if log_duration else ""
    logger.log(level, f"Finished {msg}{elapsed}", *args, stacklevel=3)
