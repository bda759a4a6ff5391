import json
import logging
from typing import Any, TypedDict

from .errors import ContactErrorMixin
from .logging_utils import LogExtra, get_log_record_extra

_logger = logging.getLogger(__name__)


def create_troubleshooting_log_message(
    user_error_msg: str,
    *,
    error: BaseException,
    error_code: str | None = None,
    error_context: dict[str, Any] | None = None,
    tip: str | None = None,
) -> str:
    """Create a formatted message for _logger.exception(...)

    Arguments:
        user_error_msg -- the message the visitor gets to see
        error -- the instance of the handled exception
        error_code -- OEC to correlate this log entry with the failed request
        error_context -- extra data around the failure. Taken from exc.error_context() for ContactErrorMixin errors
        tip -- hint on why this might have happened and how to solve it
    """

    def _collect_causes(exc: BaseException) -> str:
        causes = []
        current = exc.__cause__
        while current is not None:
            causes.append(f"[{type(current).__name__}]'{current}'")
            current = getattr(current, "__cause__", None)
        return " <- ".join(causes)

    debug_data = json.dumps(
        {
            "exception_type": f"{type(error)}",
            "exception_string": f"{error}",
            "exception_causes": _collect_causes(error),
            "error_code": error_code,
            "context": error_context,
            "tip": tip,
        },
        default=repr,
        indent=1,
    )

    return f"{user_error_msg}.\n{debug_data}"


class LogKwargs(TypedDict):
    msg: str
    extra: LogExtra | None


def create_troubleshooting_log_kwargs(
    user_error_msg: str,
    *,
    error: BaseException,
    error_code: str | None = None,
    error_context: dict[str, Any] | None = None,
    tip: str | None = None,
) -> LogKwargs:
    """
    Creates a dictionary of logging arguments to be used with _log.exception for troubleshooting purposes.

    Usage:

        try:
            ...
        except MailTransportError as exc:
            _logger.exception(
                **create_troubleshooting_log_kwargs(
                    user_error_msg=MSG_SUBMISSION_FAILED,
                    error=exc,
                    tip="Check SMTP_* settings",
                )
            )

    """
    context = dict(error_context or {})
    if isinstance(error, ContactErrorMixin):
        context.update(error.error_context())

    log_msg = create_troubleshooting_log_message(
        user_error_msg,
        error=error,
        error_code=error_code,
        error_context=context,
        tip=tip,
    )

    return {
        "msg": log_msg,
        "extra": get_log_record_extra(error_code=error_code),
    }
