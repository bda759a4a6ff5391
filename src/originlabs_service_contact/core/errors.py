"""Errors of the contact service and error codes (OEC) to trace them in the logs

Unexpected exceptions can be traced by matching the logged error code
with the one reported to the operator
"""

import hashlib
import traceback
from datetime import UTC, datetime
from typing import Any, Final

from pydantic.errors import PydanticErrorMixin


class _DefaultDict(dict):
    def __missing__(self, key):
        return f"'{key}=?'"


class ContactErrorMixin(PydanticErrorMixin):
    code: str  # type: ignore[assignment]
    msg_template: str

    def __new__(cls, *_args, **_kwargs):
        if "code" not in cls.__dict__:
            cls.code = cls._get_full_class_name()
        return super().__new__(cls)

    def __init__(self, **ctx: Any) -> None:
        self.__dict__ = ctx
        super().__init__(message=self._build_message(), code=self.code)  # type: ignore[arg-type]

    def __str__(self) -> str:
        return self._build_message()

    def _build_message(self) -> str:
        # NOTE: safe. Does not raise KeyError
        return self.msg_template.format_map(_DefaultDict(**self.__dict__))

    @classmethod
    def _get_full_class_name(cls) -> str:
        relevant_classes = [
            c.__name__
            for c in cls.__mro__[:-1]
            if c.__name__
            not in (
                "PydanticErrorMixin",
                "ContactErrorMixin",
                "Exception",
                "BaseException",
            )
        ]
        return ".".join(reversed(relevant_classes))

    def error_context(self) -> dict[str, Any]:
        """Returns context in which error occurred and stored within the exception"""
        return dict(**self.__dict__)


class ContactServiceError(ContactErrorMixin, Exception):
    msg_template = "Unexpected error in contact service"


class SubmissionValidationError(ContactServiceError):
    """Submission rejected before rendering. Recoverable by the visitor"""

    msg_template = "{user_msg}"


class TemplateRenderError(ContactServiceError):
    msg_template = "Could not render template '{template_name}': {reason}"


class MailTransportError(ContactServiceError):
    """Delivery of one message failed. Carries no credentials"""

    msg_template = "Could not send '{subject}' to {recipient} via {smtp_host}:{smtp_port}: {reason}"


#
# ERROR CODES
#

_LABEL: Final[str] = "OEC:{fingerprint}-{timestamp}"
_LEN: Final[int] = 12  # chars (~48 bits)
_SECS_TO_MILISECS: Final[int] = 1000  # ms


def _create_fingerprint(exc: BaseException) -> str:
    """
    Unique error fingerprint of the **traceback** for deduplication purposes
    """
    tb = traceback.extract_tb(exc.__traceback__)
    frame_sigs = [f"{frame.name}:{frame.lineno}" for frame in tb]
    fingerprint = f"{type(exc).__name__}|" + "|".join(frame_sigs)
    # E.g. ZeroDivisionError|foo:23|main:10
    return hashlib.sha256(fingerprint.encode()).hexdigest()[:_LEN]


def create_error_code(exception: BaseException) -> str:
    """
    Generates a unique error code for the given exception as `OEC:{fingerprint}-{timestamp}`
    """
    timestamp = int(datetime.now(UTC).timestamp() * _SECS_TO_MILISECS)
    return _LABEL.format(
        fingerprint=_create_fingerprint(exception), timestamp=timestamp
    )
