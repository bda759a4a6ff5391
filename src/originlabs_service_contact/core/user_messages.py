"""User-facing messages

The website is currently deployed in German; all texts returned to the visitor are declared here
"""

from typing import Final


def user_message(msg: str, *, _version: int | None = None) -> str:
    """Marks a message as user-facing

    Arguments:
        msg -- human-friendly string shown as-is in the contact form
        _version -- version number to track changes to messages; increment when modifying an existing message

    Returns:
        The original message string, allowing it to be used inline in code
    """
    return msg


MSG_REQUIRED_FIELDS_MISSING: Final[str] = user_message(
    "Bitte füllen Sie alle Pflichtfelder aus."
)
MSG_INVALID_EMAIL: Final[str] = user_message(
    "Bitte geben Sie eine gültige E-Mail-Adresse ein."
)
MSG_SUBMISSION_SENT: Final[str] = user_message("E-Mail erfolgreich gesendet!")
MSG_SUBMISSION_FAILED: Final[str] = user_message(
    "E-Mail konnte nicht gesendet werden. Bitte versuchen Sie es später erneut."
)
