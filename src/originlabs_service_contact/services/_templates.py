from typing import Final

# Templates are organised as:
#
#  - named-templates: hierarchical names "{event}.{media}.{part}.{ext}" that identify the event,
#     the media (e.g. email), the part of the message (e.g. subject, content) and the format
#     (e.g. html or txt)
#  - generic: used by other templates, e.g. base.html is the layout of all html contents
#

EVENT_CONTACT_NOTIFICATION: Final[str] = "contact_notification"
EVENT_CONTACT_CONFIRMATION: Final[str] = "contact_confirmation"


def get_email_template_name(event: str, part: str, ext: str) -> str:
    return f"{event}.email.{part}.{ext}"
