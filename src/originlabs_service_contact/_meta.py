"""Application's metadata"""

from importlib.metadata import distribution, version
from typing import Final

from packaging.version import Version

_current_distribution = distribution("originlabs-service-contact")
__version__: str = version("originlabs-service-contact")


APP_NAME: Final[str] = _current_distribution.metadata["Name"]
VERSION: Final[Version] = Version(__version__)
API_VERSION: Final[str] = __version__
API_VTAG: Final[str] = f"v{VERSION.major}"


def get_summary() -> str:
    return _current_distribution.metadata.get_all("Summary", [""])[-1]


SUMMARY: Final[str] = get_summary()


# https://patorjk.com/software/taag/#p=display&f=Standard&t=Contact
APP_STARTED_BANNER_MSG = rf"""
   ____            _             _
  / ___|___  _ __ | |_ __ _  ___| |_
 | |   / _ \| '_ \| __/ _` |/ __| __|
 | |__| (_) | | | | || (_| | (__| |_
  \____\___/|_| |_|\__\__,_|\___|\__|
    {API_VTAG}"""


APP_SHUTDOWN_BANNER_MSG = "{:=^100}".format(
    f"App {APP_NAME}=={VERSION} shutdown completed"
)
