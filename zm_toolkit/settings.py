"""
Connection settings and API constants.

Command-line flags win, then ZM_* environment variables. A missing password is
prompted for so it does not have to appear in shell history.
"""
import os
from dataclasses import dataclass
from getpass import getpass
from typing import Optional

from .errors import ConfigurationError

# --- Constants ---
# Paths are relative to the API base URL (e.g. https://host/zm/api).
LOGIN_ENDPOINT = "host/login.json"
MONITORS_ENDPOINT = "monitors.json"
ZONES_ENDPOINT = "zones.json"
EVENTS_INDEX_ENDPOINT = "events/index"
# Paths relative to the web portal (e.g. https://host/zm).
PORTAL_VIEW_ENDPOINT = "index.php"

EVENT_SORT_FIELD = "StartTime"
EVENT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

VERIFY_SSL = True  # Set to False (or ZM_VERIFY_SSL=0) for self-signed servers
CONNECT_TIMEOUT = 10.0
READ_TIMEOUT = 300.0  # event searches over long windows are slow

ENV_API_URL = "ZM_API_URL"
ENV_PORTAL_URL = "ZM_PORTAL_URL"
ENV_USER = "ZM_USER"
ENV_PASSWORD = "ZM_PASSWORD"
ENV_VERIFY_SSL = "ZM_VERIFY_SSL"

_FALSE_STRINGS = {"0", "false", "no", "off"}


@dataclass
class Settings:
    api_url: str
    portal_url: str
    user: Optional[str] = None
    password: Optional[str] = None
    verify_ssl: bool = VERIFY_SSL

    @classmethod
    def resolve(cls, api_url: Optional[str] = None, user: Optional[str] = None,
                password: Optional[str] = None, portal_url: Optional[str] = None,
                verify_ssl: Optional[bool] = None, environ=None, prompt=getpass) -> "Settings":
        """
        Merge explicit values with the environment.

        Raises:
            ConfigurationError: no API URL was given either way.
        """
        environ = os.environ if environ is None else environ
        api_url = (api_url or environ.get(ENV_API_URL) or "").rstrip("/")
        if not api_url:
            raise ConfigurationError(f"No API URL given; pass --api-url or set {ENV_API_URL}")
        portal_url = (portal_url or environ.get(ENV_PORTAL_URL) or _portal_from_api(api_url)).rstrip("/")
        user = user or environ.get(ENV_USER)
        password = password or environ.get(ENV_PASSWORD)
        if user and not password:
            password = prompt(f"Password for {user}: ")
        if verify_ssl is None:
            verify_ssl = environ.get(ENV_VERIFY_SSL, str(VERIFY_SSL)).strip().lower() not in _FALSE_STRINGS
        return cls(api_url=api_url, portal_url=portal_url, user=user, password=password, verify_ssl=verify_ssl)


def _portal_from_api(api_url: str) -> str:
    if api_url.endswith("/api"):
        return api_url[: -len("/api")]
    return api_url
