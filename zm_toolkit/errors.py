"""
Exception taxonomy for zm-toolkit.

Every failure the toolkit reports derives from ZMToolkitError so the command-line
entry points can catch one type, log a single readable line and exit non-zero.
httpx exceptions never escape the session layer; they are re-raised as
TransportError or AuthenticationError.
"""
from typing import Any, Optional


class ZMToolkitError(Exception):
    """Base class for all toolkit errors."""


class AuthenticationError(ZMToolkitError):
    """The server rejected the login."""


class TransportError(ZMToolkitError):
    """Any non-success outcome of an HTTP call."""

    def __init__(self, message: str, url: Optional[str] = None,
                 status_code: Optional[int] = None, parameter: Optional[str] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.parameter = parameter


class NotFoundError(ZMToolkitError):
    """A monitor or zone key did not match any known id or name."""

    def __init__(self, kind: str, key: str, scope: Optional[str] = None):
        where = f" on monitor '{scope}'" if scope else ""
        super().__init__(f"No {kind} with id or name '{key}'{where}")
        self.kind = kind
        self.key = key


class ValidationError(ZMToolkitError):
    """
    Raised when a parameter read/write or a selector fails validation.

    The offending field and value are kept on the exception so callers can
    report them without re-parsing the message.
    """

    def __init__(self, message: str, field_name: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.field_name = field_name
        self.value = value


class UnknownParameterError(ValidationError):
    pass


class EmptyValueError(ValidationError):
    pass


class InvalidEnumValueError(ValidationError):
    pass


class MalformedParameterError(ValidationError):
    """A write token without the Name:Value delimiter."""


class MixedSelectorError(ValidationError):
    """Include-style and exclude-style monitor selectors used together."""


class RangeError(ZMToolkitError):
    """A threshold value outside 0..100 percent or 0..zone area pixels."""

    def __init__(self, message: str, field_name: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.field_name = field_name
        self.value = value


class InvalidRangeError(ZMToolkitError):
    """A time window whose start is after its end."""


class DateParseError(ZMToolkitError):
    pass


class PolygonError(ZMToolkitError):
    """A coordinate list that cannot describe a polygon."""


class MediaError(ZMToolkitError):
    """The external encoder is missing or exited with an error."""


class ConfigurationError(ZMToolkitError):
    """Connection settings are incomplete."""
