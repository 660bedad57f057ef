"""Logging setup shared by the command-line entry points."""
import logging
import re

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

_SECRET_PARAM_RE = re.compile(r"([?&](?:token|pass|password)=)[^&\s]+")


def redact(text: str) -> str:
    return _SECRET_PARAM_RE.sub(r"\1REDACTED", text)


class UrlRedactingFilter(logging.Filter):
    """A logging filter to redact access tokens and passwords from URLs."""
    def filter(self, record):
        # httpx logs "HTTP Request: %s %s ..." with the URL as the second
        # argument, either a str or an httpx.URL. Rewrite the args, not the
        # format string, or %-formatting breaks.
        if isinstance(record.msg, str) and "HTTP Request:" in record.msg and record.args and len(record.args) > 1:
            new_args = list(record.args)
            new_args[1] = redact(str(record.args[1]))
            record.args = tuple(new_args)
        return True


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)
    httpx_logger = logging.getLogger("httpx")
    if not any(isinstance(f, UrlRedactingFilter) for f in httpx_logger.filters):
        httpx_logger.addFilter(UrlRedactingFilter())
    if not verbose:
        # One line per request is noise at INFO; the toolkit logs pages itself.
        httpx_logger.setLevel(logging.WARNING)
