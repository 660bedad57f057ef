"""Argument and connection handling shared by all entry points."""
import logging
from typing import Callable

from ..errors import ZMToolkitError
from ..logs import configure_logging
from ..registry import MonitorRegistry, load_registry
from ..session import ZMSession
from ..settings import ENV_API_URL, ENV_PASSWORD, ENV_USER, Settings

logger = logging.getLogger("zm-toolkit")


def add_connection_arguments(parser) -> None:
    parser.add_argument("--api-url", help=f"Base URL of the API, e.g. https://host/zm/api (or set {ENV_API_URL}).")
    parser.add_argument("--portal-url", help="Base URL of the web portal. Defaults to the API URL without '/api'.")
    parser.add_argument("--user", help=f"Username (or set {ENV_USER}). Omit when authentication is disabled.")
    parser.add_argument("--password", help=f"Password (or set {ENV_PASSWORD}). Prompted for if not provided.")
    parser.add_argument("--insecure", action="store_true", help="Do not verify the server's TLS certificate.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests and debugging detail.")


def open_session(args) -> ZMSession:
    """Create the process-wide session and log in if a user is configured."""
    settings = Settings.resolve(
        api_url=args.api_url,
        user=args.user,
        password=args.password,
        portal_url=args.portal_url,
        verify_ssl=False if args.insecure else None,
    )
    session = ZMSession.from_settings(settings)
    if settings.user:
        try:
            session.login(settings.user, settings.password)
        except ZMToolkitError:
            session.close()
            raise
    return session


def connect(args) -> tuple[ZMSession, MonitorRegistry]:
    session = open_session(args)
    try:
        return session, load_registry(session)
    except ZMToolkitError:
        session.close()
        raise


def run_main(main: Callable, args) -> int:
    """Run an entry point's main, turning toolkit errors into exit status 1."""
    configure_logging(args.verbose)
    try:
        return main(args) or 0
    except ZMToolkitError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted.")
        return 130
