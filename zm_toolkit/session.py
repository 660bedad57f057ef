"""
HTTP session against a ZoneMinder server.

One ZMSession (one httpx.Client) per process. After login the access token is
attached as a ``token`` query parameter to every request. Each call records
whether it succeeded in ``last_ok``/``last_error``; failures of reads and
downloads are also raised as TransportError.
"""
import logging
from pathlib import Path
from typing import Optional

import httpx

from .errors import AuthenticationError, TransportError
from .settings import CONNECT_TIMEOUT, LOGIN_ENDPOINT, PORTAL_VIEW_ENDPOINT, READ_TIMEOUT, VERIFY_SSL

logger = logging.getLogger(__name__)

CLIENT_NAME = "zm-toolkit"


class ZMSession:
    def __init__(self, api_url: str, portal_url: Optional[str] = None, verify_ssl: bool = VERIFY_SSL,
                 transport: Optional[httpx.BaseTransport] = None):
        self.api_url = api_url.rstrip("/")
        self.portal_url = (portal_url or self.api_url).rstrip("/")
        timeout_config = httpx.Timeout(CONNECT_TIMEOUT, read=READ_TIMEOUT)
        self.client = httpx.Client(verify=verify_ssl, timeout=timeout_config, transport=transport,
                                   headers={"user-agent": CLIENT_NAME})
        self.token: Optional[str] = None
        self.last_ok = True
        self.last_error: Optional[str] = None

    @classmethod
    def from_settings(cls, settings, transport: Optional[httpx.BaseTransport] = None) -> "ZMSession":
        return cls(settings.api_url, settings.portal_url, settings.verify_ssl, transport=transport)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self) -> None:
        self.client.close()

    def api(self, path: str) -> str:
        return f"{self.api_url}/{path.lstrip('/')}"

    def _succeeded(self) -> None:
        self.last_ok = True
        self.last_error = None

    def _failed(self, message: str) -> None:
        self.last_ok = False
        self.last_error = message
        logger.debug(message)

    def _authorized(self, url: str) -> httpx.URL:
        """``url`` with the access token merged into its existing query string."""
        url = httpx.URL(url)
        if self.token:
            url = url.copy_merge_params({"token": self.token})
        return url

    def login(self, user: str, password: str) -> Optional[str]:
        """
        Log in and keep the access token for all later calls.

        Returns the token, or None when the server accepted the request but
        issued no token (authentication disabled server-side).

        Raises:
            AuthenticationError: the credentials were rejected.
            TransportError: the server could not be reached or misbehaved.
        """
        url = self.api(LOGIN_ENDPOINT)
        logger.info(f"Attempting to authenticate to {self.api_url} as {user}...")
        try:
            response = self.client.post(url, data={"user": user, "pass": password})
            response.raise_for_status()
            json_response = response.json()
        except httpx.HTTPStatusError as e:
            message = f"Authentication failed: {e.response.status_code} - {e.response.text[:200]}"
            self._failed(message)
            if e.response.status_code in (401, 403):
                raise AuthenticationError(message) from e
            raise TransportError(message, url=url, status_code=e.response.status_code) from e
        except (httpx.HTTPError, ValueError) as e:
            message = f"Authentication request to {url} failed: {e}"
            self._failed(message)
            raise TransportError(message, url=url) from e

        self._succeeded()
        token = json_response.get("access_token")
        if not token:
            logger.warning("Login accepted but no access token returned; continuing without one.")
            return None
        self.token = token
        logger.info(f"Successfully authenticated (API version {json_response.get('apiversion', 'unknown')}).")
        return token

    def get_json(self, path: str) -> dict:
        """
        GET an API path and parse the JSON body.

        Raises:
            TransportError: non-2xx status, network failure or a body that is not JSON.
        """
        url = self.api(path)
        try:
            logger.debug(f"GET {url}")
            response = self.client.get(self._authorized(url))
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            message = f"GET {path} failed: {e.response.status_code} - {e.response.text[:200]}"
            self._failed(message)
            raise TransportError(message, url=url, status_code=e.response.status_code) from e
        except (httpx.HTTPError, ValueError) as e:
            message = f"GET {path} failed: {e}"
            self._failed(message)
            raise TransportError(message, url=url) from e
        self._succeeded()
        return data

    def post_form(self, path: str, fields: dict) -> bool:
        """POST form fields to an API path; True on a 2xx answer."""
        url = self.api(path)
        try:
            logger.debug(f"POST {url} fields={list(fields)}")
            response = self.client.post(self._authorized(url), data=fields)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self._failed(f"POST {path} failed: {e.response.status_code} - {e.response.text[:200]}")
            return False
        except httpx.HTTPError as e:
            self._failed(f"POST {path} failed: {e}")
            return False
        self._succeeded()
        return True

    def portal_view(self, **params) -> str:
        """URL of a web-portal view, e.g. ``portal_view(view="image", eid=1, fid="snapshot")``."""
        query = httpx.QueryParams(params)
        return f"{self.portal_url}/{PORTAL_VIEW_ENDPOINT}?{query}"

    def download(self, url: str, dest: Path) -> Path:
        """
        Stream ``url`` into ``dest``.

        The file is written under a temporary name and renamed when complete,
        so a failed download never leaves a truncated file behind.

        Raises:
            TransportError: the request failed, the server answered with an HTML page,
                or the file could not be written.
        """
        dest = Path(dest)
        partial = dest.with_name(dest.name + ".part")
        try:
            with self.client.stream("GET", self._authorized(url)) as response:
                response.raise_for_status()
                content_type = response.headers.get("content-type", "")
                if content_type.startswith("text/"):
                    raise TransportError(f"Expected media from {url}, got {content_type}", url=url,
                                         status_code=response.status_code)
                with open(partial, "wb") as fh:
                    for chunk in response.iter_bytes():
                        fh.write(chunk)
            partial.replace(dest)
        except httpx.HTTPStatusError as e:
            partial.unlink(missing_ok=True)
            message = f"Download failed: {e.response.status_code}"
            self._failed(message)
            raise TransportError(message, url=url, status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            partial.unlink(missing_ok=True)
            message = f"Download failed: {e}"
            self._failed(message)
            raise TransportError(message, url=url) from e
        except TransportError as e:
            partial.unlink(missing_ok=True)
            self._failed(str(e))
            raise
        except OSError as e:
            partial.unlink(missing_ok=True)
            message = f"Could not write {dest}: {e}"
            self._failed(message)
            raise TransportError(message, url=url) from e
        self._succeeded()
        return dest
