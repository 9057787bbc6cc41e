"""Asynchronous HTTP communication for the paste service.

``AsyncHttp`` wraps a single aiohttp session shared by the paste store and translator clients.
Responses are decoded by content type, and transport failures are raised as ``AsyncCommError``
(``AsyncCommTimeoutError`` for timeouts) carrying the HTTP status when the server answered.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Final, Literal, Self

import aiohttp
from aiohttp.client import ClientSession

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from aiohttp.client import ClientResponse


__all__: list[str] = ["AsyncCommError", "AsyncCommInvalidContentTypeError", "AsyncCommTimeoutError", "AsyncHttp"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTPMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

CONNECT_TIMEOUT: Final[float] = 1.0


class AsyncHttp:
    """Asynchronous HTTP client with content-type aware response decoding.

    The session is created lazily and can be re-created after ``close()``, so one instance can be
    used across several ``async with`` blocks.
    """

    def __init__(self, *, headers: dict[str, str] | None = None) -> None:
        """Initialize the client and register the default content handlers.

        Default handlers decode "text/plain" and "text/html" as UTF-8 text and parse
        "application/json".

        Args:
            headers (dict[str, str] | None): Headers sent with every request.
        """
        logger.info("%s initializing", self.__class__.__name__)
        self.__session: ClientSession | None = None
        self._headers: dict[str, str] = dict(headers or {})
        self.content_handlers: dict[str, Callable[[bytes], Any]] = {}

        self.add_handler("text/plain", lambda x: x.decode("utf-8"))
        self.add_handler("text/html", lambda x: x.decode("utf-8"))
        self.add_handler("application/json", lambda x: json.loads(x.decode("utf-8")))

    async def __aenter__(self) -> Self:
        logger.debug("%s entering context", self.__class__.__name__)
        self.initialize_session(suppress_already_log=True)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        logger.debug("%s exiting context", self.__class__.__name__)
        await self.close()

    def initialize_session(self, *, suppress_already_log: bool = False) -> None:
        """Create the aiohttp session if there is none or the previous one was closed.

        Must be called from within a running event loop.

        Args:
            suppress_already_log (bool): If True, do not log when the session already exists.
        """
        if self.__session is None or self.__session.closed:
            self.__session = ClientSession(headers=self._headers)
            logger.debug("%s session initialized", self.__class__.__name__)
        elif not suppress_already_log:
            logger.debug("%s session already initialized", self.__class__.__name__)

    @property
    def session(self) -> ClientSession:
        """The open aiohttp session, created on first use."""
        self.initialize_session(suppress_already_log=True)
        if self.__session is None:
            msg = "Session could not be initialized"
            raise RuntimeError(msg)
        return self.__session

    @property
    def is_open(self) -> bool:
        return self.__session is not None and not self.__session.closed

    async def close(self) -> None:
        """Close the aiohttp session if it is open."""
        if self.__session and not self.__session.closed:
            await self.__session.close()
            logger.info("%s session closed", self.__class__.__name__)
        self.__session = None

    async def get(self, *, url: str, params: dict[str, str] | None = None, total_timeout: float = 10.0) -> Any:
        """Perform an asynchronous HTTP GET request.

        Args:
            url (str): The URL to send the GET request to.
            params (dict[str, str] | None): Optional query parameters.
            total_timeout (float): Total timeout for the request in seconds.

        Returns:
            Any: The decoded response body.
        """
        return await self._request("GET", url=url, params=params, total_timeout=total_timeout)

    async def post(self, *, url: str, data: Any | None = None, total_timeout: float = 10.0) -> Any:
        """Perform an asynchronous HTTP POST request with a JSON body.

        Args:
            url (str): The URL to send the POST request to.
            data (Any | None): JSON-serializable request body.
            total_timeout (float): Total timeout for the request in seconds.

        Returns:
            Any: The decoded response body.
        """
        return await self._request("POST", url=url, json=data, total_timeout=total_timeout)

    async def decode_response(self, resp: ClientResponse) -> Any:
        """Decode a response body with the handler registered for its content type.

        Args:
            resp (ClientResponse): The response object from the aiohttp request.

        Returns:
            Any: The decoded body, or None for an empty body.

        Raises:
            AsyncCommInvalidContentTypeError: If no handler is registered for the content type.
        """
        content_type: str = resp.headers.get("Content-Type", "").split(";")[0].strip()
        logger.debug("'Content-Type': '%s'", content_type)

        raw: bytes = await resp.read()
        if not raw:
            logger.debug("Received empty response")
            return None

        handler: Callable[[bytes], Any] | None = self.content_handlers.get(content_type)
        if handler:
            try:
                return handler(raw)
            except (UnicodeDecodeError, ValueError) as err:
                msg: str = f"Malformed '{content_type}' response body"
                raise AsyncCommInvalidContentTypeError(msg, status=resp.status) from err

        msg = f"Unknown Content-Type '{content_type}'"
        raise AsyncCommInvalidContentTypeError(msg, status=resp.status)

    def add_handler(self, content_type: str, handler: Callable[[bytes], Any]) -> None:
        """Register a decoder for a content type, replacing any existing one.

        Args:
            content_type (str): The content type to handle (e.g. "application/json").
            handler (Callable[[bytes], Any]): Function turning the raw body into a value.
        """
        if self.content_handlers.get(content_type):
            logger.warning("Handler for content type '%s' already exists, replacing it", content_type)
        self.content_handlers[content_type] = handler
        logger.debug("Added handler for content type '%s'", content_type)

    async def _request(self, method: HTTPMethod, *, url: str, total_timeout: float, **kwargs: Any) -> Any:
        """Perform an HTTP request and decode the response.

        Args:
            method (HTTPMethod): The HTTP method to use.
            url (str): The URL to send the request to.
            total_timeout (float): Total timeout in seconds. 0 or negative disables the timeout.
            **kwargs: Additional keyword arguments passed to ``ClientSession.request``.

        Returns:
            Any: The decoded response body.

        Raises:
            AsyncCommTimeoutError: If the server did not answer in time.
            AsyncCommError: For connection failures and error status codes.
        """
        logger.debug("[%s] url=%s timeout=%s kwargs=%s", method, url, total_timeout, kwargs)
        if total_timeout <= 0:
            _timeout = aiohttp.ClientTimeout(total=None)
        elif total_timeout < CONNECT_TIMEOUT:
            # a connect timeout longer than the total would never apply
            _timeout = aiohttp.ClientTimeout(total=total_timeout)
        else:
            _timeout = aiohttp.ClientTimeout(connect=CONNECT_TIMEOUT, total=total_timeout)

        try:
            async with self.session.request(method=method, url=url, timeout=_timeout, **kwargs) as resp:
                if resp.status >= 400:  # noqa: PLR2004
                    body: str = await resp.text(errors="replace")
                    logger.debug("Error response %s: %s", resp.status, body[:200])
                    msg = "Error response from the server."
                    raise AsyncCommError(msg, status=resp.status, detail=self._error_detail(body))
                return await self.decode_response(resp)

        except TimeoutError as err:
            logger.debug(err)
            msg = "Timeout due to a lack of response from the server."
            raise AsyncCommTimeoutError(msg) from err
        except ConnectionResetError as err:
            logger.debug(err)
            msg = "The connection to the server has been disconnected."
            raise AsyncCommError(msg) from err
        except aiohttp.ClientConnectorError as err:
            logger.debug(err)
            msg = "The server is not running, or the port is closed."
            raise AsyncCommError(msg) from err
        except aiohttp.ClientError as err:
            logger.debug(err)
            msg = "HTTP communication failed."
            raise AsyncCommError(msg) from err

    @staticmethod
    def _error_detail(body: str) -> str:
        """Return the message of a JSON error body (``{"error": "..."}``), or the body itself."""
        try:
            payload: Any = json.loads(body)
        except ValueError:
            return body.strip()
        if isinstance(payload, dict) and isinstance(payload.get("error"), str):
            return payload["error"]
        return body.strip()


class AsyncCommError(Exception):
    """Base class for asynchronous communication errors.

    Attributes:
        msg (str): Human readable message, including the status when one is known.
        status (int | None): HTTP status code of the error response, None when the server never answered.
        detail (str): Error body returned by the server, if any.
    """

    def __init__(self, msg: str | BaseException, *, status: int | None = None, detail: str = "") -> None:
        self.msg: str = str(msg)
        self.status: int | None = status
        self.detail: str = detail
        if status is not None:
            self.msg = f"{self.msg}: status='{status}'"
        super().__init__(self.msg)


class AsyncCommTimeoutError(AsyncCommError):
    """A request did not complete within its timeout."""


class AsyncCommInvalidContentTypeError(AsyncCommError):
    """The response content type is unknown or its body could not be decoded."""
