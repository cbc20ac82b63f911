"""Minimal HTTP GET capability used by the fetch stages."""

import codecs
import logging
import socket
from http.client import HTTPException
from typing import Protocol
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from tubecaption.ingestion.errors import TransportError, TransportTimeoutError

logger = logging.getLogger(__name__)


class HttpClient(Protocol):
    """Anything that can turn a URL into a response body.

    Implementations raise TransportError on any failure.
    """

    def get(self, url: str, *, stage: str = "resource") -> str: ...


class UrllibHttpClient:
    """HttpClient backed by urllib with a bounded timeout."""

    def __init__(self, timeout: float = 20.0, headers: dict[str, str] | None = None) -> None:
        self._timeout = timeout
        self._headers = dict(headers or {})

    def get(self, url: str, *, stage: str = "resource") -> str:
        """GET ``url`` and return the decoded body.

        Raises:
            TransportTimeoutError: If the request times out.
            TransportError: On network failure or a non-2xx status.
        """
        request = Request(url, headers=self._headers)
        try:
            with urlopen(request, timeout=self._timeout) as resp:
                body = resp.read()
                charset = _known_charset(resp.headers.get_content_charset())
        except HTTPError as e:
            raise TransportError(stage, url, f"HTTP {e.code}") from e
        except (socket.timeout, TimeoutError) as e:
            raise TransportTimeoutError(stage, url, f"timed out after {self._timeout:g}s") from e
        except URLError as e:
            if isinstance(e.reason, (socket.timeout, TimeoutError)):
                raise TransportTimeoutError(stage, url, f"timed out after {self._timeout:g}s") from e
            raise TransportError(stage, url, str(e.reason)) from e
        except OSError as e:
            raise TransportError(stage, url, str(e)) from e
        except HTTPException as e:
            raise TransportError(stage, url, str(e) or type(e).__name__) from e
        return body.decode(charset, errors="replace")


def _known_charset(charset: str | None) -> str:
    """Charset from Content-Type, or utf-8 when absent or unknown to Python."""
    if not charset:
        return "utf-8"
    try:
        codecs.lookup(charset)
    except LookupError:
        logger.warning("Unknown response charset %r, decoding as utf-8", charset)
        return "utf-8"
    return charset
