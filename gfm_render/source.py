"""Read Markdown from a file, standard input, or an HTTP(S) URL.

The command-line interface accepts any of the three as its ``SOURCE``
argument. Remote documents are downloaded through a retrying
:class:`requests.Session`; transport failures surface as
:class:`SourceFetchError`.
"""

from __future__ import annotations

import logging
import sys
import typing as typ
from pathlib import Path

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

STDIN_SOURCE = "-"
REMOTE_PREFIXES = ("http://", "https://")
FETCH_TIMEOUT = 30


class SourceFetchError(RuntimeError):
    """Raised when a remote Markdown document cannot be downloaded."""


def is_remote(source: str) -> bool:
    """Return ``True`` when ``source`` names an HTTP(S) resource."""
    return source.lower().startswith(REMOTE_PREFIXES)


def build_session() -> requests.Session:
    """Return a session retrying idempotent requests on transient failures."""
    session = requests.Session()
    retry = Retry(
        total=5,
        read=5,
        connect=3,
        backoff_factor=0.5,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def fetch_markdown(url: str, *, session: requests.Session | None = None) -> str:
    """Download the Markdown document at ``url``.

    Parameters
    ----------
    url : str
        HTTP(S) location of the document.
    session : requests.Session, optional
        Session to reuse. When omitted a retrying session is created and
        closed after the request.

    Returns
    -------
    str
        The decoded response body.

    Raises
    ------
    SourceFetchError
        If the request fails or the server answers with an error status.
    """
    owned = session is None
    active = session or build_session()
    try:
        logger.debug("Fetching markdown from %s", url)
        resp = active.get(url, timeout=FETCH_TIMEOUT)
        resp.raise_for_status()
        return resp.text
    except requests.RequestException as exc:
        msg = f"Failed to fetch markdown from {url}: {exc}"
        raise SourceFetchError(msg) from exc
    finally:
        if owned:
            active.close()


def read_source(
    source: str,
    *,
    session: requests.Session | None = None,
    stdin: typ.TextIO | None = None,
) -> str:
    """Return the Markdown named by ``source``.

    ``-`` reads standard input, ``http://`` and ``https://`` URLs are fetched
    with :func:`fetch_markdown`, and anything else is read as a UTF-8 file.

    Raises
    ------
    FileNotFoundError
        If ``source`` is a path that does not exist.
    SourceFetchError
        If a remote source cannot be downloaded.
    """
    if source == STDIN_SOURCE:
        return (stdin or sys.stdin).read()
    if is_remote(source):
        return fetch_markdown(source, session=session)
    path = Path(source)
    if not path.exists():
        msg = f"Markdown source not found: {path}"
        raise FileNotFoundError(msg)
    return path.read_text(encoding="utf-8")


__all__ = [
    "SourceFetchError",
    "build_session",
    "fetch_markdown",
    "is_remote",
    "read_source",
]
