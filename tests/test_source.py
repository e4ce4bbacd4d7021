"""Unit tests for reading Markdown sources."""

from __future__ import annotations

import io
import typing as typ

import pytest
import requests

from gfm_render import source
from gfm_render.source import (
    SourceFetchError,
    build_session,
    fetch_markdown,
    is_remote,
    read_source,
)

if typ.TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture

URL = "https://example.invalid/docs/README.md"


def test_read_local_file(tmp_path: Path) -> None:
    """Paths are read as UTF-8 text."""
    path = tmp_path / "doc.md"
    path.write_text("# Ünïcode\n", encoding="utf-8")
    assert read_source(str(path)) == "# Ünïcode\n"


def test_missing_file(tmp_path: Path) -> None:
    """Missing paths raise FileNotFoundError."""
    with pytest.raises(FileNotFoundError, match="not found"):
        read_source(str(tmp_path / "absent.md"))


def test_read_stdin() -> None:
    """A dash reads standard input."""
    assert read_source("-", stdin=io.StringIO("from stdin")) == "from stdin"


@pytest.mark.parametrize(
    ("value", "expected"),
    [(URL, True), ("HTTP://x.test/a.md", True), ("docs/a.md", False), ("-", False)],
)
def test_is_remote(value: str, expected: bool) -> None:
    """Only http(s) URLs are fetched."""
    assert is_remote(value) is expected


def test_fetch_uses_supplied_session(mocker: MockerFixture) -> None:
    """A caller's session is used and left open."""
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value.text = "# Remote"
    assert read_source(URL, session=session) == "# Remote"
    session.get.assert_called_once_with(URL, timeout=30)
    session.get.return_value.raise_for_status.assert_called_once_with()
    session.close.assert_not_called()


def test_fetch_closes_owned_session(mocker: MockerFixture) -> None:
    """A session created for the request is closed afterwards."""
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value.text = "body"
    mocker.patch.object(source, "build_session", return_value=session)
    assert fetch_markdown(URL) == "body"
    session.close.assert_called_once_with()


@pytest.mark.parametrize(
    "error",
    [requests.ConnectionError("boom"), requests.Timeout("slow")],
)
def test_transport_errors_are_wrapped(
    mocker: MockerFixture, error: requests.RequestException
) -> None:
    """Transport failures surface as SourceFetchError."""
    session = mocker.Mock(spec=requests.Session)
    session.get.side_effect = error
    with pytest.raises(SourceFetchError, match="Failed to fetch") as excinfo:
        fetch_markdown(URL, session=session)
    assert excinfo.value.__cause__ is error


def test_http_errors_are_wrapped(mocker: MockerFixture) -> None:
    """Error statuses surface as SourceFetchError."""
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value.raise_for_status.side_effect = requests.HTTPError(
        "404 Client Error"
    )
    with pytest.raises(SourceFetchError, match="404"):
        fetch_markdown(URL, session=session)


def test_build_session_retries() -> None:
    """The default session retries transient server errors."""
    session = build_session()
    try:
        retries = session.get_adapter("https://example.invalid").max_retries
        assert retries.total == 5
        assert 503 in retries.status_forcelist
    finally:
        session.close()
