"""Unit tests for the document module."""

import io
import urllib.error
import urllib.request

import pytest

from upnp_control.document import HTTPDocumentSource, find, find_all, find_text, parse_document
from upnp_control.exceptions import FetchError, MalformedDescriptionError
from upnp_control.schema import SERVICE_NAMESPACE

from .conftest import read_file

UNQUALIFIED = """<root>
  <device>
    <friendlyName>Plain</friendlyName>
    <deviceList><device><friendlyName>Child</friendlyName></device></deviceList>
  </device>
</root>"""


class FakeResponse(io.BytesIO):
    def __init__(self, data: bytes, status: int = 200):
        super().__init__(data)
        self.status = status


def test_parse_document() -> None:
    root = parse_document(read_file("root.xml").encode("utf-8"))
    assert root.tag == "{urn:schemas-upnp-org:device-1-0}root"


def test_parse_document_invalid() -> None:
    with pytest.raises(MalformedDescriptionError, match="desc.xml"):
        parse_document(b"<root>", "http://host/desc.xml")


def test_find_text_strips() -> None:
    root = parse_document(read_file("root.xml"))
    assert find_text(root, "device", "friendlyName") == "Test Device"
    assert find(root, "device", "UDN") is not None


def test_find_text_missing() -> None:
    root = parse_document(read_file("root.xml"))
    assert find_text(root, "device", "iconList") is None
    with pytest.raises(MalformedDescriptionError, match="device/iconList"):
        find_text(root, "device", "iconList", required=True)


def test_find_text_any_namespace() -> None:
    root = parse_document(UNQUALIFIED)
    assert find_text(root, "device", "friendlyName") == "Plain"


def test_find_all_namespace_scoped() -> None:
    root = parse_document(read_file("root.xml"))
    device = find(root, "device")
    assert len(find_all(device, "deviceList", "device")) == 2
    assert find_all(device, "deviceList", "device", namespace=SERVICE_NAMESPACE) == []

    plain = find(parse_document(UNQUALIFIED), "device")
    assert find_all(plain, "deviceList", "device") == []


class TestHTTPDocumentSource:
    """Tests for HTTPDocumentSource."""

    def test_fetch(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = []

        def urlopen(url, timeout):
            calls.append((url, timeout))
            return FakeResponse(read_file("scpd.xml").encode("utf-8"))

        monkeypatch.setattr(urllib.request, "urlopen", urlopen)
        root = HTTPDocumentSource(timeout=1.5).fetch("http://host/scpd.xml")

        assert root.tag == "{urn:schemas-upnp-org:service-1-0}scpd"
        assert calls == [("http://host/scpd.xml", 1.5)]

    def test_http_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def urlopen(url, timeout):
            raise urllib.error.HTTPError(url, 404, "Not Found", None, None)

        monkeypatch.setattr(urllib.request, "urlopen", urlopen)
        with pytest.raises(FetchError) as excinfo:
            HTTPDocumentSource().fetch("http://host/missing.xml")
        assert excinfo.value.status == 404
        assert excinfo.value.location == "http://host/missing.xml"

    def test_non_success_status(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(urllib.request, "urlopen", lambda url, timeout: FakeResponse(b"", status=300))
        with pytest.raises(FetchError) as excinfo:
            HTTPDocumentSource().fetch("http://host/moved.xml")
        assert excinfo.value.status == 300

    def test_empty_success_body(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(urllib.request, "urlopen", lambda url, timeout: FakeResponse(b"", status=204))
        with pytest.raises(MalformedDescriptionError, match="empty.xml"):
            HTTPDocumentSource().fetch("http://host/empty.xml")

    def test_unreachable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def urlopen(url, timeout):
            raise urllib.error.URLError(ConnectionRefusedError(111, "Connection refused"))

        monkeypatch.setattr(urllib.request, "urlopen", urlopen)
        with pytest.raises(FetchError, match="Connection refused"):
            HTTPDocumentSource().fetch("http://host/desc.xml")

    def test_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def urlopen(url, timeout):
            raise TimeoutError("timed out")

        monkeypatch.setattr(urllib.request, "urlopen", urlopen)
        with pytest.raises(FetchError, match="timed out"):
            HTTPDocumentSource().fetch("http://host/desc.xml")
