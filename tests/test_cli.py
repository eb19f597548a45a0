"""Unit tests for the upnp-describe command."""

import pytest

from upnp_control import cli
from upnp_control.ssdp import SSDP

from .conftest import ROOT_LOCATION, StaticDocumentSource


@pytest.fixture(autouse=True)
def offline(monkeypatch: pytest.MonkeyPatch, source: StaticDocumentSource) -> None:
    monkeypatch.setattr(cli, "HTTPDocumentSource", lambda timeout: source)


def test_describe(capsys: pytest.CaptureFixture) -> None:
    assert cli.main([ROOT_LOCATION, "--actions"]) == 0

    out = capsys.readouterr().out
    assert "Test Device [urn:schemas-upnp-org:device:TestDevice:1]" in out
    assert "  Nested Device [urn:schemas-upnp-org:device:NestedDevice:1]" in out
    assert "control: http://test.local:8080/TestService/control" in out
    assert "TestAction(in TestInput, out TestOutput)" in out
    assert "var TestInVar: string in [ON, OFF]" in out
    assert "var TestOutVar: ui2 range 0..100 step 1 default 5" in out


def test_describe_unreachable(capsys: pytest.CaptureFixture) -> None:
    assert cli.main(["http://missing.local/desc.xml"]) == 1
    assert "missing.local" in capsys.readouterr().err


def test_requires_location() -> None:
    with pytest.raises(SystemExit):
        cli.main([])


def test_search_survives_receive_error(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    class ResettingSocket:
        def sendto(self, data, addr):
            pass

        def recvfrom(self, size):
            raise ConnectionResetError(104, "reset")

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

    monkeypatch.setattr(SSDP, "_open_socket", lambda self: ResettingSocket())

    assert cli.main(["--search", "--timeout", "0.5"]) == 0
    assert capsys.readouterr().out == ""
