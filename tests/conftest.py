"""Shared fixtures: an offline document source serving the XML fixtures."""

import os
from typing import Dict, Union

import pytest

from upnp_control.document import DocumentSource, parse_document
from upnp_control.exceptions import FetchError
from upnp_control.schema import SchemaRegistry

FIXTURES = os.path.join(os.path.dirname(__file__), "fixtures")

ROOT_LOCATION = "http://test.local:8080/root.xml"
URL_BASE_LOCATION = "http://10.0.0.5:49152/rootDesc.xml"


def read_file(name: str) -> str:
    with open(os.path.join(FIXTURES, name), "r", encoding="utf-8") as fh:
        return fh.read()


class StaticDocumentSource(DocumentSource):
    """Serves documents from a dict and records every fetch."""

    def __init__(self, documents: Dict[str, Union[bytes, str]]):
        self.documents = dict(documents)
        self.fetched = []

    def fetch(self, location: str):
        self.fetched.append(location)
        if location not in self.documents:
            raise FetchError(location, "HTTP 404 Not Found", status=404)
        return parse_document(self.documents[location], location)


def documents() -> Dict[str, str]:
    scpd = read_file("scpd.xml")
    return {
        ROOT_LOCATION: read_file("root.xml"),
        "http://test.local:8080/TestService/scpd.xml": scpd,
        "http://test.local:8080/root.xml/SubService/scpd.xml": scpd,
        "http://test.local:8080/NestedService/scpd.xml": read_file("empty_scpd.xml"),
        URL_BASE_LOCATION: read_file("url_base.xml"),
        "http://10.0.0.5:49152/l3f.xml": read_file("empty_scpd.xml"),
        "http://10.0.0.5:49152/rootDesc.xml/l3f.xml": read_file("empty_scpd.xml"),
    }


@pytest.fixture
def source() -> StaticDocumentSource:
    return StaticDocumentSource(documents())


@pytest.fixture
def registry() -> SchemaRegistry:
    return SchemaRegistry()
