"""
Fetching and navigating UPnP XML description documents.

This module is the only place that touches the network for descriptions.
Everything else receives parsed ElementTree elements and reads them with
the lookup helpers below.

Key components:
- DocumentSource: Interface for anything that turns a location into XML
- HTTPDocumentSource: Default source using urllib with a fixed timeout
- parse_document(): Parse raw bytes or text into an Element
- find(), find_text(), find_all(): Path lookups over description elements

Example usage:
    from upnp_control.document import HTTPDocumentSource, find_text

    root = HTTPDocumentSource().fetch("http://192.168.1.100:8080/desc.xml")
    print(find_text(root, "device", "friendlyName"))
"""

import logging
import urllib.error
import urllib.request
import xml.etree.ElementTree as ET
from typing import List, Optional, Union

from .exceptions import FetchError, MalformedDescriptionError
from .schema import DEVICE_NAMESPACE

logger = logging.getLogger(__name__)

# Seconds to wait for a description document
DEFAULT_TIMEOUT = 5.0


def parse_document(data: Union[bytes, str], location: str = "<string>") -> ET.Element:
    """Parse a description document and return its root element.

    Raises:
        MalformedDescriptionError: If the data is not well-formed XML
    """
    try:
        return ET.fromstring(data)
    except ET.ParseError as err:
        raise MalformedDescriptionError(f"Invalid XML in {location}: {err}") from err


class DocumentSource:
    """Turns a location into a parsed XML document."""

    def fetch(self, location: str) -> ET.Element:
        """Return the root element of the document at ``location``.

        Implementations raise FetchError when the document cannot be retrieved
        and MalformedDescriptionError when it is not well-formed XML.
        """
        raise NotImplementedError


class HTTPDocumentSource(DocumentSource):
    """Fetches description documents over HTTP.

    Each call fetches the document again; nothing is cached.

    Attributes:
        timeout (float): Socket timeout for each request in seconds
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    def fetch(self, location: str) -> ET.Element:
        """Download and parse the document at ``location``.

        Raises:
            FetchError: If the location is unreachable or answers with an error status
            MalformedDescriptionError: If the body is not well-formed XML
        """
        logger.debug("Fetching %s", location)
        try:
            with urllib.request.urlopen(location, timeout=self.timeout) as resp:
                status = getattr(resp, "status", 200)
                if status is not None and not 200 <= status < 300:
                    raise FetchError(location, f"HTTP {status}", status=status)
                data = resp.read()
        except urllib.error.HTTPError as err:
            raise FetchError(location, f"HTTP {err.code} {err.reason}", status=err.code) from err
        except urllib.error.URLError as err:
            raise FetchError(location, str(err.reason)) from err
        except (OSError, ValueError) as err:
            raise FetchError(location, str(err)) from err
        return parse_document(data, location)


def _loose_path(path) -> str:
    # Descriptions do not use namespaces uniformly; match any namespace
    return "/".join(f"{{*}}{tag}" for tag in path)


def find(element: ET.Element, *path: str) -> Optional[ET.Element]:
    """Return the first descendant at ``path`` under ``element``, in any namespace."""
    return element.find(_loose_path(path))


def find_text(element: ET.Element, *path: str, required: bool = False) -> Optional[str]:
    """Return the stripped text of the element at ``path``.

    Args:
        element: Element to search from
        path: Child tag names leading to the wanted element
        required: Raise instead of returning None when the element is absent

    Raises:
        MalformedDescriptionError: If ``required`` and the element is missing
    """
    found = find(element, *path)
    if found is None:
        if required:
            raise MalformedDescriptionError(f"Missing required element {'/'.join(path)}")
        return None
    return (found.text or "").strip()


def find_all(element: ET.Element, *path: str, namespace: str = DEVICE_NAMESPACE) -> List[ET.Element]:
    """Return all elements at ``path`` whose tags are in ``namespace``."""
    return element.findall("/".join(f"{{{namespace}}}{tag}" for tag in path))
