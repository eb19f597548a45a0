"""
UPnP device description parsing into a tree of devices and services.

This module fetches a device description document and builds a Device for
the root device, recursing into embedded devices and creating a Service for
every declared service. Each Device also exposes flattened views of all
devices and services reachable below it.

Key components:
- Device: A device node with its metadata, sub-devices and services
- create(): Build a device tree from a description location
- search(): Discover devices via SSDP and build a tree for each response

Example usage:
    from upnp_control.device import create

    device = create("http://192.168.1.100:8080/desc.xml")
    print(f"Device: {device.friendly_name} ({device.kind.name})")
    for service in device.services:
        print(f"  {service.type} -> {service.control_url}")
"""

import logging
import urllib.parse
import xml.etree.ElementTree as ET
from typing import Dict, Iterator, List, Optional

from .document import DocumentSource, HTTPDocumentSource, find, find_all, find_text
from .exceptions import InvalidArgumentError, MalformedDescriptionError
from .schema import DEVICE_SCHEMA_PREFIX, DeviceKind, SchemaRegistry, default_registry
from .service import Service
from .ssdp import SSDP

logger = logging.getLogger(__name__)


def _parse_url(text: Optional[str], field: str) -> Optional[str]:
    """Validate an optional URL attribute, raising MalformedDescriptionError for unparseable values."""
    if text is None:
        return None
    try:
        urllib.parse.urlsplit(text)
    except ValueError as err:
        raise MalformedDescriptionError(f"Invalid URL in {field}: {text!r}") from err
    return text


def _is_base_url(url) -> bool:
    """Return True if ``url`` is an absolute URL usable as a base for relative URLs."""
    if not isinstance(url, str) or not url:
        return False
    try:
        parts = urllib.parse.urlsplit(url)
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc)


class Device:
    """A device on a UPnP control point.

    A Device holds the information from its description together with its
    embedded devices and services. Build one with Device.from_location,
    Device.from_element or the module-level create(); the tree is complete
    once the constructor returns and is not modified afterwards.

    Attributes:
        name (str): Unique Device Name (UDN)
        type (str): Device type URN
        kind (DeviceKind): Registered kind for ``type``
        url (str): Base URL used to resolve relative service URLs
        parent (Optional[Device]): Embedding device, None for a root device
        friendly_name (str): Short description for the end user
        manufacturer (str): Manufacturer's name
        manufacturer_url (Optional[str]): Manufacturer's web site
        model_description (Optional[str]): Long description for the end user
        model_name (str): Model name
        model_number (Optional[str]): Model number
        model_url (Optional[str]): Web site for the model
        presentation_url (Optional[str]): URL for control via a browser
        serial_number (Optional[str]): Serial number
        upc (Optional[str]): Universal Product Code
        sub_devices (tuple): Devices embedded directly in this device
        devices (tuple): All embedded devices, depth-first
        sub_services (tuple): Services declared directly by this device
        services (tuple): All services of this device and its sub-devices
    """

    def __init__(
        self,
        description: ET.Element,
        url: str,
        source: DocumentSource = None,
        kind: DeviceKind = None,
        registry: SchemaRegistry = None,
        parent: "Device" = None,
    ):
        """Build a device from its ``<device>`` element.

        Args:
            description: The ``<device>`` element of a description document
            url: Base URL inherited from the parent device or the root document
            source: Document source used to fetch service descriptions
            kind: Resolved kind; looked up from the deviceType when omitted
            registry: Registry used to resolve kinds of this and embedded devices
            parent: Embedding device, if any

        Raises:
            InvalidArgumentError: If ``description`` is not an element or ``url``
                is not an absolute URL
            MalformedDescriptionError: If the description is incomplete
        """
        if not isinstance(description, ET.Element):
            raise InvalidArgumentError(
                f"must be a location or an {ET.Element.__name__}, got {type(description).__name__}"
            )
        if url is None:
            raise InvalidArgumentError(f"url not provided with {ET.Element.__name__}")
        if not _is_base_url(url):
            raise InvalidArgumentError(f"url must be an absolute URL, got {url!r}")

        self.url = url
        self.parent = parent
        self._source = source if source is not None else HTTPDocumentSource()
        self._registry = registry if registry is not None else default_registry
        self._kind = kind
        self.parse_device(description)

    @classmethod
    def from_element(
        cls,
        description: ET.Element,
        url: str,
        source: DocumentSource = None,
        kind: DeviceKind = None,
        registry: SchemaRegistry = None,
    ) -> "Device":
        """Build a device from an already parsed ``<device>`` element and its inherited base URL."""
        return cls(description, url, source=source, kind=kind, registry=registry)

    @classmethod
    def from_location(
        cls, location: str, source: DocumentSource = None, registry: SchemaRegistry = None
    ) -> "Device":
        """Fetch the description at ``location`` and build its root device.

        The base URL is taken from the document's URLBase element when
        present, otherwise it is ``location + "/"``.

        Raises:
            InvalidArgumentError: If ``location`` is not an absolute URL
            FetchError: If the description cannot be retrieved
            MalformedDescriptionError: If the description is incomplete
        """
        if not _is_base_url(location):
            raise InvalidArgumentError(f"must be a location or an {ET.Element.__name__}, got {location!r}")
        if source is None:
            source = HTTPDocumentSource()

        root = source.fetch(location)
        url_base = find_text(root, "URLBase")
        if url_base:
            if not _is_base_url(url_base):
                raise MalformedDescriptionError(f"Invalid URLBase {url_base!r} in {location}")
            url = url_base
        else:
            url = location + "/"

        device = find(root, "device")
        if device is None:
            raise MalformedDescriptionError(f"No root device in {location}")
        return cls(device, url, source=source, registry=registry)

    @property
    def kind(self) -> DeviceKind:
        return self._kind

    def parse_device(self, description: ET.Element) -> None:
        """Fill in attributes, sub-devices and services from ``description``."""
        self.type = find_text(description, "deviceType", required=True)
        self.name = find_text(description, "UDN", required=True)
        if self._kind is None:
            self._kind = self._registry.resolve(self.type)

        self.friendly_name = find_text(description, "friendlyName", required=True)
        self.manufacturer = find_text(description, "manufacturer", required=True)
        self.manufacturer_url = _parse_url(find_text(description, "manufacturerURL"), "manufacturerURL")
        self.model_description = find_text(description, "modelDescription")
        self.model_name = find_text(description, "modelName", required=True)
        self.model_number = find_text(description, "modelNumber")
        self.model_url = _parse_url(find_text(description, "modelURL"), "modelURL")
        self.presentation_url = _parse_url(find_text(description, "presentationURL"), "presentationURL")
        self.serial_number = find_text(description, "serialNumber")
        self.upc = find_text(description, "UPC")

        logger.debug("Parsing device %s (%s) at %s", self.name, self.type, self.url)

        sub_devices = []
        for sub_description in find_all(description, "deviceList", "device"):
            sub_devices.append(
                Device(sub_description, self.url, source=self._source, registry=self._registry, parent=self)
            )
        self.sub_devices = tuple(sub_devices)

        devices = []
        for sub_device in self.sub_devices:
            devices.append(sub_device)
            devices.extend(sub_device.devices)
        self.devices = tuple(devices)

        sub_services = []
        for service_description in find_all(description, "serviceList", "service"):
            sub_services.append(Service.create(service_description, self.url, device=self, source=self._source))
        self.sub_services = tuple(sub_services)

        # First occurrence wins; services are keyed by identity
        services: Dict[Service, None] = dict.fromkeys(self.sub_services)
        for device in self.devices:
            for service in device.services:
                services.setdefault(service)
        self.services = tuple(services)

    def walk(self) -> Iterator["Device"]:
        """Yield this device followed by every embedded device, depth-first."""
        yield self
        yield from self.devices

    def service(self, service_type: str) -> Optional[Service]:
        """Return the first reachable service of type ``service_type``, if any."""
        for service in self.services:
            if service.type == service_type:
                return service
        return None

    def __repr__(self) -> str:
        return f"Device(name={self.name!r}, type={self.type!r}, friendly_name={self.friendly_name!r})"


def create(location: str, source: DocumentSource = None, registry: SchemaRegistry = None) -> Device:
    """Fetch the description at ``location`` and build its device tree.

    The root device type is resolved through the schema registry so that
    devices of the same kind share one DeviceKind. The base URL of the root
    device is ``location + "/"``.

    Args:
        location: URL of the device description document
        source: Document source; defaults to HTTPDocumentSource
        registry: Kind registry; defaults to the module default registry

    Returns:
        The fully built root Device

    Raises:
        FetchError: If the description cannot be retrieved
        MalformedDescriptionError: If deviceType or the root device is missing
    """
    if source is None:
        source = HTTPDocumentSource()
    if registry is None:
        registry = default_registry

    description = source.fetch(location)
    device_type = find_text(description, "device", "deviceType", required=True)
    kind = registry.resolve(device_type)

    device = find(description, "device")
    return Device(device, location + "/", source=source, kind=kind, registry=registry)


def search(
    *kinds: DeviceKind, ssdp=None, source: DocumentSource = None, registry: SchemaRegistry = None
) -> List[Device]:
    """Discover devices and build a Device for each discovery response.

    With no ``kinds`` every response whose type is a UPnP device URN is
    used; otherwise only devices of the given kinds are searched for.

    Args:
        kinds: Device kinds to search for
        ssdp: Discovery source with a ``search(*targets)`` method; defaults to SSDP()
        source: Document source passed on to create()
        registry: Kind registry passed on to create()
    """
    if ssdp is None:
        ssdp = SSDP()

    if kinds:
        responses = ssdp.search(*[kind.urn for kind in kinds])
    else:
        responses = [response for response in ssdp.search() if response.type.startswith(DEVICE_SCHEMA_PREFIX)]

    logger.debug("Building %d discovered devices", len(responses))
    return [create(response.location, source=source, registry=registry) for response in responses]
