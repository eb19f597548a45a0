"""
UPnP Control - client-side object model for UPnP device descriptions.

This package fetches UPnP device description documents and builds an
in-memory tree of devices and services exposing their metadata: identifiers,
manufacturer data, control/description/event URLs, actions and state
variables.

Key modules:
- schema: Device kind registry and UPnP schema constants
- document: Description fetching and XML lookups
- device: Device tree construction
- service: Services, actions and state variables
- ssdp: SSDP-based discovery
- cli: upnp-describe command-line tool

Example usage:
    from upnp_control import search

    for device in search():
        print(f"Found: {device.friendly_name}")
        for service in device.services:
            print(f"  {service.type}")
"""

__version__ = "1.0.0"
__license__ = "MIT"

# Core functionality exports
from .device import Device, create, search
from .document import DocumentSource, HTTPDocumentSource, parse_document
from .exceptions import FetchError, InvalidArgumentError, MalformedDescriptionError, UnknownTypeError, UPnPError
from .schema import DEVICE_SCHEMA_PREFIX, SERVICE_SCHEMA_PREFIX, DeviceKind, SchemaRegistry, default_registry
from .service import Action, Argument, Service, StateVariable
from .ssdp import SSDP, SSDPResponse

__all__ = [
    "create",
    "search",
    "Device",
    "Service",
    "Action",
    "Argument",
    "StateVariable",
    "DeviceKind",
    "SchemaRegistry",
    "default_registry",
    "DEVICE_SCHEMA_PREFIX",
    "SERVICE_SCHEMA_PREFIX",
    "DocumentSource",
    "HTTPDocumentSource",
    "parse_document",
    "SSDP",
    "SSDPResponse",
    "UPnPError",
    "FetchError",
    "MalformedDescriptionError",
    "InvalidArgumentError",
    "UnknownTypeError",
]
