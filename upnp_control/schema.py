"""
UPnP schema constants and the device kind registry.

A device description names its kind with a versioned URN such as
``urn:schemas-upnp-org:device:MediaServer:1``. The registry maps the type
name segment (``MediaServer``) to a single DeviceKind descriptor, creating
new kinds the first time they are seen so that every device of the same
kind shares the identical descriptor object.

Example usage:
    from upnp_control.schema import default_registry

    kind = default_registry.resolve("urn:schemas-upnp-org:device:MediaServer:1")
    print(kind.name, kind.urn)
"""

import logging
import re
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from .exceptions import UnknownTypeError

logger = logging.getLogger(__name__)

DEVICE_SCHEMA_PREFIX = "urn:schemas-upnp-org:device"
SERVICE_SCHEMA_PREFIX = "urn:schemas-upnp-org:service"

# Default XML namespaces of device descriptions and SCPD documents
DEVICE_NAMESPACE = "urn:schemas-upnp-org:device-1-0"
SERVICE_NAMESPACE = "urn:schemas-upnp-org:service-1-0"

_DEVICE_TYPE_RE = re.compile(rf"^{re.escape(DEVICE_SCHEMA_PREFIX)}:([^:]+):.*$")

# Kinds known up front; anything else is registered on first sight
STANDARD_DEVICE_KINDS = [
    "Basic",
    "InternetGatewayDevice",
    "LANDevice",
    "MediaRenderer",
    "MediaServer",
    "WANConnectionDevice",
    "WANDevice",
]


@dataclass(frozen=True)
class DeviceKind:
    """Descriptor for one kind of UPnP device.

    Attributes:
        name (str): Type name segment of the URN, e.g. ``MediaServer``
        urn (str): Version 1 schema URN for the kind; for device types outside
            the UPnP schema both name and urn hold the verbatim device type
    """

    name: str
    urn: str

    def urn_for(self, version: int) -> str:
        """Return the schema URN of this kind at ``version``."""
        if self.name == self.urn:
            return self.urn
        return f"{DEVICE_SCHEMA_PREFIX}:{self.name}:{version}"

    def matches(self, device_type: str) -> bool:
        """Return True if ``device_type`` names this kind at any version."""
        return (device_type_name(device_type) or device_type.strip()) == self.name


def device_type_name(device_type: str) -> Optional[str]:
    """Extract the type name from a device type URN, or None if it does not fit the schema."""
    match = _DEVICE_TYPE_RE.match(device_type.strip())
    return match.group(1) if match else None


class SchemaRegistry:
    """Thread-safe mapping from device type names to DeviceKind descriptors.

    Args:
        kinds: Type names to register up front
        strict: Raise UnknownTypeError for URNs outside the UPnP device
            schema instead of registering them under their full URN
    """

    def __init__(self, kinds: Optional[List[str]] = None, strict: bool = False):
        self.strict = strict
        self._kinds: Dict[str, DeviceKind] = {}
        self._lock = threading.Lock()
        for name in kinds or []:
            self.register(name)

    def register(self, name: str) -> DeviceKind:
        """Return the kind registered under ``name``, creating it if needed."""
        with self._lock:
            return self._get_or_create(name)

    def resolve(self, device_type: str) -> DeviceKind:
        """Resolve a deviceType URN to its registered DeviceKind.

        Resolving the same type name twice returns the identical object.

        Raises:
            UnknownTypeError: If the URN does not fit the device schema and
                the registry is strict
        """
        name = device_type_name(device_type)
        if name is None:
            if self.strict:
                raise UnknownTypeError(device_type)
            logger.warning("Device type %r does not match %s, using it verbatim", device_type, DEVICE_SCHEMA_PREFIX)
            name = device_type.strip()
            with self._lock:
                return self._get_or_create(name, urn=name)
        with self._lock:
            return self._get_or_create(name)

    def get(self, name: str) -> Optional[DeviceKind]:
        """Return the kind registered under ``name`` without creating one."""
        return self._kinds.get(name)

    def kinds(self) -> List[DeviceKind]:
        """Return all registered kinds in registration order."""
        with self._lock:
            return list(self._kinds.values())

    def _get_or_create(self, name: str, urn: Optional[str] = None) -> DeviceKind:
        # Caller holds the lock
        kind = self._kinds.get(name)
        if kind is None:
            kind = DeviceKind(name=name, urn=urn or f"{DEVICE_SCHEMA_PREFIX}:{name}:1")
            self._kinds[name] = kind
            logger.debug("Registered device kind %s", kind.urn)
        return kind

    def __contains__(self, name: str) -> bool:
        return name in self._kinds

    def __len__(self) -> int:
        return len(self._kinds)


default_registry = SchemaRegistry(STANDARD_DEVICE_KINDS)
