"""
UPnP services declared by a device description.

A Service is built from a ``<service>`` fragment of a device description
plus the device's base URL. Its SCPD (service control protocol description)
is fetched during construction so that the service's actions and state
variables are available as soon as the device tree is built.

Key components:
- Service: A service with resolved control, description and event URLs
- Action / Argument: Operations the service accepts
- StateVariable: Entries of the service state table
"""

import logging
import urllib.parse
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .document import DocumentSource, HTTPDocumentSource, find, find_all, find_text
from .exceptions import MalformedDescriptionError
from .schema import SERVICE_NAMESPACE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Argument:
    """An argument of a service action.

    Attributes:
        name (str): Argument name
        direction (str): ``in`` or ``out``
        related_state_variable (Optional[str]): State variable giving the argument type
    """

    name: str
    direction: str
    related_state_variable: Optional[str] = None


@dataclass(frozen=True)
class Action:
    """A named operation of a service with its arguments in declaration order."""

    name: str
    arguments: Tuple[Argument, ...] = ()

    @property
    def in_arguments(self) -> List[Argument]:
        return [arg for arg in self.arguments if arg.direction == "in"]

    @property
    def out_arguments(self) -> List[Argument]:
        return [arg for arg in self.arguments if arg.direction == "out"]


@dataclass(frozen=True)
class StateVariable:
    """One row of a service state table.

    Attributes:
        name (str): Variable name
        data_type (str): UPnP data type, e.g. ``ui4`` or ``string``
        send_events (bool): Whether changes are evented to subscribers
        default_value (Optional[str]): Declared default, if any
        allowed_values (Tuple[str, ...]): Enumerated allowed values, if any
        allowed_range (Optional[Tuple[str, str, Optional[str]]]): (minimum, maximum, step)
    """

    name: str
    data_type: str
    send_events: bool = True
    default_value: Optional[str] = None
    allowed_values: Tuple[str, ...] = field(default_factory=tuple)
    allowed_range: Optional[Tuple[str, str, Optional[str]]] = None


def _parse_action(description: ET.Element) -> Action:
    """Build an Action from an SCPD ``<action>`` element."""
    arguments = []
    for arg in find_all(description, "argumentList", "argument", namespace=SERVICE_NAMESPACE):
        direction = find_text(arg, "direction", required=True).lower()
        if direction not in ("in", "out"):
            raise MalformedDescriptionError(f"Invalid argument direction {direction!r}")
        arguments.append(
            Argument(
                name=find_text(arg, "name", required=True),
                direction=direction,
                related_state_variable=find_text(arg, "relatedStateVariable"),
            )
        )
    return Action(name=find_text(description, "name", required=True), arguments=tuple(arguments))


def _parse_state_variable(description: ET.Element) -> StateVariable:
    """Build a StateVariable from an SCPD ``<stateVariable>`` element."""
    allowed_values = tuple(
        (value.text or "").strip()
        for value in find_all(description, "allowedValueList", "allowedValue", namespace=SERVICE_NAMESPACE)
    )
    allowed_range = None
    if find(description, "allowedValueRange") is not None:
        allowed_range = (
            find_text(description, "allowedValueRange", "minimum", required=True),
            find_text(description, "allowedValueRange", "maximum", required=True),
            find_text(description, "allowedValueRange", "step"),
        )
    return StateVariable(
        name=find_text(description, "name", required=True),
        data_type=find_text(description, "dataType", required=True),
        send_events=description.get("sendEvents", "yes").strip().lower() != "no",
        default_value=find_text(description, "defaultValue"),
        allowed_values=allowed_values,
        allowed_range=allowed_range,
    )


class Service:
    """A service provided by a UPnP device.

    Services compare by identity: two Service objects are the same service
    only if they are the same object. Use Service.create to build one.

    Attributes:
        device: Device that declares this service
        type (str): Service type URN
        id (str): Service identifier
        url (str): Base URL the service URLs were resolved against
        scpd_url (str): Absolute URL of the service description
        control_url (str): Absolute URL for SOAP control
        event_sub_url (Optional[str]): Absolute URL for event subscriptions
        actions (Dict[str, Action]): Actions by name, in document order
        state_variables (Dict[str, StateVariable]): State variables by name
    """

    def __init__(
        self,
        type: str,
        id: str,
        url: str,
        scpd_url: str,
        control_url: str,
        event_sub_url: Optional[str] = None,
        device=None,
        actions: Dict[str, Action] = None,
        state_variables: Dict[str, StateVariable] = None,
    ):
        self.type = type
        self.id = id
        self.url = url
        self.scpd_url = scpd_url
        self.control_url = control_url
        self.event_sub_url = event_sub_url
        self.device = device
        self.actions = dict(actions or {})
        self.state_variables = dict(state_variables or {})

    @classmethod
    def create(cls, description: ET.Element, url: str, device=None, source: DocumentSource = None) -> "Service":
        """Build a Service from a ``<service>`` element and fetch its SCPD.

        Args:
            description: The ``<service>`` element of a device description
            url: Base URL of the declaring device
            device: Device that declares the service
            source: Document source used to fetch the SCPD

        Raises:
            MalformedDescriptionError: If a required element is missing
            FetchError: If the SCPD cannot be retrieved
        """
        if source is None:
            source = HTTPDocumentSource()

        def resolve(path: str) -> str:
            try:
                return urllib.parse.urljoin(url, path)
            except ValueError as err:
                raise MalformedDescriptionError(f"Invalid service URL {path!r}: {err}") from err

        event_sub_url = find_text(description, "eventSubURL", required=True)
        service = cls(
            type=find_text(description, "serviceType", required=True),
            id=find_text(description, "serviceId", required=True),
            url=url,
            scpd_url=resolve(find_text(description, "SCPDURL", required=True)),
            control_url=resolve(find_text(description, "controlURL", required=True)),
            event_sub_url=resolve(event_sub_url) if event_sub_url else None,
            device=device,
        )
        service.parse_scpd(source.fetch(service.scpd_url))
        return service

    def parse_scpd(self, scpd: ET.Element) -> None:
        """Fill in actions and state variables from an SCPD document."""
        for action_description in find_all(scpd, "actionList", "action", namespace=SERVICE_NAMESPACE):
            action = _parse_action(action_description)
            self.actions[action.name] = action
        for variable_description in find_all(
            scpd, "serviceStateTable", "stateVariable", namespace=SERVICE_NAMESPACE
        ):
            variable = _parse_state_variable(variable_description)
            self.state_variables[variable.name] = variable
        logger.debug(
            "Parsed %s: %d actions, %d state variables", self.type, len(self.actions), len(self.state_variables)
        )

    def action(self, name: str) -> Optional[Action]:
        """Return the action called ``name``, or None if the service has none."""
        return self.actions.get(name)

    def action_signatures(self) -> Dict[str, List[Tuple[str, str, Optional[str]]]]:
        """Return ``{action: [(direction, argument, related state variable), ...]}``."""
        return {
            name: [(arg.direction, arg.name, arg.related_state_variable) for arg in action.arguments]
            for name, action in self.actions.items()
        }

    def __repr__(self) -> str:
        return f"Service(type={self.type!r}, id={self.id!r}, control_url={self.control_url!r})"
