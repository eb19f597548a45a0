"""Command-line tool that prints UPnP device trees."""

import argparse
import logging
import sys
from typing import List, Optional, TextIO

from .device import Device, create, search
from .document import DEFAULT_TIMEOUT, HTTPDocumentSource
from .exceptions import UPnPError
from .ssdp import SSDP


def print_device(device: Device, out: TextIO, indent: int = 0, actions: bool = False) -> None:
    pad = "  " * indent
    out.write(f"{pad}{device.friendly_name} [{device.type}]\n")
    out.write(f"{pad}  UDN: {device.name}\n")
    out.write(f"{pad}  Manufacturer: {device.manufacturer}\n")
    out.write(f"{pad}  Model: {device.model_name}")
    if device.model_number:
        out.write(f" {device.model_number}")
    out.write("\n")
    for service in device.sub_services:
        out.write(f"{pad}  Service {service.type}\n")
        out.write(f"{pad}    control: {service.control_url}\n")
        out.write(f"{pad}    description: {service.scpd_url}\n")
        if service.event_sub_url:
            out.write(f"{pad}    events: {service.event_sub_url}\n")
        if actions:
            for name, arguments in service.action_signatures().items():
                args = ", ".join(f"{direction} {arg}" for direction, arg, _ in arguments)
                out.write(f"{pad}    {name}({args})\n")
            for variable in service.state_variables.values():
                out.write(f"{pad}    var {variable.name}: {variable.data_type}")
                if variable.allowed_values:
                    out.write(f" in [{', '.join(variable.allowed_values)}]")
                if variable.allowed_range:
                    minimum, maximum, step = variable.allowed_range
                    out.write(f" range {minimum}..{maximum}")
                    if step:
                        out.write(f" step {step}")
                if variable.default_value is not None:
                    out.write(f" default {variable.default_value}")
                out.write("\n")
    for sub_device in device.sub_devices:
        print_device(sub_device, out, indent + 1, actions)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="upnp-describe", description="Print UPnP device descriptions.")
    parser.add_argument("locations", nargs="*", help="device description URLs")
    parser.add_argument("--search", action="store_true", help="discover devices with SSDP")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="network timeout in seconds")
    parser.add_argument("-a", "--actions", action="store_true", help="list service actions and state variables")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if not args.locations and not args.search:
        parser.error("give at least one location or --search")

    source = HTTPDocumentSource(timeout=args.timeout)
    status = 0
    devices = []
    for location in args.locations:
        try:
            devices.append(create(location, source=source))
        except UPnPError as e:
            print(f"{location}: {e}", file=sys.stderr)
            status = 1
    if args.search:
        try:
            devices.extend(search(ssdp=SSDP(timeout=args.timeout), source=source))
        except UPnPError as e:
            print(f"search failed: {e}", file=sys.stderr)
            status = 1

    for device in devices:
        print_device(device, sys.stdout, actions=args.actions)
    return status


if __name__ == "__main__":
    sys.exit(main())
