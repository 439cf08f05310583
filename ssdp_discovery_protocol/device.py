#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
The read-only view of a UPnP device tree that SsdpEngine advertises.

The engine only needs a handful of attributes from the caller's device model, described
here as Protocols. SsdpRootDevice, SsdpDevice and SsdpService are plain implementations
that can be used directly when the caller has no richer model of its own.
"""

from __future__ import annotations

from ssdp_discovery_protocol.internal_types import *

from .version import __version__

@runtime_checkable
class ServiceView(Protocol):
    type_urn: str

@runtime_checkable
class DeviceView(Protocol):
    name: str
    type_urn: str

    @property
    def devices(self) -> Sequence[DeviceView]: ...

    @property
    def services(self) -> Sequence[ServiceView]: ...

@runtime_checkable
class RootDeviceView(DeviceView, Protocol):
    version: str

Advertisable = Union[DeviceView, ServiceView]

class SsdpService:
    type_urn: str
    """The service type URN; e.g., "urn:schemas-upnp-org:service:ContentDirectory:1"."""

    def __init__(self, type_urn: str):
        self.type_urn = type_urn

    def __repr__(self) -> str:
        return f"SsdpService({self.type_urn!r})"

class SsdpDevice:
    name: str
    """The unique device name, normally "uuid:<device-UUID>"."""

    type_urn: str
    """The device type URN; e.g., "urn:schemas-upnp-org:device:MediaServer:1"."""

    devices: List[SsdpDevice]
    """Embedded devices, in advertisement order."""

    services: List[SsdpService]
    """Services, in advertisement order."""

    def __init__(
            self,
            name: str,
            type_urn: str,
            devices: Optional[Iterable[SsdpDevice]]=None,
            services: Optional[Iterable[SsdpService]]=None,
          ):
        self.name = name
        self.type_urn = type_urn
        self.devices = [] if devices is None else list(devices)
        self.services = [] if services is None else list(services)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {self.type_urn!r})"

class SsdpRootDevice(SsdpDevice):
    version: str
    """The device version, reported in the SERVER header."""

    kind: str
    """The product label reported in the SERVER header as <kind>/<version>."""

    def __init__(
            self,
            name: str,
            type_urn: str,
            version: str,
            devices: Optional[Iterable[SsdpDevice]]=None,
            services: Optional[Iterable[SsdpService]]=None,
            kind: Optional[str]=None,
          ):
        super().__init__(name, type_urn, devices=devices, services=services)
        self.version = version
        self.kind = type(self).__name__ if kind is None else kind

def device_kind(root_device: RootDeviceView) -> str:
    """The label for root_device in the SERVER header: its `kind` if it has one,
       otherwise its class name."""
    kind = getattr(root_device, 'kind', None)
    if not isinstance(kind, str) or kind == '':
        kind = type(root_device).__name__
    return kind

def server_string(root_device: RootDeviceView) -> str:
    """The SERVER header value sent in NOTIFYs and search responses for root_device."""
    return f"Python SSDP/{__version__} UPnP/1.0 {device_kind(root_device)}/{root_device.version}"

def unique_service_name(target: str, obj: Advertisable, root_device: RootDeviceView) -> str:
    """The USN announced for `target`.

    A uuid: target names the device itself, so its USN is the device name. Any other
    target is qualified by the root device name.
    """
    if target.startswith('uuid:'):
        name = getattr(obj, 'name', None)
        if name is None:
            name = root_device.name
        return name
    return f"{root_device.name}::{target}"
