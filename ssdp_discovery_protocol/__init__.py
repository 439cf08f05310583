# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Package ssdp_discovery_protocol implements the discovery half of the Simple Service Discovery Protocol (SSDP).

SSDP is the multicast UDP announce/search mechanism of the UPnP Device Architecture. Devices
multicast NOTIFY datagrams to 239.255.255.250:1900 when they become available (ssdp:alive) or
go away (ssdp:byebye), and answer M-SEARCH requests for matching search targets with
"HTTP/1.1 200 OK" datagrams.

This package can listen for announcements, search for devices and services, and advertise a
local device tree. Retrieving device descriptions, control and eventing are left to other
packages.
"""

from .version import __version__

from .internal_types import Jsonable, JsonableDict, HostAndPort, LogSink

from .exceptions import SsdpError, SsdpSocketError, UnknownMessageError

from .ssdp_datagram import SsdpDatagram
from .notification import SsdpNotification, build_notify, build_byebye
from .response import SsdpSearchResponse, build_response
from .search import SsdpSearchRequest, build_search
from .codec import SsdpMessage, classify, parse_message
from .device import (
    ServiceView, DeviceView, RootDeviceView,
    SsdpService, SsdpDevice, SsdpRootDevice,
    server_string, unique_service_name,
  )
from .ssdp_socket import open_multicast_socket, close_socket
from .receiver import SsdpReceiver, SHUTDOWN, drain_queue
from .engine import SsdpEngine, SearchTargetKind, resolve_search_target
from .util import CaseInsensitiveDict
from .constants import (
    SSDP_MULTICAST_ADDRESS, SSDP_PORT, SSDP_TTL, SSDP_TIMEOUT, NOTIFY_INTERVAL,
    DEVICE_SCHEMA_PREFIX, SERVICE_SCHEMA_PREFIX, ROOT_DEVICE_TARGET,
  )

__all__ = [
    '__version__',
    'Jsonable', 'JsonableDict', 'HostAndPort', 'LogSink',
    'SsdpError', 'SsdpSocketError', 'UnknownMessageError',
    'SsdpDatagram',
    'SsdpNotification', 'build_notify', 'build_byebye',
    'SsdpSearchResponse', 'build_response',
    'SsdpSearchRequest', 'build_search',
    'SsdpMessage', 'classify', 'parse_message',
    'ServiceView', 'DeviceView', 'RootDeviceView',
    'SsdpService', 'SsdpDevice', 'SsdpRootDevice',
    'server_string', 'unique_service_name',
    'open_multicast_socket', 'close_socket',
    'SsdpReceiver', 'SHUTDOWN', 'drain_queue',
    'SsdpEngine', 'SearchTargetKind', 'resolve_search_target',
    'CaseInsensitiveDict',
    'SSDP_MULTICAST_ADDRESS', 'SSDP_PORT', 'SSDP_TTL', 'SSDP_TIMEOUT', 'NOTIFY_INTERVAL',
    'DEVICE_SCHEMA_PREFIX', 'SERVICE_SCHEMA_PREFIX', 'ROOT_DEVICE_TARGET',
]
