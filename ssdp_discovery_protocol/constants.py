#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Constants used by this package"""

SSDP_MULTICAST_ADDRESS = "239.255.255.250"
"""The multicast address used by SSDP for UDP multicast."""

SSDP_PORT = 1900
"""The port number used by SSDP for UDP multicast."""

SSDP_TTL = 4
"""The default multicast and unicast time-to-live (hops) for outgoing packets."""

SSDP_TIMEOUT = 1
"""The default time (in seconds) to wait for responses. Also sent as MX in searches."""

NOTIFY_INTERVAL = 60.0
"""The interval (in seconds) between rounds of alive NOTIFYs while advertising."""

CACHE_MAX_AGE = 120
"""The max-age (in seconds) sent in CACHE-CONTROL headers."""

RECV_BUFFER_SIZE = 1024
"""The size of each datagram read from the socket."""

DEVICE_SCHEMA_PREFIX = "urn:schemas-upnp-org:device"
"""Prefix of standard UPnP device type URNs."""

SERVICE_SCHEMA_PREFIX = "urn:schemas-upnp-org:service"
"""Prefix of standard UPnP service type URNs."""

ROOT_DEVICE_TARGET = "upnp:rootdevice"
"""The search/notification target that identifies root devices."""

ALL_TARGET = "ssdp:all"
"""The search target that matches all devices and services."""

STATUS_ALIVE = "ssdp:alive"
STATUS_BYEBYE = "ssdp:byebye"
