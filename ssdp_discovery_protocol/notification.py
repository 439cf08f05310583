#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SsdpNotification -- a NOTIFY datagram announcing that a device or service has
become available (ssdp:alive) or is going away (ssdp:byebye).
"""

from __future__ import annotations

import re

from ssdp_discovery_protocol.internal_types import *

from .constants import CACHE_MAX_AGE, STATUS_ALIVE, STATUS_BYEBYE
from .ssdp_datagram import SsdpDatagram

NOTIFY_STATEMENT = "NOTIFY * HTTP/1.1"

_max_age_re = re.compile(r'max-age *= *(?P<max_age>[0-9]+)', re.IGNORECASE)

class SsdpNotification(SsdpDatagram):
    _statement_re = re.compile(r'^NOTIFY +\*')

    @property
    def type(self) -> Optional[str]:
        """The notification type (NT header)."""
        return self.get('NT')

    @property
    def status(self) -> Optional[str]:
        """The notification sub type (NTS header): "ssdp:alive" or "ssdp:byebye"."""
        return self.get('NTS')

    @property
    def usn(self) -> Optional[str]:
        return self.get('USN')

    @property
    def location(self) -> Optional[str]:
        """The URL of the device description. None for byebye notifications."""
        return self.get('LOCATION')

    @property
    def server(self) -> Optional[str]:
        return self.get('SERVER')

    @property
    def max_age(self) -> Optional[int]:
        """The max-age directive of the CACHE-CONTROL header, in seconds."""
        value = self.get('CACHE-CONTROL')
        if value is None:
            return None
        m = _max_age_re.search(value)
        return None if m is None else int(m.group('max_age'))

    @property
    def alive(self) -> bool:
        return self.status == STATUS_ALIVE

    @property
    def byebye(self) -> bool:
        return self.status == STATUS_BYEBYE

    @property
    def info(self) -> Optional[str]:
        return self.type

def build_notify(
        broadcast: str,
        port: int,
        location: str,
        target: str,
        usn: str,
        server: str,
      ) -> SsdpNotification:
    """Builds an ssdp:alive NOTIFY for `target`, to be multicast to broadcast:port."""
    return SsdpNotification(
        NOTIFY_STATEMENT,
        [
            ('HOST', f"{broadcast}:{port}"),
            ('CACHE-CONTROL', f"max-age={CACHE_MAX_AGE}"),
            ('LOCATION', location),
            ('NT', target),
            ('NTS', STATUS_ALIVE),
            ('SERVER', server),
            ('USN', usn),
        ]
      )

def build_byebye(broadcast: str, port: int, target: str, usn: str) -> SsdpNotification:
    """Builds an ssdp:byebye NOTIFY for `target`, to be multicast to broadcast:port."""
    return SsdpNotification(
        NOTIFY_STATEMENT,
        [
            ('HOST', f"{broadcast}:{port}"),
            ('NT', target),
            ('NTS', STATUS_BYEBYE),
            ('USN', usn),
        ]
      )
