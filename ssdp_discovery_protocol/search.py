#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SsdpSearchRequest -- an M-SEARCH datagram asking devices that match a search
target to respond.
"""

from __future__ import annotations

import re

from ssdp_discovery_protocol.internal_types import *

from .ssdp_datagram import SsdpDatagram

SEARCH_STATEMENT = "M-SEARCH * HTTP/1.1"

class SsdpSearchRequest(SsdpDatagram):
    _statement_re = re.compile(r'^M-SEARCH +\*')

    @property
    def target(self) -> Optional[str]:
        """The search target (ST header)."""
        return self.get('ST')

    @property
    def max_wait(self) -> Optional[int]:
        """The maximum number of seconds a device may wait before responding (MX header)."""
        return self._optional_int_header('MX')

    @property
    def man(self) -> Optional[str]:
        return self.get('MAN')

    @property
    def info(self) -> Optional[str]:
        return self.target

def build_search(broadcast: str, port: int, target: str, mx: Union[int, float]) -> SsdpSearchRequest:
    """Builds an M-SEARCH for `target`, to be multicast to broadcast:port."""
    if isinstance(mx, float) and mx.is_integer():
        mx = int(mx)
    return SsdpSearchRequest(
        SEARCH_STATEMENT,
        [
            ('HOST', f"{broadcast}:{port}"),
            ('MAN', '"ssdp:discover"'),
            ('MX', str(mx)),
            ('ST', target),
        ]
      )
