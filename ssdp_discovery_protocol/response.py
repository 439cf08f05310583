#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SsdpSearchResponse -- an "HTTP/1.1 200 OK" datagram sent by a device in answer
to an M-SEARCH request.
"""

from __future__ import annotations

import re

from ssdp_discovery_protocol.internal_types import *

from .constants import CACHE_MAX_AGE, STATUS_ALIVE
from .ssdp_datagram import SsdpDatagram

RESPONSE_STATEMENT = "HTTP/1.1 200 OK"

class SsdpSearchResponse(SsdpDatagram):
    _statement_re = re.compile(r'^HTTP/')

    _response_statement_re = re.compile(r'^HTTP/(?P<version>[0-9]+\.[0-9]+) +(?P<status_code>[0-9]+) *(?P<status>.*?) *$')

    @property
    def target(self) -> Optional[str]:
        """The search target that was matched (ST header)."""
        return self.get('ST')

    @property
    def usn(self) -> Optional[str]:
        return self.get('USN')

    @property
    def location(self) -> Optional[str]:
        return self.get('LOCATION')

    @property
    def server(self) -> Optional[str]:
        return self.get('SERVER')

    @property
    def status_code(self) -> Optional[int]:
        """The status code in the statement line (e.g. 200), or None if it cannot be parsed."""
        m = self._response_statement_re.match(self.statement_line)
        return None if m is None else int(m.group('status_code'))

    @property
    def info(self) -> Optional[str]:
        return self.target

def build_response(location: str, target: str, usn: str, server: str) -> SsdpSearchResponse:
    """Builds a search response announcing `usn` as a match for `target`."""
    return SsdpSearchResponse(
        RESPONSE_STATEMENT,
        [
            ('CACHE-CONTROL', f"max-age={CACHE_MAX_AGE}"),
            ('EXT', ''),
            ('LOCATION', location),
            ('SERVER', server),
            ('ST', target),
            ('NTS', STATUS_ALIVE),
            ('USN', usn),
            ('Content-Length', '0'),
        ]
      )
