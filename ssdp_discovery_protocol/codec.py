#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Classification of raw SSDP datagrams into typed messages.
"""

from __future__ import annotations

from ssdp_discovery_protocol.internal_types import *

from .exceptions import UnknownMessageError
from .util import split_bytes_at_lf_or_crlf
from .notification import SsdpNotification
from .response import SsdpSearchResponse
from .search import SsdpSearchRequest

SsdpMessage = Union[SsdpNotification, SsdpSearchResponse, SsdpSearchRequest]
"""Any message that the receive loop can deliver."""

MESSAGE_CLASSES: Tuple[Type[SsdpMessage], ...] = (SsdpNotification, SsdpSearchResponse, SsdpSearchRequest)

def classify(raw_data: bytes, src_addr: Optional[HostAndPort]=None) -> SsdpMessage:
    """Returns a SsdpNotification, SsdpSearchResponse or SsdpSearchRequest created from raw_data.

    Raises UnknownMessageError if the first line does not introduce any of them.
    """
    first_line = split_bytes_at_lf_or_crlf(raw_data, 1)[0].decode('utf-8', errors='replace')
    for message_class in MESSAGE_CLASSES:
        if message_class.matches_statement(first_line):
            return message_class(raw_data=raw_data, src_addr=src_addr)
    raise UnknownMessageError(first_line)

parse_message = classify
