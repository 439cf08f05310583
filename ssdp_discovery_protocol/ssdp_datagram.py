#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Abstraction of a Datagram packet used in the SSDP protocol.
"""

from __future__ import annotations

import re

from ssdp_discovery_protocol.internal_types import *

from .util import (
    CaseInsensitiveDict,
    split_bytes_at_lf_or_crlf,
    parse_http_headers,
    encode_http_header,
)

class SsdpDatagram:
    """Wrapper for a raw SSDP datagram.

    This class provides parsing and formatting of the HTTP-like packets and a read-only
    dict-like interface to the headers. Instances are immutable once constructed; subclasses
    add typed properties for the headers that matter to a particular message kind.

    Headers are kept in the order given (or received), and are emitted in that order,
    so a datagram built from a statement line and headers is byte-exact.
    """

    _statement_re: ClassVar[Optional[re.Pattern[str]]] = None
    """A pattern that the statement line of this message kind must match. None matches anything."""

    _raw_data: bytes
    """The raw UDP datagram contents"""

    _statement_line: str
    """The first line of the datagram; e.g., "HTTP/1.1 200 OK", "NOTIFY * HTTP/1.1", etc."""

    _headers: CaseInsensitiveDict[str]
    """The undecoded headers, with names spelled as sent."""

    _body: bytes
    """The body of the datagram, if any. If there is no body, b'' is returned."""

    src_addr: Optional[HostAndPort] = None
    """The (host, port) that the datagram was received from, or None if it was built locally."""

    def __init__(
            self,
            statement: Optional[str]=None,
            headers: Optional[Union[Mapping[str, str], Iterable[Tuple[str, str]]]]=None,
            body: Optional[bytes]=None,
            raw_data: Optional[bytes]=None,
            src_addr: Optional[HostAndPort]=None,
          ):
        self.src_addr = src_addr
        if raw_data is None:
            if statement is None:
                raise ValueError("Either statement or raw_data must be provided")
            assert isinstance(statement, str)
            self._statement_line = statement
            self._body = b'' if body is None else body
            self._headers = CaseInsensitiveDict()
            if headers is not None:
                items = headers.items() if isinstance(headers, Mapping) else headers
                for name, value in items:
                    assert isinstance(value, str)
                    self._headers[name] = value
            self._raw_data = self._build_raw_data()
        else:
            assert isinstance(raw_data, bytes)
            if not (statement is None and headers is None and body is None):
                raise ValueError("If raw_data is provided, statement, headers, and body must be None")
            self._raw_data = raw_data
            statement_and_remainder = split_bytes_at_lf_or_crlf(raw_data, 1)
            self._statement_line = statement_and_remainder[0].decode('utf-8', errors='replace')
            headers_and_body = b'' if len(statement_and_remainder) < 2 else statement_and_remainder[1]
            self._headers, self._body = parse_http_headers(headers_and_body)

    @classmethod
    def matches_statement(cls, statement_line: str) -> bool:
        """Returns True if statement_line introduces a datagram of this class."""
        return cls._statement_re is None or cls._statement_re.match(statement_line) is not None

    def __str__(self) -> str:
        return f"{type(self).__name__}('{self._statement_line}', headers={dict(self._headers)}, src_addr={self.src_addr})"

    def __repr__(self) -> str:
        return str(self)

    @property
    def raw_data(self) -> bytes:
        """The raw UDP datagram contents"""
        return self._raw_data

    @property
    def statement_line(self) -> str:
        """The first line of the datagram; e.g., "HTTP/1.1 200 OK", "NOTIFY * HTTP/1.1", etc."""
        return self._statement_line

    @property
    def method(self) -> str:
        """The first token of the statement line; e.g., "NOTIFY", "M-SEARCH" or "HTTP/1.1"."""
        parts = self._statement_line.split(None, 1)
        return parts[0] if len(parts) > 0 else ''

    @property
    def body(self) -> bytes:
        """The body of the datagram, if any. If there is no body, b'' is returned."""
        return self._body

    @property
    def headers(self) -> CaseInsensitiveDict[str]:
        """A copy of the raw headers. Lookups ignore case; names keep their original spelling."""
        return self._headers.copy()

    @property
    def info(self) -> Optional[str]:
        """The identifying field of this message kind (NT or ST), used in log messages."""
        return None

    def get(self, name: str, default: Optional[str]=None) -> Optional[str]:
        return self._headers.get(name, default)

    def __getitem__(self, name: str) -> str:
        return self._headers[name]

    def __contains__(self, name: object) -> bool:
        return name in self._headers

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, SsdpDatagram) or type(self) is not type(other):
            return False
        # src_addr is where the datagram came from, not part of its content
        return (self._statement_line == other._statement_line and
                list(self._headers.items()) == list(other._headers.items()) and
                self._body == other._body)

    __hash__ = None  # type: ignore[assignment]

    def _build_raw_data(self) -> bytes:
        """Build the raw data from the statement line, headers, and body."""
        raw_data = self._statement_line.encode('utf-8') + b'\r\n'
        for k, v in self._headers.items():
            raw_data += encode_http_header(k, v)
        raw_data += b'\r\n'
        raw_data += self._body
        return raw_data

    def _optional_int_header(self, name: str) -> Optional[int]:
        value = self._headers.get(name)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None
