#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Exceptions defined by this package"""

from __future__ import annotations

from typing import Optional

class SsdpError(Exception):
  """Base class for all error exceptions defined by this package."""
  pass

class SsdpSocketError(SsdpError, OSError):
  """Raised when the multicast socket cannot be created, configured or bound."""
  pass

class UnknownMessageError(SsdpError):
  """Raised when a datagram is not a NOTIFY, M-SEARCH or HTTP response."""

  first_line: Optional[str]
  """The first line of the offending datagram, if it could be decoded."""

  def __init__(self, first_line: Optional[str], msg: Optional[str]=None):
    if msg is None:
      msg = f"Unknown response {first_line!r}"
    super().__init__(msg)
    self.first_line = first_line
