#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Type hints used internally by this package"""

from __future__ import annotations

from typing import (
    Dict, List, Optional, Union, Any, Tuple, Set, Callable, Awaitable, ClassVar,
    Mapping, MutableMapping, Iterable, Iterator, Sequence, Type,
    AsyncIterator, AsyncIterable, AsyncContextManager, TYPE_CHECKING,
  )

from types import TracebackType

from typing_extensions import Self, Protocol, runtime_checkable

HostAndPort = Tuple[str, int]
"""An (ip_address, port) tuple as used by socket.sendto() and socket.recvfrom()."""

LogSink = Callable[[int, str], None]
"""A leveled logging sink, called with a logging level number and a message."""

Jsonable = Union[str, int, float, bool, None, Dict[str, Any], List[Any]]
"""A value that can be serialized with json.dumps()."""

JsonableDict = Dict[str, Jsonable]
"""A dict that can be serialized with json.dumps()."""
