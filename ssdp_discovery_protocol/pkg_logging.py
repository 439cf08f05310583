#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Logging for ssdp_discovery_protocol package.

All modules log through the single package logger. SsdpEngine forwards its own
messages through a pluggable sink that defaults to this logger.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__.rsplit('.', 1)[0])
