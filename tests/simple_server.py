#!/usr/bin/env python3

import logging
import asyncio
import ssdp_discovery_protocol as ssdp

logging.basicConfig(level=logging.DEBUG)

root_device = ssdp.SsdpRootDevice(
    "uuid:4d696e69-444c-164e-9d41-b827eb000001",
    "urn:schemas-upnp-org:device:MediaServer:1",
    "1.0",
    devices=[
        ssdp.SsdpDevice(
            "uuid:4d696e69-444c-164e-9d41-b827eb000002",
            "urn:schemas-upnp-org:device:MediaRenderer:1",
          ),
    ],
    services=[
        ssdp.SsdpService("urn:schemas-upnp-org:service:ContentDirectory:1"),
        ssdp.SsdpService("urn:schemas-upnp-org:service:ConnectionManager:1"),
    ],
    kind="AcmeMediaServer",
  )

async def amain():
    engine = ssdp.SsdpEngine()
    # advertise() sends NOTIFYs every 60 seconds and answers searches until it is cancelled (e.g., with ^C).
    # The device description is assumed to be served at http://<host>:8080/description.
    try:
        await engine.advertise(root_device, 8080)
    finally:
        await engine.byebye(root_device)

# asyncio.run() cancels amain() on ^C, so the byebye is still sent
try:
    asyncio.run(amain())
except KeyboardInterrupt:
    pass
