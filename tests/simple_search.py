#!/usr/bin/env python3

import logging
import asyncio
import ssdp_discovery_protocol as ssdp

#logging.basicConfig(level=logging.DEBUG)

async def amain():
    # All parameters to SsdpEngine are optional; they allow you to set the TTL, timeout, multicast address, etc.
    engine = ssdp.SsdpEngine(timeout=3)
    # search() multicasts one M-SEARCH per target, waits for the timeout, and returns everything received
    # in that time. With no targets, it searches for ssdp:all.
    responses = await engine.search('root', ('device', 'MediaServer:1'))
    for response in responses:
        if isinstance(response, ssdp.SsdpSearchResponse):
            print(f"{response.src_addr}: {response.target} {response.usn} {response.location}")

loop = asyncio.new_event_loop()
try:
    asyncio.set_event_loop(loop)
    loop.run_until_complete(amain())
finally:
    loop.close()
