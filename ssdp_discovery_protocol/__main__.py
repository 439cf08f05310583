#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

import sys
import argparse
import json
import asyncio
import logging
from signal import SIGINT, SIGTERM

from ssdp_discovery_protocol.internal_types import *

from ssdp_discovery_protocol import (
    __version__ as pkg_version,
    SsdpEngine,
    SsdpMessage,
    SsdpNotification,
    SsdpSearchResponse,
    SsdpSearchRequest,
    SearchTargetKind,
    SSDP_TIMEOUT,
  )

class CmdExitError(RuntimeError):
    exit_code: int

    def __init__(self, exit_code: int, msg: Optional[str]=None):
        if msg is None:
            msg = f"Command exited with return code {exit_code}"
        super().__init__(msg)
        self.exit_code = exit_code

class ArgparseExitError(CmdExitError):
    pass

class NoExitArgumentParser(argparse.ArgumentParser):
    def exit(self, status=0, message=None):
        if message:
            self._print_message(message, sys.stderr)
        raise ArgparseExitError(status, message)

def parse_cli_target(arg: str) -> Union[str, Tuple[str, str]]:
    """Converts a command-line search target into a form accepted by SsdpEngine.search():
       "root", "device:<type:version>", "service:<type:version>", or a raw urn:/uuid:/ssdp: target."""
    for kind in (SearchTargetKind.DEVICE, SearchTargetKind.SERVICE):
        prefix = kind.value + ':'
        if arg.startswith(prefix):
            return (kind.value, arg[len(prefix):])
    return arg

def summarize_message(message: SsdpMessage) -> JsonableDict:
    summary: JsonableDict = {
        "statement": message.statement_line,
        "headers": dict(message.headers),
    }
    if message.src_addr is not None:
        summary["src_addr"] = f"{message.src_addr[0]}:{message.src_addr[1]}"
    if isinstance(message, SsdpNotification):
        summary["kind"] = "notification"
        summary["type"] = message.type
        summary["status"] = message.status
        summary["usn"] = message.usn
        summary["location"] = message.location
    elif isinstance(message, SsdpSearchResponse):
        summary["kind"] = "response"
        summary["target"] = message.target
        summary["usn"] = message.usn
        summary["location"] = message.location
    else:
        assert isinstance(message, SsdpSearchRequest)
        summary["kind"] = "search"
        summary["target"] = message.target
        summary["max_wait"] = message.max_wait
    return summary

class CommandHandler:
    _argv: Optional[Sequence[str]]
    _parser: argparse.ArgumentParser
    _args: argparse.Namespace
    _provide_traceback: bool = True

    def __init__(self, argv: Optional[Sequence[str]]=None):
        self._argv = argv

    async def cmd_bare(self) -> int:
        print("A command is required", file=sys.stderr)
        return 1

    def _print_message(self, message: SsdpMessage) -> None:
        print(json.dumps(summarize_message(message), indent=2, sort_keys=True))
        sys.stdout.flush()

    async def cmd_search(self) -> int:
        engine = SsdpEngine(timeout=self._args.timeout)
        targets = [ parse_cli_target(x) for x in self._args.targets ]
        for message in await engine.search(*targets):
            if self._args.all or isinstance(message, SsdpSearchResponse):
                self._print_message(message)
        return 0

    async def cmd_discover(self) -> int:
        engine = SsdpEngine(timeout=self._args.timeout)
        if not self._args.follow:
            for message in await engine.discover():
                if self._args.all or isinstance(message, SsdpNotification):
                    self._print_message(message)
            return 0

        def on_message(message: SsdpMessage) -> None:
            if self._args.all or isinstance(message, SsdpNotification):
                self._print_message(message)

        loop = asyncio.get_running_loop()
        discover_task = asyncio.create_task(engine.discover(on_message))
        for signal in (SIGINT, SIGTERM):
            loop.add_signal_handler(signal, discover_task.cancel)
        try:
            await discover_task
        except asyncio.CancelledError:
            logging.debug("cmd_discover: Detected SIGINT/SIGTERM; exiting")
        finally:
            for signal in (SIGINT, SIGTERM):
                loop.remove_signal_handler(signal)
        return 0

    async def cmd_version(self) -> int:
        print(pkg_version)
        return 0

    async def arun(self) -> int:
        """Run the ssdp command-line tool with provided arguments

        Args:
            argv (Optional[Sequence[str]], optional):
                A list of commandline arguments (NOT including the program as argv[0]!),
                or None to use sys.argv[1:]. Defaults to None.

        Returns:
            int: The exit code that would be returned if this were run as a standalone command.
        """
        parser = NoExitArgumentParser(description="Discover UPnP devices and services with SSDP.")


        # ======================= Main command

        self._parser = parser
        parser.add_argument('--traceback', "--tb", action='store_true', default=False,
                            help='Display detailed exception information')
        parser.add_argument('--log-level', dest='log_level', default='warning',
                            choices=['debug', 'info', 'warning', 'error', 'critical'],
                            help='''The logging level to use. Default: warning''')
        parser.set_defaults(func=self.cmd_bare)

        subparsers = parser.add_subparsers(
                            title='Commands',
                            description='Valid commands',
                            help='Additional help available with "<command-name> -h"')


        # ======================= search

        parser_search = subparsers.add_parser('search', description="Search for UPnP devices and services")
        parser_search.add_argument('targets', nargs='*', default=[],
                            help='''Search targets: "root", "device:<type:version>", "service:<type:version>",
                                    or a raw urn:, uuid: or ssdp: target. Default: ssdp:all''')
        parser_search.add_argument('--timeout', type=float, default=SSDP_TIMEOUT,
                            help=f'''The amount of time to wait for responses, in seconds. Default: {SSDP_TIMEOUT}''')
        parser_search.add_argument('--all', action='store_true', default=False,
                            help='Print every message received, not just search responses')
        parser_search.set_defaults(func=self.cmd_search)

        # ======================= discover

        parser_discover = subparsers.add_parser('discover', description="Listen for device announcements")
        parser_discover.add_argument('--timeout', type=float, default=SSDP_TIMEOUT,
                            help=f'''The amount of time to listen, in seconds. Default: {SSDP_TIMEOUT}''')
        parser_discover.add_argument('-f', '--follow', action='store_true', default=False,
                            help='Print announcements as they arrive until interrupted')
        parser_discover.add_argument('--all', action='store_true', default=False,
                            help='Print every message received, not just NOTIFYs')
        parser_discover.set_defaults(func=self.cmd_discover)

        # ======================= version

        parser_version = subparsers.add_parser('version',
                                description='''Display version information.''')
        parser_version.set_defaults(func=self.cmd_version)

        # =========================================================

        try:
            args = parser.parse_args(self._argv)
        except ArgparseExitError as ex:
            return ex.exit_code
        traceback: bool = args.traceback
        self._provide_traceback = traceback

        try:
            logging.basicConfig(
                level=logging.getLevelName(args.log_level.upper()),
            )
            self._args = args
            func: Callable[[], Awaitable[int]] = args.func
            logging.debug(f"Running command {func.__name__}, tb = {traceback}")
            rc = await func()
            logging.debug(f"Command {func.__name__} returned {rc}")
        except Exception as ex:
            if isinstance(ex, CmdExitError):
                rc = ex.exit_code
            else:
                rc = 1
            if rc != 0:
                if traceback:
                    raise
            print(f"ssdp: error: {ex}", file=sys.stderr)
        except BaseException as ex:
            print(f"ssdp: Unhandled exception: {ex}", file=sys.stderr)
            raise

        return rc

    def run(self) -> int:
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            rc = loop.run_until_complete(self.arun())
        finally:
            loop.close()
        return rc

def run(argv: Optional[Sequence[str]]=None) -> int:
    try:
        rc = CommandHandler(argv).run()
    except CmdExitError as ex:
        rc = ex.exit_code
    return rc

async def arun(argv: Optional[Sequence[str]]=None) -> int:
    try:
        rc = await CommandHandler(argv).arun()
    except CmdExitError as ex:
        rc = ex.exit_code
    return rc

# allow running with "python3 -m", or as a standalone script
if __name__ == "__main__":
    sys.exit(run())
