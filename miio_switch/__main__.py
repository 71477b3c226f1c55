#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

import sys
import os
import argparse
import logging

from miio_switch.internal_types import *

from miio_switch import (
    __version__ as pkg_version,
    MiioConfig,
    set_switch,
    get_switch,
    discover,
  )
from miio_switch.token_store import KeyringTokenStore

TOKEN_ENV_VAR = "MIIO_TOKEN"

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

class CommandHandler:
    _argv: Optional[Sequence[str]]
    _parser: argparse.ArgumentParser
    _args: argparse.Namespace
    _provide_traceback: bool = True
    _token_store: Optional[KeyringTokenStore] = None

    def __init__(self, argv: Optional[Sequence[str]]=None, token_store: Optional[KeyringTokenStore]=None):
        self._argv = argv
        self._token_store = token_store

    def get_token_store(self) -> KeyringTokenStore:
        if self._token_store is None:
            self._token_store = KeyringTokenStore()
        return self._token_store

    def get_config(self) -> MiioConfig:
        port: Optional[int] = self._args.port
        return MiioConfig.from_env(port=port)

    def get_token(self, host: str) -> str:
        """The token from --token, else $MIIO_TOKEN, else the keyring entry for host."""
        token: Optional[str] = self._args.token
        if token is None:
            token = os.environ.get(TOKEN_ENV_VAR)
        if token is None or token == '':
            try:
                token = self.get_token_store().get_token(host)
            except KeyError as e:
                raise CmdExitError(1, f"No token for {host}; use --token, ${TOKEN_ENV_VAR}, or 'token set'") from e
        return token

    def cmd_bare(self) -> int:
        print("A command is required", file=sys.stderr)
        return 1

    def cmd_on(self) -> int:
        host: str = self._args.host
        set_switch(host, self.get_token(host), True, config=self.get_config())
        return 0

    def cmd_off(self) -> int:
        host: str = self._args.host
        set_switch(host, self.get_token(host), False, config=self.get_config())
        return 0

    def cmd_status(self) -> int:
        host: str = self._args.host
        on = get_switch(host, self.get_token(host), config=self.get_config())
        print("on" if on else "off")
        return 0

    def cmd_discover(self) -> int:
        host: str = self._args.host
        identity = discover(host, self.get_config())
        print(f"device_id={identity.device_id.hex()} stamp={identity.stamp.hex()}")
        return 0

    def cmd_token_set(self) -> int:
        self.get_token_store().set_token(self._args.host, self._args.new_token)
        return 0

    def cmd_token_delete(self) -> int:
        self.get_token_store().delete_token(self._args.host)
        return 0

    def cmd_version(self) -> int:
        print(pkg_version)
        return 0

    def run(self) -> int:
        """Run the miio-switch command-line tool with provided arguments

        Args:
            argv (Optional[Sequence[str]], optional):
                A list of commandline arguments (NOT including the program as argv[0]!),
                or None to use sys.argv[1:]. Defaults to None.

        Returns:
            int: The exit code that would be returned if this were run as a standalone command.
        """
        parser = NoExitArgumentParser(description="Control a Xiaomi Mi smart plug on the local network.")


        # ======================= Main command

        self._parser = parser
        parser.add_argument('--traceback', "--tb", action='store_true', default=False,
                            help='Display detailed exception information')
        parser.add_argument('--log-level', dest='log_level', default='warning',
                            choices=['debug', 'info', 'warning', 'error', 'critical'],
                            help='''The logging level to use. Default: warning''')
        parser.add_argument('-t', '--token', default=None,
                            help=f'''The 32-character hex device token. Default: ${TOKEN_ENV_VAR}, or the token stored in the keyring for the host''')
        parser.add_argument('-p', '--port', type=int, default=None,
                            help='''The device UDP port. Default: $MIIO_PORT, or 54321''')
        parser.set_defaults(func=self.cmd_bare)

        subparsers = parser.add_subparsers(
                            title='Commands',
                            description='Valid commands',
                            help='Additional help available with "<command-name> -h"')


        # ======================= on / off / status / discover

        parser_on = subparsers.add_parser('on', description="Turn the plug on")
        parser_on.add_argument('host', help='The device IP address or host name')
        parser_on.set_defaults(func=self.cmd_on)

        parser_off = subparsers.add_parser('off', description="Turn the plug off")
        parser_off.add_argument('host', help='The device IP address or host name')
        parser_off.set_defaults(func=self.cmd_off)

        parser_status = subparsers.add_parser('status', description="Print 'on' or 'off'")
        parser_status.add_argument('host', help='The device IP address or host name')
        parser_status.set_defaults(func=self.cmd_status)

        parser_discover = subparsers.add_parser('discover', description="Print the device id and stamp of a device")
        parser_discover.add_argument('host', help='The device IP address or host name')
        parser_discover.set_defaults(func=self.cmd_discover)

        # ======================= token

        parser_token = subparsers.add_parser('token', description="Manage device tokens stored in the keyring")
        token_subparsers = parser_token.add_subparsers(title='Token commands')

        parser_token_set = token_subparsers.add_parser('set', description="Store the token for a host")
        parser_token_set.add_argument('host', help='The device IP address or host name')
        parser_token_set.add_argument('new_token', help='The 32-character hex device token')
        parser_token_set.set_defaults(func=self.cmd_token_set)

        parser_token_delete = token_subparsers.add_parser('delete', description="Delete the token for a host")
        parser_token_delete.add_argument('host', help='The device IP address or host name')
        parser_token_delete.set_defaults(func=self.cmd_token_delete)

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
            func: Callable[[], int] = args.func
            logging.debug(f"Running command {func.__name__}, tb = {traceback}")
            rc = func()
            logging.debug(f"Command {func.__name__} returned {rc}")
        except Exception as ex:
            if isinstance(ex, CmdExitError):
                rc = ex.exit_code
            else:
                rc = 1
            if rc != 0:
                if traceback:
                    raise
            print(f"miio-switch: error: {ex}", file=sys.stderr)
        except BaseException as ex:
            print(f"miio-switch: Unhandled exception: {ex}", file=sys.stderr)
            raise

        return rc

def run(argv: Optional[Sequence[str]]=None) -> int:
    try:
        rc = CommandHandler(argv).run()
    except CmdExitError as ex:
        rc = ex.exit_code
    return rc

def main() -> None:
    sys.exit(run())

# allow running with "python3 -m", or as a standalone script
if __name__ == "__main__":
    main()
