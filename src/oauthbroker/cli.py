#!/usr/bin/env python3
"""Command-line utility for the authorization broker."""

import argparse
import json
import sys

from oauthbroker.broker import AuthorizationBroker
from oauthbroker.config import Config
from oauthbroker.errors import AuthorizationCanceled
from oauthbroker.logging_config import setup_logging
from oauthbroker.params import decode_parameters


def _print_params(params, as_json: bool) -> None:
    if as_json:
        print(json.dumps(params, indent=2, sort_keys=True))
        return

    if not params:
        print("(no parameters)")
        return

    for key in sorted(params):
        print(f"{key} = {params[key]}")


def cmd_authorize(args):
    """Run an interactive sign-in and print the response parameters."""
    config = Config()
    setup_logging(args.log_level, config.log_path, default=config.log_level)

    callback_url = args.callback_url or config.callback_url
    if not callback_url:
        print("Error: No callback URL. Pass --callback-url or set callback_url in config.")
        return 1

    broker = AuthorizationBroker(config=config)
    try:
        future = broker.authorize_async(
            args.service_url or args.authorize_url,
            args.authorize_url,
            callback_url,
        )
        params = future.result()
    except AuthorizationCanceled:
        print("✗ Sign-in was canceled")
        return 1
    except Exception as e:
        print(f"✗ Authorization failed: {e}")
        return 1

    print("✓ Authorization complete")
    _print_params(params, args.json)
    return 0


def cmd_decode(args):
    """Decode the parameters of a redirect URL."""
    params = decode_parameters(args.url)
    _print_params(params, args.json)
    return 0


def cmd_config(args):
    """Configure the broker."""
    config = Config()

    if args.list:
        print("Current Configuration:")
        print("=" * 40)
        for key, value in config.items().items():
            print(f"{key} = {value}")
        return 0

    if args.set:
        status = 0
        for item in args.set:
            if '=' not in item:
                print(f"Error: Invalid format '{item}'. Use key=value")
                status = 1
                continue

            key, value = item.split('=', 1)
            try:
                config.set(key, value)
            except ValueError as e:
                print(f"✗ Invalid value for {key}: {e}")
                status = 1
                continue

            print(f"✓ Set {key} = {config.get(key)}")

        return status

    print("Use --list to view config or --set key=value to change config")
    return 0


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='OAuth Authorization Broker - interactive OAuth sign-in for the desktop'
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Authorize command
    auth_parser = subparsers.add_parser('authorize', help='Sign in through the provider page')
    auth_parser.add_argument('--authorize-url', required=True, help='Authorization endpoint with its query parameters')
    auth_parser.add_argument('--callback-url', help='Registered redirect URI (defaults to callback_url from config)')
    auth_parser.add_argument('--service-url', help='URL of the secured service (informational)')
    auth_parser.add_argument('--log-level', help='Override configured log level')
    auth_parser.add_argument('--json', action='store_true', help='Print parameters as JSON')
    auth_parser.set_defaults(func=cmd_authorize)

    # Decode command
    decode_parser = subparsers.add_parser('decode', help='Decode the parameters of a redirect URL')
    decode_parser.add_argument('url', help='Redirect URL')
    decode_parser.add_argument('--json', action='store_true', help='Print parameters as JSON')
    decode_parser.set_defaults(func=cmd_decode)

    # Config command
    config_parser = subparsers.add_parser('config', help='Configure the broker')
    config_parser.add_argument('--list', action='store_true', help='List configuration')
    config_parser.add_argument('--set', nargs='+', help='Set config (key=value)')
    config_parser.set_defaults(func=cmd_config)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
